"""
Generic repository over a Django model.

Subclasses declare the model, the writable fields, how search filters map
onto ORM lookups and how a row becomes a DTO.  All public operations are
wrapped by :func:`storage_operation`, so ORM exceptions never escape a
repository: they are logged and re-raised as ``InternalError``.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Optional

from django.conf import settings
from django.db.models import Value
from django.db.models.functions import StrIndex
from django.utils import timezone

from ..domain.base import BaseSearchFilters, SearchResults
from ..exceptions import ApiError, InternalError

logger = logging.getLogger(__name__)

ASCENDING = 'ascending'
DESCENDING = 'descending'


def storage_operation(func):
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except ApiError:
            raise
        except Exception as exc:
            logger.error('%s.%s failed: %s', type(self).__name__, func.__name__, exc)
            raise InternalError(str(exc)) from exc
    return wrapper


class BaseRepo:
    model: Any = None
    # domain model attribute names written to the row of the same name
    writable_fields: tuple[str, ...] = ()
    # filter attribute -> ORM lookup, exact match
    exact_filters: dict[str, str] = {}
    # filter attribute -> ORM field, case-sensitive substring match
    contains_filters: dict[str, str] = {}
    # ORM field -> (lower filter attribute, upper filter attribute), inclusive
    range_filters: dict[str, tuple[str, str]] = {}
    # wire column name -> ORM field
    order_columns: dict[str, str] = {'CreatedAt': 'created_at'}
    default_order_column = 'CreatedAt'

    def to_dto(self, row):
        raise NotImplementedError

    def queryset(self):
        return self.model.objects.all()

    # -- CRUD -----------------------------------------------------------

    @storage_operation
    def create(self, model):
        values = {name: getattr(model, name) for name in self.writable_fields
                  if getattr(model, name, None) is not None}
        row = self.model.objects.create(**values)
        return self.get_by_id(row.pk)

    @storage_operation
    def get_by_id(self, id):
        row = self.queryset().filter(pk=id).first()
        return self.to_dto(row) if row is not None else None

    @storage_operation
    def update(self, id, model):
        """Write only the fields that are present and differ, then re-read.

        Returns None when the row no longer exists.
        """
        row = self.model.objects.filter(pk=id).first()
        if row is None:
            return None
        changes = self.changed_fields(row, model)
        if changes:
            if any(f.name == 'updated_at' for f in self.model._meta.concrete_fields):
                changes['updated_at'] = timezone.now()
            self.model.objects.filter(pk=id).update(**changes)
        return self.get_by_id(id)

    @storage_operation
    def delete(self, id) -> bool:
        count, _ = self.model.objects.filter(pk=id).delete()
        return count > 0

    def changed_fields(self, row, model) -> dict:
        changes = {}
        for name in self.writable_fields:
            value = getattr(model, name, None)
            if value is not None and getattr(row, name) != value:
                changes[name] = value
        return changes

    # -- search ---------------------------------------------------------

    @storage_operation
    def search(self, filters: BaseSearchFilters) -> SearchResults:
        qs = self.apply_filters(self.queryset(), filters)
        total = qs.count()

        ordered_by, column = self.order_column(filters.order_by)
        order = DESCENDING if filters.order == DESCENDING else ASCENDING
        sign = '-' if order == DESCENDING else ''
        qs = qs.order_by(f"{sign}{column}", f"{sign}pk")

        page_index = max(filters.page_index or 0, 0)
        items_per_page = filters.items_per_page or settings.DEFAULT_ITEMS_PER_PAGE
        offset = page_index * items_per_page
        rows = list(qs[offset:offset + items_per_page])

        return SearchResults(
            total_count=total,
            retrieved_count=len(rows),
            page_index=page_index,
            items_per_page=items_per_page,
            order=order,
            ordered_by=ordered_by,
            items=[self.to_dto(r) for r in rows],
        )

    def order_column(self, order_by: Optional[str]) -> tuple[str, str]:
        if order_by and order_by in self.order_columns:
            return order_by, self.order_columns[order_by]
        return self.default_order_column, self.order_columns[self.default_order_column]

    def apply_filters(self, qs, filters):
        for attr, lookup in self.exact_filters.items():
            value = getattr(filters, attr, None)
            if value is not None:
                qs = qs.filter(**{lookup: value})
        for attr, column in self.contains_filters.items():
            value = getattr(filters, attr, None)
            if value:
                qs = filter_contains(qs, column, value)
        for column, (lower_attr, upper_attr) in self.range_filters.items():
            qs = apply_range(qs, column, getattr(filters, lower_attr, None), getattr(filters, upper_attr, None))
        return self.apply_extra_filters(qs, filters)

    def apply_extra_filters(self, qs, filters):
        return qs


def contains_position(column: str, value: str) -> StrIndex:
    """1-based position of ``value`` in ``column``, 0 when absent; exact-case on SQLite and PostgreSQL."""
    return StrIndex(column, Value(str(value)))


def filter_contains(qs, column: str, value: str):
    # __contains folds case on SQLite
    alias = f"_pos_{column.replace('__', '_')}"
    return qs.annotate(**{alias: contains_position(column, value)}).filter(**{f"{alias}__gt": 0})


def apply_range(qs, column: str, lower, upper):
    """Inclusive range; either bound may be absent."""
    if lower is not None and upper is not None:
        return qs.filter(**{f"{column}__gte": lower, f"{column}__lte": upper})
    if lower is not None:
        return qs.filter(**{f"{column}__gte": lower})
    if upper is not None:
        return qs.filter(**{f"{column}__lte": upper})
    return qs
