"""Aggregations over users and application downloads."""
from __future__ import annotations

import datetime as dt
from collections import Counter

from django.db.models import Count
from django.utils import timezone

from ..domain.statistics import AgeFilters, AppDownloadDomainModel, AppDownloadDto, StatisticsFilters
from ..models import AppDownload, User
from .base import storage_operation

AGE_GROUPS = [
    ('Below 35', 0, 34),
    ('35 to 70', 35, 70),
    ('Above 70', 71, 200),
]


def _age(birth_date: dt.date, today: dt.date) -> int:
    return today.year - birth_date.year - ((today.month, today.day) < (birth_date.month, birth_date.day))


def _patients(filters: StatisticsFilters | AgeFilters | None = None):
    qs = User.objects.filter(role=User.ROLE_PATIENT, is_active=True)
    if filters is None:
        return qs
    if filters.year:
        qs = qs.filter(date_joined__year=filters.year)
    if isinstance(filters, StatisticsFilters):
        if filters.month:
            qs = qs.filter(date_joined__month=filters.month)
        if filters.date_from:
            qs = qs.filter(date_joined__date__gte=filters.date_from)
        if filters.date_to:
            qs = qs.filter(date_joined__date__lte=filters.date_to)
        if filters.past_months:
            since = timezone.now() - dt.timedelta(days=30 * filters.past_months)
            qs = qs.filter(date_joined__gte=since)
    return qs


def _percentage(count: int, total: int) -> float:
    return round(count * 100.0 / total, 2) if total else 0.0


class StatisticsRepo:

    @storage_operation
    def get_users_by_age(self, filters: AgeFilters) -> list[dict]:
        today = timezone.localdate()
        ages = [_age(b, today) for b in _patients(filters).exclude(birth_date=None).values_list('birth_date', flat=True)]
        if filters.age_from is not None or filters.age_to is not None:
            low = filters.age_from if filters.age_from is not None else 0
            high = filters.age_to if filters.age_to is not None else 200
            groups = [(f"{low} to {high}", low, high)]
        else:
            groups = AGE_GROUPS
        not_specified = _patients(filters).filter(birth_date=None).count()
        total = len(ages) + not_specified
        out = []
        for name, low, high in groups:
            count = sum(1 for a in ages if low <= a <= high)
            out.append({'Status': name, 'Count': count, 'Ratio': _percentage(count, total)})
        out.append({'Status': 'Not specified', 'Count': not_specified, 'Ratio': _percentage(not_specified, total)})
        return out

    @storage_operation
    def get_users_by_gender(self, filters: StatisticsFilters) -> list[dict]:
        rows = _patients(filters).values('gender').annotate(count=Count('pk')).order_by('gender')
        counts: Counter = Counter()
        for r in rows:
            label = r['gender'].capitalize() if r['gender'] else 'Not specified'
            counts[label] += r['count']
        total = sum(counts.values())
        return [{'Status': k, 'Count': v, 'Ratio': _percentage(v, total)} for k, v in sorted(counts.items())]

    @storage_operation
    def upsert_app_downloads(self, model: AppDownloadDomainModel) -> AppDownloadDto:
        defaults = {
            k: v for k, v in (
                ('total_downloads', model.total_downloads),
                ('ios_downloads', model.ios_downloads),
                ('android_downloads', model.android_downloads),
            ) if v is not None
        }
        row, _ = AppDownload.objects.update_or_create(app_name=model.app_name, defaults=defaults)
        return self._app_download_dto(row)

    @storage_operation
    def get_app_downloads(self) -> list[AppDownloadDto]:
        return [self._app_download_dto(r) for r in AppDownload.objects.order_by('app_name')]

    def _app_download_dto(self, row: AppDownload) -> AppDownloadDto:
        return AppDownloadDto(
            app_name=row.app_name,
            total_downloads=row.total_downloads,
            ios_downloads=row.ios_downloads,
            android_downloads=row.android_downloads,
            updated_at=row.updated_at,
        )
