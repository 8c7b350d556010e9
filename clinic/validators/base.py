"""
Request validation.

Field rules are declared on DRF serializers (PascalCase body fields,
camelCase query fields).  A validator runs the serializer, collects every
failing field into one ``ValidationFailed`` and turns the cleaned data
into a domain model or search filter object.
"""
from __future__ import annotations

import re
import uuid
from dataclasses import fields

import bleach
from django.conf import settings
from rest_framework import serializers

from ..domain.base import from_wire
from ..exceptions import ValidationFailed

PHONE_RE = re.compile(r'^(\+\d{1,4}-)?\d{6,15}$')


def sanitize_phone(value: str) -> str:
    """Keep one dash after a leading country code, drop other separators."""
    value = (value or '').strip()
    value = re.sub(r'^(\+\d{1,4})[\s\-]+', r'\1-', value)
    if value.startswith('+') and '-' in value:
        code, _, number = value.partition('-')
        digits = re.sub(r'[\s()\-]', '', number)
        return f"{code}-{digits}"
    return re.sub(r'[\s()\-]', '', value)


def guess_prefix(gender: str | None) -> str | None:
    if not gender:
        return None
    gender = gender.lower()
    if gender == 'male':
        return 'Mr.'
    if gender == 'female':
        return 'Miss'
    return None


def camel_name(attr: str) -> str:
    head, *rest = attr.split('_')
    return head + ''.join(p[:1].upper() + p[1:] for p in rest)


class SanitizedCharField(serializers.CharField):
    """Trimmed string with markup stripped and special characters escaped."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        return bleach.clean(value, tags=[], strip=True)


class PhoneField(serializers.CharField):
    default_error_messages = {
        'invalid_phone': 'Phone number is invalid; expected an optional +<country code>- prefix and 6 to 15 digits.',
    }

    def to_internal_value(self, data):
        value = sanitize_phone(super().to_internal_value(data))
        if not PHONE_RE.match(value):
            self.fail('invalid_phone')
        return value


class BaseSearchQuerySerializer(serializers.Serializer):
    orderBy = serializers.CharField(required=False, max_length=64)
    order = serializers.ChoiceField(required=False, choices=['ascending', 'descending'])
    pageIndex = serializers.IntegerField(required=False)
    itemsPerPage = serializers.IntegerField(required=False, min_value=1, max_value=500)


class BaseValidator:

    def get_param_uuid(self, kwargs: dict, name: str) -> str:
        value = kwargs.get(name)
        try:
            return str(uuid.UUID(str(value)))
        except (TypeError, ValueError):
            raise ValidationFailed(f"{name} must be a valid UUID.", errors={name: ['Must be a valid UUID.']})

    def get_param_id(self, kwargs: dict, name: str) -> str:
        value = (kwargs.get(name) or '').strip()
        if not value or len(value) > 64:
            raise ValidationFailed(f"{name} is invalid.", errors={name: ['Must be a non-empty id.']})
        return value

    def validate(self, serializer_class, data, partial: bool = False) -> dict:
        """Run the serializer; every failing field is reported at once."""
        s = serializer_class(data=data, partial=partial)
        if not s.is_valid():
            errors = {k: [str(m) for m in (v if isinstance(v, list) else [v])] for k, v in s.errors.items()}
            fields_list = ', '.join(sorted(errors))
            raise ValidationFailed(f"Validation failed for: {fields_list}", errors=errors)
        return dict(s.validated_data)

    def base_search_filters(self, validated: dict) -> dict:
        return {
            'order_by': validated.get('orderBy'),
            'order': validated.get('order') or 'ascending',
            'page_index': max(validated.get('pageIndex') or 0, 0),
            'items_per_page': validated.get('itemsPerPage') or settings.DEFAULT_ITEMS_PER_PAGE,
        }

    def to_model(self, cls, validated: dict, **extra):
        model = from_wire(cls, validated)
        for name, value in extra.items():
            setattr(model, name, value)
        return model

    def to_filters(self, cls, validated: dict, **extra):
        """Build a search filter object from camelCase query parameters."""
        values = self.base_search_filters(validated)
        for f in fields(cls):
            if f.name in values:
                continue
            key = camel_name(f.name)
            if key in validated:
                values[f.name] = validated[key]
        values.update(extra)
        return cls(**values)
