"""
Shared helpers for domain models, DTOs and search results.

Attributes are snake_case in Python and PascalCase on the wire
(``patient_user_id`` <-> ``PatientUserId``); ``id`` is left as-is.
"""
from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Optional

# Wire names that do not follow the plain PascalCase rule
WIRE_NAME_OVERRIDES = {
    'id': 'id',
    'ios_downloads': 'IOSDownloads',
}


def wire_name(attr: str) -> str:
    if attr in WIRE_NAME_OVERRIDES:
        return WIRE_NAME_OVERRIDES[attr]
    return ''.join(part[:1].upper() + part[1:] for part in attr.split('_'))


def to_wire(value: Any) -> Any:
    """Convert a DTO (or nested structure of DTOs) into JSON-ready data."""
    if is_dataclass(value) and not isinstance(value, type):
        return {wire_name(f.name): to_wire(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value]
    if isinstance(value, dict):
        return {k: to_wire(v) for k, v in value.items()}
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (dt.datetime, dt.date)):
        return value.isoformat()
    return value


def from_wire(cls, data: dict):
    """Build dataclass ``cls`` from a PascalCase dict; absent keys become None."""
    kwargs = {}
    for f in fields(cls):
        key = wire_name(f.name)
        if key in data:
            kwargs[f.name] = data[key]
    return cls(**kwargs)


@dataclass
class BaseSearchFilters:
    order_by: Optional[str] = None
    order: str = 'ascending'
    page_index: int = 0
    items_per_page: int = 25


@dataclass
class SearchResults:
    total_count: int
    retrieved_count: int
    page_index: int
    items_per_page: int
    order: str
    ordered_by: str
    items: list = field(default_factory=list)
