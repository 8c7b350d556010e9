"""Plain data types passed between validators, services and repositories.

Domain models describe what a caller wants written, DTOs describe what is
read back.  Neither carries ORM objects.
"""
from .base import BaseSearchFilters, SearchResults, from_wire, to_wire  # noqa: F401
