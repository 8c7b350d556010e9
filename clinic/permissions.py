"""
Permission classes for the two authentication stages.

Every route first authenticates the calling application (the API key
header must match an active ``ApiClient``) and then the user.  Role
checks are done by the controllers against ``STAFF_ROLES`` and
``ADMIN_ROLES``.
"""
from __future__ import annotations

from django.conf import settings
from django.core.cache import cache
from rest_framework.permissions import BasePermission

from .models import ApiClient, User

STAFF_ROLES = {User.ROLE_DOCTOR, User.ROLE_ADMIN, User.ROLE_SYSTEM}
ADMIN_ROLES = {User.ROLE_ADMIN, User.ROLE_SYSTEM}

CLIENT_CACHE_TTL = 60


def get_api_client(api_key: str | None) -> dict | None:
    """Look up an active API client by key, cached briefly."""
    if not api_key:
        return None
    cache_key = f"api-client:{api_key}"
    client = cache.get(cache_key)
    if client is None:
        obj = ApiClient.objects.filter(api_key=api_key, is_active=True).first()
        client = {'ClientCode': obj.client_code, 'Name': obj.name} if obj else {}
        cache.set(cache_key, client, CLIENT_CACHE_TTL)
    return client or None


class IsAuthenticatedClient(BasePermission):
    """The calling application must present a valid API key."""
    message = 'Invalid or missing API client key.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        client = get_api_client(request.headers.get(settings.API_CLIENT_HEADER))
        request.client = client
        return client is not None


class IsAuthenticatedUser(BasePermission):
    """Allow access only to authenticated users (``request.user`` may be None)."""

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, 'user', None)
        return bool(user and user.is_authenticated and user.is_active)
