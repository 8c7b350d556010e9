"""
Authentication classes for the user stage of a request.

Requests carry either a legacy DRF token (``Authorization: Token <key>``)
or a JWT access token (``Authorization: Bearer <jwt>``).  The JWT class is
configured directly from simplejwt in settings; this module keeps the
token class importable from a stable path so that DRF does not import
view modules while it initialises authentication classes.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """Legacy token authentication using the ``Token`` keyword.

    Tokens of deactivated users are rejected by the DRF base class.
    """

    keyword = 'Token'
