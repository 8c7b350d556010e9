"""
Error taxonomy and the DRF exception handler.

Every error a validator, service or controller raises is an ``ApiError``
carrying its HTTP status.  Controller actions convert them to the
response envelope through ``ResponseHandler.handle_error``; errors raised
before an action runs (authentication, permissions, parsing, throttling)
reach ``api_exception_handler`` which produces the same envelope.
"""
from __future__ import annotations

import logging

from rest_framework import exceptions as drf_exceptions
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ApiError(drf_exceptions.APIException):
    """Base class of all API errors; ``status_code`` is the HTTP status."""
    status_code = 500
    default_detail = 'An error occurred.'

    def __init__(self, message: str | None = None, errors: dict | None = None):
        self.message = message or str(self.default_detail)
        self.errors = errors
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ValidationFailed(ApiError):
    status_code = 400
    default_detail = 'Validation failed.'


class OperationFailed(ApiError):
    status_code = 400
    default_detail = 'Operation failed.'


class Unauthorized(ApiError):
    status_code = 401
    default_detail = 'Unauthorized access.'


class Forbidden(ApiError):
    status_code = 403
    default_detail = 'Permission denied.'


class NotFound(ApiError):
    status_code = 404
    default_detail = 'Resource not found.'


class InternalError(ApiError):
    status_code = 500
    default_detail = 'Internal server error.'


def _message_from(data) -> tuple[str, dict | None]:
    """Split DRF error data into a message and per-field errors."""
    if isinstance(data, dict):
        if 'detail' in data and len(data) == 1:
            return str(data['detail']), None
        errors = {k: [str(m) for m in (v if isinstance(v, list) else [v])] for k, v in data.items()}
        return 'Validation failed.', errors
    if isinstance(data, list):
        return '; '.join(str(d) for d in data), None
    return str(data), None


def api_exception_handler(exc, context):
    from .responses import ResponseHandler

    request = context.get('request') if context else None
    if isinstance(exc, ApiError):
        return ResponseHandler.failure(request, exc.message, exc.status_code, exc.errors)

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled error: %s', exc)
        return ResponseHandler.failure(request, 'Internal server error.', 500)

    message, errors = _message_from(resp.data)
    out = ResponseHandler.failure(request, message, resp.status_code, errors)
    for header in ('WWW-Authenticate', 'Retry-After'):
        if header in resp:
            out[header] = resp[header]
    return out
