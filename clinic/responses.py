"""
Response envelope shared by all controllers.

Success and error responses have the same shape::

    {"Status": "success", "Message": "...", "HttpCode": 200, "Data": {...}}

Validation failures carry ``Data: {"Errors": {field: [messages]}}``; other
errors carry ``Data: null``.
"""
from __future__ import annotations

import logging

from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response

from .exceptions import ApiError, _message_from

logger = logging.getLogger(__name__)


def _context(request) -> str:
    return getattr(request, 'context', None) or '-'


class ResponseHandler:

    @staticmethod
    def success(request, message: str, http_code: int = 200, data: dict | None = None) -> Response:
        logger.info('%s -> %s %s', _context(request), http_code, message)
        return Response(
            {'Status': 'success', 'Message': message, 'HttpCode': http_code, 'Data': data},
            status=http_code,
        )

    @staticmethod
    def failure(request, message: str, http_code: int, errors: dict | None = None) -> Response:
        data = {'Errors': errors} if errors else None
        return Response(
            {'Status': 'failure', 'Message': message, 'HttpCode': http_code, 'Data': data},
            status=http_code,
        )

    @staticmethod
    def handle_error(request, error: Exception) -> Response:
        """Convert any error raised inside a controller action to the envelope."""
        if isinstance(error, ApiError):
            if error.status_code >= 500:
                logger.error('%s failed: %s', _context(request), error.message)
            else:
                logger.info('%s -> %s %s', _context(request), error.status_code, error.message)
            return ResponseHandler.failure(request, error.message, error.status_code, error.errors)
        if isinstance(error, drf_exceptions.APIException):
            message, errors = _message_from(error.detail)
            return ResponseHandler.failure(request, message, error.status_code, errors)
        logger.exception('%s failed with unexpected error', _context(request))
        return ResponseHandler.failure(request, 'Internal server error.', 500)
