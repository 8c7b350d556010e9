"""
Controller plumbing shared by all API views.

A controller action runs ``set_context`` (log the action, authorise the
caller's role), validates input, executes through a service and answers
with the response envelope.  The ``action`` decorator is the error
boundary: whatever the action raises is turned into an error envelope by
``ResponseHandler.handle_error``.
"""
from __future__ import annotations

import functools
import logging

from ..exceptions import Forbidden, Unauthorized
from ..models import User
from ..responses import ResponseHandler

logger = logging.getLogger(__name__)


def error_boundary(func):
    """Turn anything the wrapped controller method raises into an error envelope."""
    @functools.wraps(func)
    def wrapper(self, request, *args, **kwargs):
        try:
            return func(self, request, *args, **kwargs)
        except Exception as error:
            return ResponseHandler.handle_error(request, error)
    return wrapper


def action(name: str, roles: set[str] | None = None, allow_anonymous: bool = False):
    """Wrap a controller method with context setup and the error boundary."""
    def decorator(func):
        @functools.wraps(func)
        def run(self, request, *args, **kwargs):
            self.set_context(name, request, roles, allow_anonymous)
            return func(self, request, *args, **kwargs)
        return error_boundary(run)
    return decorator


def is_patient(request) -> bool:
    user = getattr(request, 'user', None)
    return bool(user) and user.role == User.ROLE_PATIENT


class BaseController:

    def set_context(self, name: str, request, roles: set[str] | None = None,
                    allow_anonymous: bool = False) -> None:
        request.context = name
        user = getattr(request, 'user', None)
        logger.info('%s by %s', name, getattr(user, 'id', None) or 'anonymous')
        if allow_anonymous:
            return
        if user is None or not user.is_authenticated:
            raise Unauthorized('Unauthorized access.')
        if roles and user.role not in roles:
            raise Forbidden('Permission denied for this action.')

    def authorize_patient(self, request, patient_user_id: str | None) -> None:
        """Patients may only touch their own records."""
        if is_patient(request) and patient_user_id is not None and patient_user_id != request.user.id:
            raise Forbidden('Permission denied: the record belongs to another patient.')

    def pin_to_caller(self, request, filters):
        """A patient's searches are restricted to their own records."""
        if is_patient(request):
            filters.patient_user_id = request.user.id
        return filters
