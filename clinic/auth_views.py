"""
Authentication views.

Login only needs the client stage (a valid API key); it answers with a
legacy DRF token plus a JWT pair.  Refresh and logout work on the JWT
refresh token.  Kept apart from ``clinic.authentication`` so DRF does not
import views while it initialises authentication classes.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.throttling import AnonRateThrottle
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from . import loader
from .exceptions import Forbidden, NotFound, OperationFailed, Unauthorized, ValidationFailed
from .models import User
from .permissions import ADMIN_ROLES, IsAuthenticatedClient
from .responses import ResponseHandler
from .services.audit import log_action
from .validators.users import UserValidator
from .views.base import BaseController, action

logger = logging.getLogger(__name__)


def _token_payload(user: User) -> dict:
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'Token': token_obj.key,
        'AccessToken': str(refresh.access_token),
        'RefreshToken': str(refresh),
        'User': {
            'id': user.id,
            'UserName': user.username,
            'DisplayName': user.get_full_name() or user.username,
            'Role': user.role,
        },
    }


class UserAuthController(BaseController):

    def __init__(self, service=None, validator=None):
        self.service = service or loader.user_service()
        self.validator = validator or UserValidator()

    @action('User.Login', allow_anonymous=True)
    def login(self, request):
        vd = self.validator.login(request)
        user_name = self.service.get_login_user_name(
            user_name=vd.get('UserName'), phone=vd.get('Phone'), email=vd.get('Email'), role=vd.get('Role'))
        user = authenticate(request, username=user_name, password=vd['Password']) if user_name else None
        if user is None:
            log_action(user=None, action='login', object_type='user',
                       detail={'result': 'fail', 'user_name': user_name, 'ip': request.META.get('REMOTE_ADDR')})
            raise Unauthorized('Invalid login credentials.')
        log_action(user=user, action='login', object_type='user', object_id=user.id,
                   detail={'result': 'ok', 'ip': request.META.get('REMOTE_ADDR')})
        return ResponseHandler.success(request, 'User logged in successfully!', 200, _token_payload(user))

    @action('User.RefreshToken', allow_anonymous=True)
    def refresh(self, request):
        raw = request.data.get('RefreshToken') or request.data.get('refresh')
        if not raw:
            raise ValidationFailed('Refresh token is required.', errors={'RefreshToken': ['This field is required.']})
        try:
            refresh = RefreshToken(raw)
            data = {'AccessToken': str(refresh.access_token)}
        except TokenError as e:
            raise Unauthorized(str(e))
        return ResponseHandler.success(request, 'Access token refreshed successfully!', 200, data)

    @action('User.Logout')
    def logout(self, request):
        raw = request.data.get('RefreshToken') or request.data.get('refresh')
        count = 0
        if raw:
            try:
                RefreshToken(raw).blacklist()
                count = 1
            except TokenError as e:
                raise OperationFailed(f"Unable to revoke token: {e}")
        else:
            for token in OutstandingToken.objects.filter(user=request.user):
                _, created = BlacklistedToken.objects.get_or_create(token=token)
                count += int(created)
        Token.objects.filter(user=request.user).delete()
        log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
                   detail={'blacklisted': count})
        return ResponseHandler.success(request, 'User logged out successfully!', 200, {'Blacklisted': count})

    @action('User.AddAppRegistration')
    def add_app_registration(self, request, **kwargs):
        user_id = self.validator.get_param_id(kwargs, 'userId')
        if request.user.id != user_id and request.user.role not in ADMIN_ROLES:
            raise Forbidden('Permission denied: app registration of another user.')
        app_name = self.validator.app_registration(request)
        if self.service.get_by_id(user_id) is None:
            raise NotFound('User not found.')
        created = self.service.add_app_registration(user_id, app_name)
        message = 'App registration added successfully!' if created else 'App registration already exists.'
        return ResponseHandler.success(request, message, 201 if created else 200, {
            'AppRegistrations': self.service.get_app_registrations(user_id),
        })


controller = UserAuthController()


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


@api_view(['POST'])
@permission_classes([IsAuthenticatedClient])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    return controller.login(request)


@api_view(['POST'])
@permission_classes([IsAuthenticatedClient])
def jwt_refresh_view(request):
    return controller.refresh(request)


@api_view(['POST'])
def jwt_logout_view(request):
    return controller.logout(request)


@api_view(['POST'])
def app_registrations_view(request, userId):
    return controller.add_app_registration(request, userId=userId)
