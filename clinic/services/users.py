"""User helpers shared by the patient and doctor services."""
from __future__ import annotations

import logging
import secrets

from ..domain.users import UserDomainModel
from ..models import User
from ..repositories.users import UserRepo

logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, user_repo: UserRepo):
        self.user_repo = user_repo

    def get_by_id(self, user_id: str):
        return self.user_repo.get_by_id(user_id)

    def generate_user_name(self, model: UserDomainModel, prefix: str) -> str:
        base = (model.first_name or prefix).lower().replace(' ', '')[:20] or prefix
        while True:
            candidate = f"{base}{secrets.token_hex(3)}"
            if not self.user_repo.user_name_exists(candidate):
                return candidate

    def user_name_taken(self, user_name: str | None, user_id: str | None = None) -> bool:
        """True when another account already uses ``user_name``."""
        return bool(user_name) and self.user_repo.user_name_exists(user_name, exclude_user_id=user_id)

    def create(self, model: UserDomainModel, role: str):
        model.role = role
        if not model.user_name:
            model.user_name = self.generate_user_name(model, role)
        return self.user_repo.create(model)

    def get_login_user_name(self, user_name: str | None = None, phone: str | None = None,
                            email: str | None = None, role: str | None = None) -> str | None:
        """Resolve the user name to authenticate from whichever identifier was given."""
        if user_name:
            user = self.user_repo.get_user_with_user_name(user_name)
        elif phone:
            user = self.user_repo.get_by_phone_and_role(phone, role or User.ROLE_PATIENT)
        elif email:
            user = self.user_repo.get_by_email_and_role(email, role or User.ROLE_PATIENT)
        else:
            user = None
        return user.user_name if user else None

    def get_app_registrations(self, user_id: str) -> list[str]:
        return self.user_repo.get_app_registrations(user_id)

    def add_app_registration(self, user_id: str, app_name: str) -> bool:
        created = self.user_repo.add_app_registration(user_id, app_name)
        if created:
            logger.info('User %s registered through %s', user_id, app_name)
        return created
