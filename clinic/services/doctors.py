from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction

from ..domain.users import DoctorDomainModel, DoctorDto
from ..ehr.stores import FhirStore
from ..models import User
from ..repositories.users import DoctorRepo, UserRepo
from .users import UserService

logger = logging.getLogger(__name__)


class DoctorService:

    def __init__(self, doctor_repo: DoctorRepo, user_repo: UserRepo, fhir_store: FhirStore | None = None):
        self.doctor_repo = doctor_repo
        self.user_repo = user_repo
        self.users = UserService(user_repo)
        self.fhir_store = fhir_store

    def _create_ehr_practitioner(self, model: DoctorDomainModel) -> str | None:
        if not (settings.EHR_ENABLED and self.fhir_store):
            return None
        user = model.user
        try:
            return self.fhir_store.create_practitioner(user)
        except Exception as exc:
            logger.error('Unable to create EHR practitioner for %s: %s', user.phone, exc)
            return None

    @transaction.atomic
    def create(self, model: DoctorDomainModel) -> DoctorDto:
        """Register the practitioner in the EHR store first, then create user and doctor rows."""
        ehr_id = model.ehr_id or self._create_ehr_practitioner(model)
        user = self.users.create(model.user, User.ROLE_DOCTOR)
        return self.doctor_repo.create(user.id, ehr_id=ehr_id, specialities=model.specialities, about=model.about)

    def get_by_user_id(self, user_id: str) -> DoctorDto | None:
        return self.doctor_repo.get_by_user_id(user_id)

    def search(self, filters):
        return self.doctor_repo.search(filters)

    @transaction.atomic
    def update_by_user_id(self, user_id: str, model: DoctorDomainModel) -> DoctorDto | None:
        if self.user_repo.update(user_id, model.user) is None:
            return None
        return self.doctor_repo.update_by_user_id(user_id, model)

    def user_name_taken(self, user_name: str | None, user_id: str | None = None) -> bool:
        return self.users.user_name_taken(user_name, user_id)

    def delete_by_user_id(self, user_id: str) -> bool:
        return self.doctor_repo.delete_by_user_id(user_id)

    def doctor_exists(self, model: DoctorDomainModel) -> bool:
        if not model.user.phone:
            return False
        return self.user_repo.get_by_phone_and_role(model.user.phone, User.ROLE_DOCTOR) is not None
