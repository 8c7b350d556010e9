"""Patient management: a patient is a user with the patient role plus a patient row."""
from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction

from ..domain.users import PatientDomainModel, PatientDto
from ..ehr.stores import FhirStore
from ..models import User
from ..repositories.users import PatientRepo, UserRepo
from .users import UserService

logger = logging.getLogger(__name__)


class PatientService:

    def __init__(self, patient_repo: PatientRepo, user_repo: UserRepo, fhir_store: FhirStore | None = None):
        self.patient_repo = patient_repo
        self.user_repo = user_repo
        self.users = UserService(user_repo)
        self.fhir_store = fhir_store

    def _create_ehr_patient(self, user) -> str | None:
        if not (settings.EHR_ENABLED and self.fhir_store):
            return None
        try:
            return self.fhir_store.create_patient(user)
        except Exception as exc:
            logger.error('Unable to create EHR patient for %s: %s', user.id, exc)
            return None

    @transaction.atomic
    def create(self, model: PatientDomainModel) -> PatientDto:
        user = self.users.create(model.user, User.ROLE_PATIENT)
        ehr_id = model.ehr_id or self._create_ehr_patient(user)
        return self.patient_repo.create(user.id, ehr_id=ehr_id, addresses=model.addresses)

    def get_by_user_id(self, user_id: str) -> PatientDto | None:
        return self.patient_repo.get_by_user_id(user_id)

    def search(self, filters):
        return self.patient_repo.search(filters)

    @transaction.atomic
    def update_by_user_id(self, user_id: str, model: PatientDomainModel) -> PatientDto | None:
        if self.user_repo.update(user_id, model.user) is None:
            return None
        return self.patient_repo.update_by_user_id(user_id, model)

    def user_name_taken(self, user_name: str | None, user_id: str | None = None) -> bool:
        return self.users.user_name_taken(user_name, user_id)

    def delete_by_user_id(self, user_id: str) -> bool:
        return self.patient_repo.delete_by_user_id(user_id)

    def patient_exists(self, phone: str) -> bool:
        return self.user_repo.get_by_phone_and_role(phone, User.ROLE_PATIENT) is not None
