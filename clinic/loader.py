"""
Composition root.

Builds each service with its repositories and external-store clients.
Controllers call these factories once at import time; tests may build
services directly with their own collaborators.
"""
from __future__ import annotations

from django.conf import settings

from .ehr.analytics import EHRAnalyticsHandler
from .ehr.injector import get_fhir_store
from .ehr.stores import FhirStore
from .repositories.careplans import CareplanRepo
from .repositories.chat import ChatMessageRepo, ConversationRepo
from .repositories.clinical import (
    AssessmentTemplateRepo,
    BloodGlucoseRepo,
    BloodPressureRepo,
    BodyHeightRepo,
    BodyWeightRepo,
    LabRecordRepo,
)
from .repositories.statistics import StatisticsRepo
from .repositories.users import DoctorRepo, PatientRepo, UserRepo
from .services.careplans import CareplanService
from .services.chat import ChatService
from .services.clinical import (
    AssessmentTemplateService,
    BloodGlucoseService,
    BloodPressureService,
    BodyHeightService,
    BodyWeightService,
    LabRecordService,
)
from .services.doctors import DoctorService
from .services.patients import PatientService
from .services.statistics import StatisticsService
from .services.users import UserService


def fhir_store() -> FhirStore | None:
    if not settings.EHR_ENABLED:
        return None
    return get_fhir_store()


def ehr_analytics_handler() -> EHRAnalyticsHandler:
    return EHRAnalyticsHandler(UserRepo())


def lab_record_service() -> LabRecordService:
    return LabRecordService(LabRecordRepo())


def blood_pressure_service() -> BloodPressureService:
    return BloodPressureService(BloodPressureRepo())


def body_height_service() -> BodyHeightService:
    return BodyHeightService(BodyHeightRepo())


def body_weight_service() -> BodyWeightService:
    return BodyWeightService(BodyWeightRepo())


def blood_glucose_service() -> BloodGlucoseService:
    return BloodGlucoseService(BloodGlucoseRepo())


def assessment_template_service() -> AssessmentTemplateService:
    return AssessmentTemplateService(AssessmentTemplateRepo())


def user_service() -> UserService:
    return UserService(UserRepo())


def patient_service() -> PatientService:
    return PatientService(PatientRepo(), UserRepo(), fhir_store())


def doctor_service() -> DoctorService:
    return DoctorService(DoctorRepo(), UserRepo(), fhir_store())


def chat_service() -> ChatService:
    return ChatService(ConversationRepo(), ChatMessageRepo())


def careplan_service() -> CareplanService:
    return CareplanService(CareplanRepo())


def statistics_service() -> StatisticsService:
    return StatisticsService(
        StatisticsRepo(),
        UserRepo(),
        LabRecordRepo(),
        BodyWeightRepo(),
        BloodPressureRepo(),
        BloodGlucoseRepo(),
    )
