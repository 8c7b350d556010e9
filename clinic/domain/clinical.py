"""Domain models, DTOs and search filters for clinical records."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional

from .base import BaseSearchFilters


# Lab records --------------------------------------------------------------

@dataclass
class LabRecordDomainModel:
    id: Optional[str] = None
    patient_user_id: Optional[str] = None
    type_name: Optional[str] = None
    display_name: Optional[str] = None
    primary_value: Optional[float] = None
    secondary_value: Optional[float] = None
    unit: Optional[str] = None
    report_id: Optional[str] = None
    order_id: Optional[str] = None
    recorded_at: Optional[dt.datetime] = None


@dataclass
class LabRecordDto:
    id: str
    patient_user_id: str
    type_name: Optional[str]
    display_name: str
    primary_value: Optional[float]
    secondary_value: Optional[float]
    unit: Optional[str]
    report_id: Optional[str]
    order_id: Optional[str]
    recorded_at: Optional[dt.datetime]
    created_at: dt.datetime
    updated_at: dt.datetime


@dataclass
class LabRecordSearchFilters(BaseSearchFilters):
    patient_user_id: Optional[str] = None
    type_name: Optional[str] = None
    display_name: Optional[str] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    date_from: Optional[dt.datetime] = None
    date_to: Optional[dt.datetime] = None
    report_id: Optional[str] = None
    order_id: Optional[str] = None


# Blood pressure ------------------------------------------------------------

@dataclass
class BloodPressureDomainModel:
    id: Optional[str] = None
    patient_user_id: Optional[str] = None
    systolic: Optional[float] = None
    diastolic: Optional[float] = None
    unit: Optional[str] = None
    recorded_at: Optional[dt.datetime] = None
    recorded_by_user_id: Optional[str] = None


@dataclass
class BloodPressureDto:
    id: str
    patient_user_id: str
    systolic: float
    diastolic: float
    unit: str
    recorded_at: Optional[dt.datetime]
    recorded_by_user_id: Optional[str]
    created_at: dt.datetime
    updated_at: dt.datetime


@dataclass
class BloodPressureSearchFilters(BaseSearchFilters):
    patient_user_id: Optional[str] = None
    min_systolic: Optional[float] = None
    max_systolic: Optional[float] = None
    min_diastolic: Optional[float] = None
    max_diastolic: Optional[float] = None
    created_date_from: Optional[dt.datetime] = None
    created_date_to: Optional[dt.datetime] = None
    recorded_by_user_id: Optional[str] = None


# Single-value biometrics ------------------------------------------------------

@dataclass
class BodyHeightDomainModel:
    id: Optional[str] = None
    patient_user_id: Optional[str] = None
    body_height: Optional[float] = None
    unit: Optional[str] = None
    recorded_at: Optional[dt.datetime] = None


@dataclass
class BodyHeightDto:
    id: str
    patient_user_id: str
    body_height: float
    unit: str
    recorded_at: Optional[dt.datetime]
    created_at: dt.datetime
    updated_at: dt.datetime


@dataclass
class BodyWeightDomainModel:
    id: Optional[str] = None
    patient_user_id: Optional[str] = None
    body_weight: Optional[float] = None
    unit: Optional[str] = None
    recorded_at: Optional[dt.datetime] = None


@dataclass
class BodyWeightDto:
    id: str
    patient_user_id: str
    body_weight: float
    unit: str
    recorded_at: Optional[dt.datetime]
    created_at: dt.datetime
    updated_at: dt.datetime


@dataclass
class BloodGlucoseDomainModel:
    id: Optional[str] = None
    patient_user_id: Optional[str] = None
    blood_glucose: Optional[float] = None
    unit: Optional[str] = None
    recorded_at: Optional[dt.datetime] = None


@dataclass
class BloodGlucoseDto:
    id: str
    patient_user_id: str
    blood_glucose: float
    unit: str
    recorded_at: Optional[dt.datetime]
    created_at: dt.datetime
    updated_at: dt.datetime


@dataclass
class BiometricSearchFilters(BaseSearchFilters):
    """Filters shared by body height, body weight and blood glucose."""
    patient_user_id: Optional[str] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    created_date_from: Optional[dt.datetime] = None
    created_date_to: Optional[dt.datetime] = None


# Assessment templates ---------------------------------------------------------

@dataclass
class AssessmentTemplateDomainModel:
    id: Optional[str] = None
    display_code: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    provider_assessment_code: Optional[str] = None
    provider: Optional[str] = None


@dataclass
class AssessmentTemplateDto:
    id: str
    display_code: Optional[str]
    type: str
    title: str
    description: Optional[str]
    provider_assessment_code: Optional[str]
    provider: Optional[str]
    created_at: dt.datetime
    updated_at: dt.datetime


@dataclass
class AssessmentTemplateSearchFilters(BaseSearchFilters):
    title: Optional[str] = None
    type: Optional[str] = None
    display_code: Optional[str] = None
    provider: Optional[str] = None
    provider_assessment_code: Optional[str] = None
