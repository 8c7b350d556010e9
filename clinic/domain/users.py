"""Users, patients and doctors."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Optional

from .base import BaseSearchFilters


@dataclass
class UserDomainModel:
    id: Optional[str] = None
    user_name: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    prefix: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[dt.date] = None
    role: Optional[str] = None
    default_time_zone: Optional[str] = None
    current_time_zone: Optional[str] = None


@dataclass
class UserDto:
    id: str
    user_name: str
    phone: str
    email: str
    first_name: str
    last_name: str
    prefix: str
    gender: str
    birth_date: Optional[dt.date]
    role: str
    default_time_zone: str
    current_time_zone: str
    display_name: str = ''


@dataclass
class UserSummaryDto:
    id: str
    display_name: str
    role: str


@dataclass
class PatientDomainModel:
    user: UserDomainModel = field(default_factory=UserDomainModel)
    ehr_id: Optional[str] = None
    addresses: Optional[list] = None


@dataclass
class PatientDto:
    id: str
    user_id: str
    ehr_id: Optional[str]
    addresses: list
    user: UserDto
    created_at: dt.datetime
    updated_at: dt.datetime


@dataclass
class PatientSearchFilters(BaseSearchFilters):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    birth_date_from: Optional[dt.date] = None
    birth_date_to: Optional[dt.date] = None


@dataclass
class DoctorDomainModel:
    user: UserDomainModel = field(default_factory=UserDomainModel)
    ehr_id: Optional[str] = None
    specialities: Optional[list] = None
    about: Optional[str] = None


@dataclass
class DoctorDto:
    id: str
    user_id: str
    ehr_id: Optional[str]
    specialities: list
    about: str
    user: UserDto
    created_at: dt.datetime
    updated_at: dt.datetime


@dataclass
class DoctorSearchFilters(BaseSearchFilters):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    speciality: Optional[str] = None
