from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional


@dataclass
class CareplanDto:
    provider: str
    code: str
    name: str
    description: str
    weeks: int


@dataclass
class EnrollmentDomainModel:
    patient_user_id: Optional[str] = None
    provider: Optional[str] = None
    plan_code: Optional[str] = None
    plan_name: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None


@dataclass
class EnrollmentDto:
    id: str
    patient_user_id: str
    provider: str
    plan_code: str
    plan_name: str
    participant_id: Optional[str]
    start_date: dt.date
    end_date: dt.date
    is_active: bool
    created_at: dt.datetime


@dataclass
class CareplanActivityDto:
    id: str
    enrollment_id: str
    patient_user_id: str
    type: str
    title: str
    description: str
    week: int
    day: int
    scheduled_at: dt.date
    status: str
    completed_at: Optional[dt.datetime]


@dataclass
class WeeklyStatusDto:
    week: int
    start_date: dt.date
    end_date: dt.date
    total: int
    completed: int
    pending: int
