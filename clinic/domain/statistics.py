from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional


@dataclass
class AppDownloadDomainModel:
    app_name: Optional[str] = None
    total_downloads: Optional[int] = None
    ios_downloads: Optional[int] = None
    android_downloads: Optional[int] = None


@dataclass
class AppDownloadDto:
    app_name: str
    total_downloads: int
    ios_downloads: int
    android_downloads: int
    updated_at: Optional[dt.datetime] = None


@dataclass
class StatisticsFilters:
    year: Optional[int] = None
    month: Optional[int] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    past_months: Optional[int] = None


@dataclass
class AgeFilters:
    year: Optional[int] = None
    age_from: Optional[int] = None
    age_to: Optional[int] = None
