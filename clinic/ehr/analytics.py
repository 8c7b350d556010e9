"""
EHR analytics handler and queue worker.

Controllers call :meth:`EHRAnalyticsHandler.forward` after a clinical
record is created or updated.  Forwarding is only done for patients who
registered through one of the eligible applications, and it never fails
the request: each data point becomes an ``EhrRecordJob`` row that the
``process_ehr_queue`` management command sends to the FHIR store later.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from django.conf import settings
from django.utils import timezone

from ..models import Patient
from ..repositories.ehr_jobs import EhrJobRepo
from ..repositories.users import UserRepo
from .stores import FhirStore

logger = logging.getLogger(__name__)


class EHRAnalyticsHandler:

    def __init__(self, user_repo: UserRepo | None = None, job_repo: EhrJobRepo | None = None,
                 eligible_app_names: list[str] | None = None):
        self.user_repo = user_repo or UserRepo()
        self.job_repo = job_repo or EhrJobRepo()
        self._eligible_app_names = eligible_app_names

    @property
    def eligible_app_names(self) -> list[str]:
        if self._eligible_app_names is not None:
            return self._eligible_app_names
        return list(settings.EHR_ELIGIBLE_APP_NAMES)

    def get_eligible_app_names(self, patient_user_id: str) -> list[str]:
        """Registered app names of the patient that are on the allow-list, in registration order."""
        allowed = set(self.eligible_app_names)
        names: list[str] = []
        for app_name in self.user_repo.get_app_registrations(patient_user_id):
            if app_name in allowed and app_name not in names:
                names.append(app_name)
        return names

    def add_record(self, patient_user_id: str, record_id: str, provider: Optional[str], record_type: str,
                   value: Optional[float], unit: Optional[str] = None, name: Optional[str] = None,
                   display_name: Optional[str] = None, app_name: Optional[str] = None,
                   secondary_value: Optional[float] = None) -> bool:
        """Queue one data point for forwarding; failures are logged, not raised."""
        try:
            self.job_repo.enqueue(
                patient_user_id=patient_user_id,
                record_id=str(record_id),
                provider=provider,
                record_type=record_type,
                value=value,
                secondary_value=secondary_value,
                unit=unit,
                name=name,
                display_name=display_name,
                app_name=app_name,
            )
            return True
        except Exception as exc:
            logger.error('Unable to queue EHR %s record %s for %s: %s', record_type, record_id, patient_user_id, exc)
            return False

    def forward(self, patient_user_id: str, record_id: str, record_type: str, value: Optional[float],
                unit: Optional[str] = None, name: Optional[str] = None, display_name: Optional[str] = None,
                secondary_value: Optional[float] = None, provider: Optional[str] = None) -> int:
        """Queue one job per eligible application; returns the number of jobs queued."""
        if not settings.EHR_ENABLED:
            return 0
        try:
            app_names = self.get_eligible_app_names(patient_user_id)
        except Exception as exc:
            logger.error('Unable to check EHR eligibility for %s: %s', patient_user_id, exc)
            return 0
        if not app_names:
            logger.info('Skip adding details to EHR database as device is not eligible:%s', patient_user_id)
            return 0
        queued = 0
        for app_name in app_names:
            if self.add_record(patient_user_id, record_id, provider, record_type, value, unit, name,
                               display_name, app_name, secondary_value=secondary_value):
                queued += 1
        return queued


class EHRQueueWorker:
    """Sends pending jobs to the FHIR store with exponential back-off."""

    def __init__(self, store: FhirStore, job_repo: EhrJobRepo | None = None,
                 max_attempts: int | None = None, retry_base_seconds: int | None = None):
        self.store = store
        self.job_repo = job_repo or EhrJobRepo()
        self.max_attempts = max_attempts or settings.EHR_MAX_ATTEMPTS
        self.retry_base_seconds = retry_base_seconds if retry_base_seconds is not None else settings.EHR_RETRY_BASE_SECONDS

    def next_attempt_at(self, attempts: int, now: dt.datetime) -> dt.datetime:
        return now + dt.timedelta(seconds=self.retry_base_seconds * (2 ** attempts))

    def process(self, batch_size: int | None = None) -> dict[str, int]:
        stats = {'done': 0, 'retry': 0, 'failed': 0}
        for job in self.job_repo.claim_due_jobs(batch_size or settings.EHR_BATCH_SIZE):
            logger.info('EHR job %s attempt %s: %s %s', job.pk, job.attempts, job.record_type, job.record_id)
            try:
                ehr_id = Patient.objects.filter(user_id=job.patient_user_id).values_list('ehr_id', flat=True).first()
                resource_id = self.store.add_observation(job, ehr_id)
            except Exception as exc:
                error = str(exc) or exc.__class__.__name__
                if job.attempts >= self.max_attempts:
                    logger.error('EHR job %s failed permanently: %s', job.pk, error)
                    self.job_repo.mark_failed(job, error)
                    stats['failed'] += 1
                else:
                    logger.warning('EHR job %s failed, will retry: %s', job.pk, error)
                    self.job_repo.mark_retry(job, error, self.next_attempt_at(job.attempts - 1, timezone.now()))
                    stats['retry'] += 1
                continue
            self.job_repo.mark_done(job, resource_id)
            stats['done'] += 1
        return stats
