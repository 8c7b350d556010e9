"""Durable queue of EHR forwarding jobs."""
from __future__ import annotations

import datetime as dt

from django.conf import settings
from django.db.models import F, Q
from django.utils import timezone

from ..models import EhrRecordJob
from .base import storage_operation


class EhrJobRepo:

    @storage_operation
    def enqueue(self, **values) -> EhrRecordJob:
        return EhrRecordJob.objects.create(status=EhrRecordJob.STATUS_PENDING, **values)

    def _due(self, now: dt.datetime):
        stale_before = now - dt.timedelta(seconds=settings.EHR_CLAIM_TIMEOUT)
        pending = Q(status=EhrRecordJob.STATUS_PENDING) & (
            Q(next_attempt_at__isnull=True) | Q(next_attempt_at__lte=now))
        # a worker that died mid-send leaves its claim behind
        abandoned = Q(status=EhrRecordJob.STATUS_PROCESSING, updated_at__lt=stale_before)
        return EhrRecordJob.objects.filter(pending | abandoned)

    @storage_operation
    def claim_due_jobs(self, limit: int, now: dt.datetime | None = None) -> list[EhrRecordJob]:
        """Move due jobs to ``processing`` and count the attempt.

        Each row is claimed by a conditional UPDATE on its current status and
        timestamp, so of several workers racing for a job exactly one wins.
        """
        now = now or timezone.now()
        candidates = self._due(now).order_by('created_at', 'pk').values_list('pk', 'status', 'updated_at')[:limit]
        claimed = []
        for pk, status, updated_at in candidates:
            won = EhrRecordJob.objects.filter(pk=pk, status=status, updated_at=updated_at).update(
                status=EhrRecordJob.STATUS_PROCESSING,
                attempts=F('attempts') + 1,
                updated_at=timezone.now(),
            )
            if won:
                claimed.append(pk)
        jobs = EhrRecordJob.objects.filter(pk__in=claimed).order_by('created_at', 'pk')
        return list(jobs)

    @storage_operation
    def mark_done(self, job: EhrRecordJob, resource_id: str | None) -> None:
        EhrRecordJob.objects.filter(pk=job.pk).update(
            status=EhrRecordJob.STATUS_DONE,
            ehr_resource_id=resource_id,
            last_error='',
            updated_at=timezone.now(),
        )

    @storage_operation
    def mark_retry(self, job: EhrRecordJob, error: str, next_attempt_at: dt.datetime) -> None:
        EhrRecordJob.objects.filter(pk=job.pk).update(
            status=EhrRecordJob.STATUS_PENDING,
            last_error=error,
            next_attempt_at=next_attempt_at,
            updated_at=timezone.now(),
        )

    @storage_operation
    def mark_failed(self, job: EhrRecordJob, error: str) -> None:
        EhrRecordJob.objects.filter(pk=job.pk).update(
            status=EhrRecordJob.STATUS_FAILED,
            last_error=error,
            updated_at=timezone.now(),
        )
