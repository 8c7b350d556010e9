"""Care-plan enrolments and their scheduled activities."""
from __future__ import annotations

import datetime as dt

from django.db.models import Count, Min, Max, Q
from django.utils import timezone

from ..domain.careplans import CareplanActivityDto, EnrollmentDomainModel, EnrollmentDto, WeeklyStatusDto
from ..models import CareplanActivity, CareplanEnrollment
from .base import storage_operation


def enrollment_dto(row: CareplanEnrollment) -> EnrollmentDto:
    return EnrollmentDto(
        id=str(row.id),
        patient_user_id=row.patient_user_id,
        provider=row.provider,
        plan_code=row.plan_code,
        plan_name=row.plan_name,
        participant_id=row.participant_id,
        start_date=row.start_date,
        end_date=row.end_date,
        is_active=row.is_active,
        created_at=row.created_at,
    )


def activity_dto(row: CareplanActivity) -> CareplanActivityDto:
    return CareplanActivityDto(
        id=str(row.id),
        enrollment_id=str(row.enrollment_id),
        patient_user_id=row.patient_user_id,
        type=row.type,
        title=row.title,
        description=row.description,
        week=row.week,
        day=row.day,
        scheduled_at=row.scheduled_at,
        status=row.status,
        completed_at=row.completed_at,
    )


class CareplanRepo:

    @storage_operation
    def enroll(self, model: EnrollmentDomainModel, participant_id: str | None = None) -> EnrollmentDto:
        row = CareplanEnrollment.objects.create(
            patient_user_id=model.patient_user_id,
            provider=model.provider,
            plan_code=model.plan_code,
            plan_name=model.plan_name,
            participant_id=participant_id,
            start_date=model.start_date,
            end_date=model.end_date,
        )
        return enrollment_dto(row)

    @storage_operation
    def get_enrollment(self, enrollment_id) -> EnrollmentDto | None:
        row = CareplanEnrollment.objects.filter(pk=enrollment_id).first()
        return enrollment_dto(row) if row else None

    @storage_operation
    def get_active_enrollment(self, patient_user_id: str, plan_code: str) -> EnrollmentDto | None:
        row = CareplanEnrollment.objects.filter(
            patient_user_id=patient_user_id, plan_code=plan_code, is_active=True
        ).first()
        return enrollment_dto(row) if row else None

    @storage_operation
    def get_patient_enrollments(self, patient_user_id: str, is_active: bool | None = None) -> list[EnrollmentDto]:
        qs = CareplanEnrollment.objects.filter(patient_user_id=patient_user_id)
        if is_active is not None:
            qs = qs.filter(is_active=is_active)
        return [enrollment_dto(r) for r in qs.order_by('-created_at', '-pk')]

    @storage_operation
    def add_activities(self, enrollment: EnrollmentDto, activities: list[dict]) -> int:
        rows = [
            CareplanActivity(
                enrollment_id=enrollment.id,
                patient_user_id=enrollment.patient_user_id,
                type=a['type'],
                title=a['title'],
                description=a.get('description', ''),
                week=a['week'],
                day=a['day'],
                scheduled_at=a['scheduled_at'],
            )
            for a in activities
        ]
        CareplanActivity.objects.bulk_create(rows)
        return len(rows)

    @storage_operation
    def get_activities(self, enrollment_id, scheduled_until: dt.date | None = None) -> list[CareplanActivityDto]:
        qs = CareplanActivity.objects.filter(enrollment_id=enrollment_id)
        if scheduled_until is not None:
            qs = qs.filter(scheduled_at__lte=scheduled_until)
        return [activity_dto(r) for r in qs.order_by('week', 'day', 'pk')]

    @storage_operation
    def get_weekly_status(self, enrollment_id) -> list[WeeklyStatusDto]:
        rows = (CareplanActivity.objects
                .filter(enrollment_id=enrollment_id)
                .values('week')
                .annotate(
                    total=Count('id'),
                    completed=Count('id', filter=Q(status=CareplanActivity.STATUS_COMPLETED)),
                    start=Min('scheduled_at'),
                    end=Max('scheduled_at'),
                )
                .order_by('week'))
        return [
            WeeklyStatusDto(
                week=r['week'],
                start_date=r['start'],
                end_date=r['end'],
                total=r['total'],
                completed=r['completed'],
                pending=r['total'] - r['completed'],
            )
            for r in rows
        ]

    @storage_operation
    def get_activity(self, enrollment_id, activity_id) -> CareplanActivityDto | None:
        row = CareplanActivity.objects.filter(pk=activity_id, enrollment_id=enrollment_id).first()
        return activity_dto(row) if row else None

    @storage_operation
    def set_activity_status(self, activity_id, status: str,
                            completed_at: dt.datetime | None) -> CareplanActivityDto | None:
        updated = CareplanActivity.objects.filter(pk=activity_id).update(
            status=status, completed_at=completed_at, updated_at=timezone.now())
        if not updated:
            return None
        return activity_dto(CareplanActivity.objects.get(pk=activity_id))
