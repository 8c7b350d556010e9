"""
Care-plan catalogue and enrolment.

Enrolling a patient schedules the plan's weekly activities up front; the
activity table is then the source for task lists and weekly progress.
"""
from __future__ import annotations

import datetime as dt
import logging
import secrets

from django.db import transaction
from django.utils import timezone

from ..domain.careplans import CareplanDto, EnrollmentDomainModel, EnrollmentDto
from ..exceptions import OperationFailed
from ..models import CareplanActivity
from ..repositories.careplans import CareplanRepo

logger = logging.getLogger(__name__)

PROVIDER = 'CareHub'

CAREPLANS = [
    CareplanDto(provider=PROVIDER, code='HeartFailure', name='Heart Failure Motivator',
                description='Daily self-care routine and education for heart failure patients.', weeks=12),
    CareplanDto(provider=PROVIDER, code='Cholesterol', name='Cholesterol Management',
                description='Lifestyle and medication adherence plan for high cholesterol.', weeks=8),
    CareplanDto(provider=PROVIDER, code='StrokeRecovery', name='Stroke Recovery',
                description='Rehabilitation milestones and risk factor control after a stroke.', weeks=12),
]

# (day of week, activity type, title template)
WEEKLY_ACTIVITIES = [
    (1, 'Assessment', 'Week {week} check-in'),
    (3, 'Educational', '{plan}: lesson {week}'),
    (5, 'Biometrics', 'Record your vitals'),
]


class CareplanService:

    def __init__(self, careplan_repo: CareplanRepo):
        self.careplan_repo = careplan_repo

    def get_available_careplans(self, provider: str | None = None) -> list[CareplanDto]:
        return [p for p in CAREPLANS if provider is None or p.provider == provider]

    def get_plan(self, plan_code: str) -> CareplanDto | None:
        return next((p for p in CAREPLANS if p.code == plan_code), None)

    def schedule(self, plan: CareplanDto, start_date: dt.date) -> list[dict]:
        activities = []
        for week in range(1, plan.weeks + 1):
            for day, activity_type, title in WEEKLY_ACTIVITIES:
                activities.append({
                    'type': activity_type,
                    'title': title.format(week=week, plan=plan.name),
                    'week': week,
                    'day': day,
                    'scheduled_at': start_date + dt.timedelta(days=(week - 1) * 7 + day - 1),
                })
        return activities

    @transaction.atomic
    def enroll(self, model: EnrollmentDomainModel) -> EnrollmentDto | None:
        plan = self.get_plan(model.plan_code)
        if plan is None:
            return None
        if self.careplan_repo.get_active_enrollment(model.patient_user_id, plan.code) is not None:
            raise OperationFailed('Patient is already enrolled in this care plan!')
        model.provider = plan.provider
        model.plan_name = plan.name
        model.start_date = model.start_date or timezone.localdate()
        model.end_date = model.start_date + dt.timedelta(days=plan.weeks * 7 - 1)
        enrollment = self.careplan_repo.enroll(model, participant_id=secrets.token_hex(8))
        count = self.careplan_repo.add_activities(enrollment, self.schedule(plan, model.start_date))
        logger.info('Enrolled %s in %s with %s activities', model.patient_user_id, plan.code, count)
        return enrollment

    def get_patient_enrollments(self, patient_user_id: str, is_active: bool | None = None) -> list[EnrollmentDto]:
        return self.careplan_repo.get_patient_enrollments(patient_user_id, is_active)

    def get_enrollment(self, enrollment_id) -> EnrollmentDto | None:
        return self.careplan_repo.get_enrollment(enrollment_id)

    def fetch_tasks(self, enrollment_id, scheduled_until: dt.date | None = None):
        return self.careplan_repo.get_activities(enrollment_id, scheduled_until)

    def get_task(self, enrollment_id, task_id):
        return self.careplan_repo.get_activity(enrollment_id, task_id)

    def update_task_status(self, task_id, status: str):
        """Mark a scheduled activity completed (stamping the time) or back to pending."""
        completed_at = timezone.now() if status == CareplanActivity.STATUS_COMPLETED else None
        return self.careplan_repo.set_activity_status(task_id, status, completed_at)

    def get_weekly_status(self, enrollment: EnrollmentDto) -> dict:
        today = timezone.localdate()
        if today < enrollment.start_date:
            current_week = 0
        else:
            current_week = (today - enrollment.start_date).days // 7 + 1
        return {
            'EnrollmentId': enrollment.id,
            'PlanCode': enrollment.plan_code,
            'CurrentWeek': current_week,
            'Weeks': self.careplan_repo.get_weekly_status(enrollment.id),
        }
