from __future__ import annotations

from rest_framework import serializers

from ..domain.careplans import EnrollmentDomainModel
from ..models import CareplanActivity
from .base import BaseValidator, SanitizedCharField


class EnrollSerializer(serializers.Serializer):
    PlanCode = SanitizedCharField(max_length=64)
    StartDate = serializers.DateField(required=False, allow_null=True)


class EnrollmentQuerySerializer(serializers.Serializer):
    isActive = serializers.BooleanField(required=False, allow_null=True, default=None)


class TasksQuerySerializer(serializers.Serializer):
    scheduledUntil = serializers.DateField(required=False, allow_null=True)


class TaskStatusSerializer(serializers.Serializer):
    Status = serializers.ChoiceField(choices=CareplanActivity.STATUS_CHOICES)


class CareplanValidator(BaseValidator):

    def provider(self, request) -> str | None:
        return request.query_params.get('provider') or None

    def enroll(self, request, patient_user_id: str) -> EnrollmentDomainModel:
        vd = self.validate(EnrollSerializer, request.data)
        return self.to_model(EnrollmentDomainModel, vd, patient_user_id=patient_user_id)

    def enrollments_query(self, request) -> bool | None:
        return self.validate(EnrollmentQuerySerializer, request.query_params).get('isActive')

    def tasks_query(self, request):
        return self.validate(TasksQuerySerializer, request.query_params).get('scheduledUntil')

    def task_status(self, request) -> str:
        return self.validate(TaskStatusSerializer, request.data)['Status']
