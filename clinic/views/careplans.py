"""Care-plan catalogue, enrolment, tasks and weekly progress."""
from __future__ import annotations

from rest_framework.decorators import api_view

from .. import loader
from ..domain.base import to_wire
from ..exceptions import NotFound, OperationFailed
from ..responses import ResponseHandler
from ..validators.careplans import CareplanValidator
from .base import BaseController, action


class CareplanController(BaseController):

    def __init__(self, service=None, validator=None):
        self.service = service or loader.careplan_service()
        self.validator = validator or CareplanValidator()

    def _enrollment(self, request, kwargs):
        enrollment_id = self.validator.get_param_uuid(kwargs, 'id')
        enrollment = self.service.get_enrollment(enrollment_id)
        if enrollment is None:
            raise NotFound('Care plan enrollment not found.')
        self.authorize_patient(request, enrollment.patient_user_id)
        return enrollment

    @action('Careplan.GetAvailableCareplans')
    def get_available_careplans(self, request):
        plans = self.service.get_available_careplans(self.validator.provider(request))
        return ResponseHandler.success(request, 'Available care plans retrieved successfully!', 200, {
            'AvailablePlans': to_wire(plans),
        })

    @action('Careplan.Enroll')
    def enroll(self, request, **kwargs):
        patient_user_id = self.validator.get_param_id(kwargs, 'patientUserId')
        self.authorize_patient(request, patient_user_id)
        model = self.validator.enroll(request, patient_user_id)
        enrollment = self.service.enroll(model)
        if enrollment is None:
            raise OperationFailed(f"Care plan {model.plan_code} is not available!")
        return ResponseHandler.success(request, 'Patient enrolled to care plan successfully!', 201, {
            'Enrollment': to_wire(enrollment),
        })

    @action('Careplan.GetPatientEnrollments')
    def get_patient_enrollments(self, request, **kwargs):
        patient_user_id = self.validator.get_param_id(kwargs, 'patientUserId')
        self.authorize_patient(request, patient_user_id)
        enrollments = self.service.get_patient_enrollments(patient_user_id, self.validator.enrollments_query(request))
        count = len(enrollments)
        message = 'No records found!' if count == 0 else f"Total {count} enrollments retrieved successfully!"
        return ResponseHandler.success(request, message, 200, {
            'PatientEnrollments': to_wire(enrollments),
        })

    @action('Careplan.FetchTasks')
    def fetch_tasks(self, request, **kwargs):
        enrollment = self._enrollment(request, kwargs)
        tasks = self.service.fetch_tasks(enrollment.id, self.validator.tasks_query(request))
        return ResponseHandler.success(request, f"Total {len(tasks)} care plan tasks retrieved successfully!", 200, {
            'CareplanActivities': to_wire(tasks),
        })

    @action('Careplan.GetWeeklyStatus')
    def get_weekly_status(self, request, **kwargs):
        enrollment = self._enrollment(request, kwargs)
        status = self.service.get_weekly_status(enrollment)
        return ResponseHandler.success(request, 'Care plan weekly status retrieved successfully!', 200, {
            'WeeklyStatus': to_wire(status),
        })

    @action('Careplan.UpdateTask')
    def update_task(self, request, **kwargs):
        enrollment = self._enrollment(request, kwargs)
        task_id = self.validator.get_param_uuid(kwargs, 'taskId')
        status = self.validator.task_status(request)
        if self.service.get_task(enrollment.id, task_id) is None:
            raise NotFound('Care plan task not found.')
        task = self.service.update_task_status(task_id, status)
        if task is None:
            raise OperationFailed('Unable to update care plan task!')
        return ResponseHandler.success(request, 'Care plan task updated successfully!', 200, {
            'CareplanActivity': to_wire(task),
        })


controller = CareplanController()


@api_view(['GET'])
def available_careplans(request):
    return controller.get_available_careplans(request)


@api_view(['POST'])
def enroll(request, patientUserId):
    return controller.enroll(request, patientUserId=patientUserId)


@api_view(['GET'])
def patient_enrollments(request, patientUserId):
    return controller.get_patient_enrollments(request, patientUserId=patientUserId)


@api_view(['GET'])
def fetch_tasks(request, id):
    return controller.fetch_tasks(request, id=id)


@api_view(['GET'])
def weekly_status(request, id):
    return controller.get_weekly_status(request, id=id)


@api_view(['PUT', 'PATCH'])
def update_task(request, id, taskId):
    return controller.update_task(request, id=id, taskId=taskId)
