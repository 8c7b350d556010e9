"""
User statistics and per-patient biometrics reports.

The report endpoint answers with the PDF itself rather than the JSON
envelope; errors still use the envelope.
"""
from __future__ import annotations

from django.http import HttpResponse
from django.utils import timezone
from rest_framework.decorators import api_view

from .. import loader
from ..domain.base import to_wire
from ..exceptions import NotFound
from ..permissions import ADMIN_ROLES, STAFF_ROLES
from ..responses import ResponseHandler
from ..validators.statistics import StatisticsValidator
from .base import BaseController, action, error_boundary


class StatisticsController(BaseController):

    def __init__(self, service=None, validator=None):
        self.service = service or loader.statistics_service()
        self.validator = validator or StatisticsValidator()

    @action('Statistics.GetUsersByAge', STAFF_ROLES)
    def get_users_by_age(self, request):
        stats = self.service.get_users_by_age(self.validator.age_filters(request))
        return ResponseHandler.success(request, 'Users statistics by age retrieved successfully!', 200, {
            'UsersByAge': stats,
        })

    @action('Statistics.GetUsersByGender', STAFF_ROLES)
    def get_users_by_gender(self, request):
        stats = self.service.get_users_by_gender(self.validator.statistics_filters(request))
        return ResponseHandler.success(request, 'Users statistics by gender retrieved successfully!', 200, {
            'UsersByGender': stats,
        })

    @action('Statistics.GetAppDownloads', STAFF_ROLES)
    def get_app_downloads(self, request):
        downloads = self.service.get_app_downloads()
        return ResponseHandler.success(request, 'App downloads retrieved successfully!', 200, {
            'AppDownloads': to_wire(downloads),
        })

    @action('Statistics.UpdateAppDownloads', ADMIN_ROLES)
    def update_app_downloads(self, request):
        downloads = self.service.update_app_downloads(self.validator.app_downloads(request))
        return ResponseHandler.success(request, 'App downloads updated successfully!', 200, {
            'AppDownload': to_wire(downloads),
        })

    @action('Statistics.GetPatientStats')
    def get_patient_stats(self, request, **kwargs):
        patient_user_id = self.validator.get_param_id(kwargs, 'patientUserId')
        self.authorize_patient(request, patient_user_id)
        stats = self.service.get_patient_stats(patient_user_id)
        return ResponseHandler.success(request, 'Patient statistics retrieved successfully!', 200, {
            'Stats': to_wire(stats),
        })

    @action('Statistics.GetPatientStatsReport')
    def get_patient_stats_report(self, request, **kwargs):
        patient_user_id = self.validator.get_param_id(kwargs, 'patientUserId')
        self.authorize_patient(request, patient_user_id)
        pdf = self.service.generate_patient_report(patient_user_id)
        if pdf is None:
            raise NotFound('Patient not found.')
        filename = f"health-report-{timezone.localdate().isoformat()}.pdf"
        response = HttpResponse(pdf, content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response

    @error_boundary
    def app_downloads(self, request):
        if request.method == 'GET':
            return self.get_app_downloads(request)
        return self.update_app_downloads(request)


controller = StatisticsController()


@api_view(['GET'])
def users_by_age(request):
    return controller.get_users_by_age(request)


@api_view(['GET'])
def users_by_gender(request):
    return controller.get_users_by_gender(request)


@api_view(['GET', 'PUT'])
def app_downloads(request):
    return controller.app_downloads(request)


@api_view(['GET'])
def patient_stats(request, patientUserId):
    return controller.get_patient_stats(request, patientUserId=patientUserId)


@api_view(['GET'])
def patient_stats_report(request, patientUserId):
    return controller.get_patient_stats_report(request, patientUserId=patientUserId)
