"""
Patient endpoints.

Patients register themselves (only the client key is required); staff
search and manage patients, a patient may read and update their own
profile.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes

from .. import loader
from ..domain.base import to_wire
from ..exceptions import NotFound, OperationFailed
from ..permissions import STAFF_ROLES, IsAuthenticatedClient
from ..responses import ResponseHandler
from ..services.audit import log_action
from ..validators.users import PatientValidator
from .base import BaseController, action, error_boundary


class PatientController(BaseController):

    def __init__(self, service=None, validator=None):
        self.service = service or loader.patient_service()
        self.validator = validator or PatientValidator()

    @action('Patient.Create', allow_anonymous=True)
    def create(self, request):
        model = self.validator.create(request)
        if self.service.patient_exists(model.user.phone):
            raise OperationFailed(f"Patient with phone {model.user.phone} already exists!")
        if self.service.user_name_taken(model.user.user_name):
            raise OperationFailed(f"User name {model.user.user_name} is already taken!")
        patient = self.service.create(model)
        if patient is None:
            raise OperationFailed('Unable to create patient!')
        log_action(user=request.user, action='patient.create', object_type='patient', object_id=patient.user_id)
        return ResponseHandler.success(request, 'Patient created successfully!', 201, {
            'Patient': to_wire(patient),
        })

    @action('Patient.GetByUserId')
    def get_by_user_id(self, request, **kwargs):
        user_id = self.validator.get_param_id(kwargs, 'userId')
        self.authorize_patient(request, user_id)
        patient = self.service.get_by_user_id(user_id)
        if patient is None:
            raise NotFound('Patient not found.')
        return ResponseHandler.success(request, 'Patient retrieved successfully!', 200, {
            'Patient': to_wire(patient),
        })

    @action('Patient.Search', STAFF_ROLES)
    def search(self, request):
        filters = self.validator.search(request)
        results = self.service.search(filters)
        count = results.retrieved_count
        message = 'No records found!' if count == 0 else f"Total {count} patients retrieved successfully!"
        return ResponseHandler.success(request, message, 200, {
            'Patients': to_wire(results),
        })

    @action('Patient.UpdateByUserId')
    def update_by_user_id(self, request, **kwargs):
        user_id = self.validator.get_param_id(kwargs, 'userId')
        self.authorize_patient(request, user_id)
        model = self.validator.update(request)
        if self.service.get_by_user_id(user_id) is None:
            raise NotFound('Patient not found.')
        if self.service.user_name_taken(model.user.user_name, user_id):
            raise OperationFailed(f"User name {model.user.user_name} is already taken!")
        updated = self.service.update_by_user_id(user_id, model)
        if updated is None:
            raise OperationFailed('Unable to update patient!')
        log_action(user=request.user, action='patient.update', object_type='patient', object_id=user_id)
        return ResponseHandler.success(request, 'Patient records updated successfully!', 200, {
            'Patient': to_wire(updated),
        })

    @action('Patient.DeleteByUserId', STAFF_ROLES)
    def delete_by_user_id(self, request, **kwargs):
        user_id = self.validator.get_param_id(kwargs, 'userId')
        if self.service.get_by_user_id(user_id) is None:
            raise NotFound('Patient not found.')
        if not self.service.delete_by_user_id(user_id):
            raise OperationFailed('Patient cannot be deleted.')
        log_action(user=request.user, action='patient.delete', object_type='patient', object_id=user_id)
        return ResponseHandler.success(request, 'Patient deleted successfully!', 200, {
            'Deleted': True,
        })

    @error_boundary
    def collection(self, request):
        if request.method == 'POST':
            return self.create(request)
        return self.search(request)

    @error_boundary
    def item(self, request, **kwargs):
        if request.method == 'GET':
            return self.get_by_user_id(request, **kwargs)
        if request.method == 'DELETE':
            return self.delete_by_user_id(request, **kwargs)
        return self.update_by_user_id(request, **kwargs)


controller = PatientController()


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedClient])
def patients(request):
    return controller.collection(request)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def patient_detail(request, userId):
    return controller.item(request, userId=userId)
