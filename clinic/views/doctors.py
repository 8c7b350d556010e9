"""Doctor endpoints: administrators register doctors, staff manage them."""
from __future__ import annotations

from rest_framework.decorators import api_view

from .. import loader
from ..domain.base import to_wire
from ..exceptions import NotFound, OperationFailed
from ..permissions import ADMIN_ROLES, STAFF_ROLES
from ..responses import ResponseHandler
from ..services.audit import log_action
from ..validators.users import DoctorValidator
from .base import BaseController, action, error_boundary


class DoctorController(BaseController):

    def __init__(self, service=None, validator=None):
        self.service = service or loader.doctor_service()
        self.validator = validator or DoctorValidator()

    @action('Doctor.Create', ADMIN_ROLES)
    def create(self, request):
        model = self.validator.create(request)
        if self.service.doctor_exists(model):
            raise OperationFailed(f"Doctor with phone {model.user.phone} already exists!")
        if self.service.user_name_taken(model.user.user_name):
            raise OperationFailed(f"User name {model.user.user_name} is already taken!")
        doctor = self.service.create(model)
        if doctor is None:
            raise OperationFailed('Unable to create doctor!')
        log_action(user=request.user, action='doctor.create', object_type='doctor', object_id=doctor.user_id)
        return ResponseHandler.success(request, 'Doctor created successfully!', 201, {
            'Doctor': to_wire(doctor),
        })

    @action('Doctor.GetByUserId')
    def get_by_user_id(self, request, **kwargs):
        user_id = self.validator.get_param_id(kwargs, 'userId')
        doctor = self.service.get_by_user_id(user_id)
        if doctor is None:
            raise NotFound('Doctor not found.')
        return ResponseHandler.success(request, 'Doctor retrieved successfully!', 200, {
            'Doctor': to_wire(doctor),
        })

    @action('Doctor.Search')
    def search(self, request):
        filters = self.validator.search(request)
        results = self.service.search(filters)
        count = results.retrieved_count
        message = 'No records found!' if count == 0 else f"Total {count} doctors retrieved successfully!"
        return ResponseHandler.success(request, message, 200, {
            'Doctors': to_wire(results),
        })

    @action('Doctor.UpdateByUserId', STAFF_ROLES)
    def update_by_user_id(self, request, **kwargs):
        user_id = self.validator.get_param_id(kwargs, 'userId')
        model = self.validator.update(request)
        if self.service.get_by_user_id(user_id) is None:
            raise NotFound('Doctor not found.')
        if self.service.user_name_taken(model.user.user_name, user_id):
            raise OperationFailed(f"User name {model.user.user_name} is already taken!")
        updated = self.service.update_by_user_id(user_id, model)
        if updated is None:
            raise OperationFailed('Unable to update doctor!')
        log_action(user=request.user, action='doctor.update', object_type='doctor', object_id=user_id)
        return ResponseHandler.success(request, 'Doctor records updated successfully!', 200, {
            'Doctor': to_wire(updated),
        })

    @action('Doctor.DeleteByUserId', ADMIN_ROLES)
    def delete_by_user_id(self, request, **kwargs):
        user_id = self.validator.get_param_id(kwargs, 'userId')
        if self.service.get_by_user_id(user_id) is None:
            raise NotFound('Doctor not found.')
        if not self.service.delete_by_user_id(user_id):
            raise OperationFailed('Doctor cannot be deleted.')
        log_action(user=request.user, action='doctor.delete', object_type='doctor', object_id=user_id)
        return ResponseHandler.success(request, 'Doctor deleted successfully!', 200, {
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


controller = DoctorController()


@api_view(['GET', 'POST'])
def doctors(request):
    return controller.collection(request)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def doctor_detail(request, userId):
    return controller.item(request, userId=userId)
