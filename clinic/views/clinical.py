"""
Lab record, biometric and assessment template endpoints.

Each record type gets the same five actions (create, get, search, update,
delete).  Lab records and biometrics are forwarded to the EHR store after
a create or update when the patient uses an eligible application.
"""
from __future__ import annotations

import logging

from rest_framework.decorators import api_view

from .. import loader
from ..domain.base import to_wire
from ..ehr.record_types import EHRRecordTypes
from ..exceptions import NotFound, OperationFailed
from ..permissions import ADMIN_ROLES, STAFF_ROLES
from ..responses import ResponseHandler
from ..validators.clinical import (
    AssessmentTemplateValidator,
    BloodGlucoseValidator,
    BloodPressureValidator,
    BodyHeightValidator,
    BodyWeightValidator,
    LabRecordValidator,
)
from .base import BaseController, action, error_boundary

logger = logging.getLogger(__name__)


class RecordController(BaseController):
    """CRUD actions for one record type."""
    context = ''            # e.g. 'Clinical.LabRecord'
    entity = ''             # Data key of a single record
    label = ''              # human name in messages
    ehr_record_type: str | None = None
    write_roles: set[str] | None = None
    patient_owned = True

    def __init__(self, service, validator):
        self.service = service
        self.validator = validator
        self.ehr = loader.ehr_analytics_handler() if self.ehr_record_type else None

    def label_for(self, dto) -> str:
        return self.label

    def ehr_values(self, dto) -> dict:
        raise NotImplementedError

    def forward_to_ehr(self, dto) -> None:
        if self.ehr is None:
            return
        self.ehr.forward(dto.patient_user_id, dto.id, self.ehr_record_type, **self.ehr_values(dto))

    def _existing(self, request, kwargs):
        id = self.validator.get_param_uuid(kwargs, 'id')
        existing = self.service.get_by_id(id)
        if existing is None:
            raise NotFound(f"{self.label} record not found.")
        if self.patient_owned:
            self.authorize_patient(request, existing.patient_user_id)
        return id, existing

    def create(self, request):
        self.set_context(f"{self.context}.Create", request, self.write_roles)
        model = self.validator.create(request)
        if self.patient_owned:
            self.authorize_patient(request, model.patient_user_id)
        record = self.service.create(model)
        if record is None:
            raise OperationFailed(f"Cannot create {self.label.lower()} record!")
        self.forward_to_ehr(record)
        return ResponseHandler.success(request, f"{self.label_for(record)} record created successfully!", 201, {
            self.entity: to_wire(record),
        })

    def get_by_id(self, request, **kwargs):
        self.set_context(f"{self.context}.GetById", request)
        _, record = self._existing(request, kwargs)
        return ResponseHandler.success(request, f"{self.label_for(record)} record retrieved successfully!", 200, {
            self.entity: to_wire(record),
        })

    def search(self, request):
        self.set_context(f"{self.context}.Search", request)
        filters = self.validator.search(request)
        if self.patient_owned:
            filters = self.pin_to_caller(request, filters)
        results = self.service.search(filters)
        count = results.retrieved_count
        message = 'No records found!' if count == 0 else \
            f"Total {count} {self.label.lower()} records retrieved successfully!"
        return ResponseHandler.success(request, message, 200, {
            f"{self.entity}Records": to_wire(results),
        })

    def update(self, request, **kwargs):
        self.set_context(f"{self.context}.Update", request, self.write_roles)
        id = self.validator.get_param_uuid(kwargs, 'id')
        model = self.validator.update(request, id)
        self._existing(request, kwargs)
        if self.patient_owned:
            self.authorize_patient(request, model.patient_user_id)
        updated = self.service.update(id, model)
        if updated is None:
            raise OperationFailed(f"Unable to update {self.label.lower()} record!")
        self.forward_to_ehr(updated)
        return ResponseHandler.success(request, f"{self.label_for(updated)} record updated successfully!", 200, {
            self.entity: to_wire(updated),
        })

    def delete(self, request, **kwargs):
        self.set_context(f"{self.context}.Delete", request, self.write_roles)
        id, existing = self._existing(request, kwargs)
        if not self.service.delete(id):
            raise OperationFailed(f"{self.label} record cannot be deleted.")
        return ResponseHandler.success(request, f"{self.label_for(existing)} record deleted successfully!", 200, {
            'Deleted': True,
        })

    # -- dispatch ------------------------------------------------------

    @error_boundary
    def collection(self, request):
        if request.method == 'POST':
            return self.create(request)
        return self.search(request)

    @error_boundary
    def item(self, request, **kwargs):
        if request.method == 'GET':
            return self.get_by_id(request, **kwargs)
        if request.method == 'DELETE':
            return self.delete(request, **kwargs)
        return self.update(request, **kwargs)


class LabRecordController(RecordController):
    context = 'Clinical.LabRecord'
    entity = 'LabRecord'
    label = 'Lab'
    ehr_record_type = EHRRecordTypes.LabRecord

    def label_for(self, dto) -> str:
        return dto.display_name or self.label

    def ehr_values(self, dto) -> dict:
        return {
            'value': dto.primary_value,
            'secondary_value': dto.secondary_value,
            'unit': dto.unit,
            'name': dto.type_name or dto.display_name,
            'display_name': dto.display_name,
        }


class BloodPressureController(RecordController):
    context = 'Biometrics.BloodPressure'
    entity = 'BloodPressure'
    label = 'Blood pressure'
    ehr_record_type = EHRRecordTypes.BloodPressure

    def ehr_values(self, dto) -> dict:
        return {
            'value': dto.systolic,
            'secondary_value': dto.diastolic,
            'unit': dto.unit,
            'name': 'BloodPressure',
            'display_name': 'Blood Pressure',
        }


class BodyHeightController(RecordController):
    context = 'Biometrics.BodyHeight'
    entity = 'BodyHeight'
    label = 'Body height'
    ehr_record_type = EHRRecordTypes.BodyHeight

    def ehr_values(self, dto) -> dict:
        return {'value': dto.body_height, 'unit': dto.unit, 'name': 'BodyHeight', 'display_name': 'Body Height'}


class BodyWeightController(RecordController):
    context = 'Biometrics.BodyWeight'
    entity = 'BodyWeight'
    label = 'Body weight'
    ehr_record_type = EHRRecordTypes.BodyWeight

    def ehr_values(self, dto) -> dict:
        return {'value': dto.body_weight, 'unit': dto.unit, 'name': 'BodyWeight', 'display_name': 'Body Weight'}


class BloodGlucoseController(RecordController):
    context = 'Biometrics.BloodGlucose'
    entity = 'BloodGlucose'
    label = 'Blood glucose'
    ehr_record_type = EHRRecordTypes.BloodGlucose

    def ehr_values(self, dto) -> dict:
        return {'value': dto.blood_glucose, 'unit': dto.unit, 'name': 'BloodGlucose', 'display_name': 'Blood Glucose'}


class AssessmentTemplateController(RecordController):
    context = 'Clinical.AssessmentTemplate'
    entity = 'AssessmentTemplate'
    label = 'Assessment template'
    write_roles = ADMIN_ROLES
    patient_owned = False

    @action('Clinical.AssessmentTemplate.GetByProviderAssessmentCode', STAFF_ROLES)
    def get_by_provider_assessment_code(self, request, **kwargs):
        provider, code = self.validator.get_provider_code(kwargs)
        template = self.service.get_by_provider_assessment_code(provider, code)
        if template is None:
            raise NotFound('Assessment template not found.')
        return ResponseHandler.success(request, 'Assessment template retrieved successfully!', 200, {
            self.entity: to_wire(template),
        })


lab_records_controller = LabRecordController(loader.lab_record_service(), LabRecordValidator())
blood_pressure_controller = BloodPressureController(loader.blood_pressure_service(), BloodPressureValidator())
body_heights_controller = BodyHeightController(loader.body_height_service(), BodyHeightValidator())
body_weights_controller = BodyWeightController(loader.body_weight_service(), BodyWeightValidator())
blood_glucose_controller = BloodGlucoseController(loader.blood_glucose_service(), BloodGlucoseValidator())
assessment_templates_controller = AssessmentTemplateController(
    loader.assessment_template_service(), AssessmentTemplateValidator())


@api_view(['GET', 'POST'])
def lab_records(request):
    return lab_records_controller.collection(request)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def lab_record_detail(request, id):
    return lab_records_controller.item(request, id=id)


@api_view(['GET', 'POST'])
def blood_pressures(request):
    return blood_pressure_controller.collection(request)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def blood_pressure_detail(request, id):
    return blood_pressure_controller.item(request, id=id)


@api_view(['GET', 'POST'])
def body_heights(request):
    return body_heights_controller.collection(request)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def body_height_detail(request, id):
    return body_heights_controller.item(request, id=id)


@api_view(['GET', 'POST'])
def body_weights(request):
    return body_weights_controller.collection(request)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def body_weight_detail(request, id):
    return body_weights_controller.item(request, id=id)


@api_view(['GET', 'POST'])
def blood_glucoses(request):
    return blood_glucose_controller.collection(request)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def blood_glucose_detail(request, id):
    return blood_glucose_controller.item(request, id=id)


@api_view(['GET', 'POST'])
def assessment_templates(request):
    return assessment_templates_controller.collection(request)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def assessment_template_detail(request, id):
    return assessment_templates_controller.item(request, id=id)


@api_view(['GET'])
def assessment_template_by_provider_code(request, provider, code):
    return assessment_templates_controller.get_by_provider_assessment_code(request, provider=provider, code=code)
