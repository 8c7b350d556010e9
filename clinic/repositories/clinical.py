"""Repositories for lab records, biometrics and assessment templates."""
from __future__ import annotations

from django.db.models.functions import Coalesce

from ..domain.clinical import (
    AssessmentTemplateDto,
    BloodGlucoseDto,
    BloodPressureDto,
    BodyHeightDto,
    BodyWeightDto,
    LabRecordDto,
)
from ..models import (
    AssessmentTemplate,
    BloodGlucose,
    BloodPressure,
    BodyHeight,
    BodyWeight,
    LabRecord,
)
from .base import BaseRepo, storage_operation


def measured_since(qs, since):
    """Rows measured at or after ``since``, oldest first; unrecorded readings count from creation."""
    return (qs.annotate(measured_at=Coalesce('recorded_at', 'created_at'))
            .filter(measured_at__gte=since)
            .order_by('measured_at', 'pk'))


RECORD_ORDER_COLUMNS = {
    'CreatedAt': 'created_at',
    'RecordedAt': 'recorded_at',
    'UpdatedAt': 'updated_at',
}


class LabRecordRepo(BaseRepo):
    model = LabRecord
    writable_fields = (
        'patient_user_id', 'type_name', 'display_name', 'primary_value', 'secondary_value',
        'unit', 'report_id', 'order_id', 'recorded_at',
    )
    exact_filters = {
        'patient_user_id': 'patient_user_id',
        'type_name': 'type_name',
        'report_id': 'report_id',
        'order_id': 'order_id',
    }
    contains_filters = {'display_name': 'display_name'}
    range_filters = {
        'primary_value': ('min_value', 'max_value'),
        'recorded_at': ('date_from', 'date_to'),
    }
    order_columns = {
        **RECORD_ORDER_COLUMNS,
        'DisplayName': 'display_name',
        'PrimaryValue': 'primary_value',
    }

    def to_dto(self, row) -> LabRecordDto:
        return LabRecordDto(
            id=str(row.id),
            patient_user_id=row.patient_user_id,
            type_name=row.type_name,
            display_name=row.display_name,
            primary_value=row.primary_value,
            secondary_value=row.secondary_value,
            unit=row.unit,
            report_id=row.report_id,
            order_id=row.order_id,
            recorded_at=row.recorded_at,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @storage_operation
    def get_recent_by_display_name(self, patient_user_id: str, display_name: str, since) -> list[LabRecordDto]:
        rows = measured_since(
            LabRecord.objects.filter(patient_user_id=patient_user_id, display_name=display_name), since)
        return [self.to_dto(r) for r in rows]


class BloodPressureRepo(BaseRepo):
    model = BloodPressure
    writable_fields = ('patient_user_id', 'systolic', 'diastolic', 'unit', 'recorded_at', 'recorded_by_user_id')
    exact_filters = {
        'patient_user_id': 'patient_user_id',
        'recorded_by_user_id': 'recorded_by_user_id',
    }
    range_filters = {
        'systolic': ('min_systolic', 'max_systolic'),
        'diastolic': ('min_diastolic', 'max_diastolic'),
        'recorded_at': ('created_date_from', 'created_date_to'),
    }
    order_columns = {**RECORD_ORDER_COLUMNS, 'Systolic': 'systolic', 'Diastolic': 'diastolic'}

    def to_dto(self, row) -> BloodPressureDto:
        return BloodPressureDto(
            id=str(row.id),
            patient_user_id=row.patient_user_id,
            systolic=row.systolic,
            diastolic=row.diastolic,
            unit=row.unit,
            recorded_at=row.recorded_at,
            recorded_by_user_id=row.recorded_by_user_id,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @storage_operation
    def get_recent(self, patient_user_id: str, since) -> list[BloodPressureDto]:
        rows = measured_since(BloodPressure.objects.filter(patient_user_id=patient_user_id), since)
        return [self.to_dto(r) for r in rows]


class _SingleValueBiometricRepo(BaseRepo):
    """Body height, body weight and blood glucose share one record shape."""
    value_field = ''
    dto_class: type = object
    exact_filters = {'patient_user_id': 'patient_user_id'}

    def to_dto(self, row):
        return self.dto_class(
            id=str(row.id),
            patient_user_id=row.patient_user_id,
            unit=row.unit,
            recorded_at=row.recorded_at,
            created_at=row.created_at,
            updated_at=row.updated_at,
            **{self.value_field: getattr(row, self.value_field)},
        )

    @storage_operation
    def get_recent(self, patient_user_id: str, since) -> list:
        rows = measured_since(self.model.objects.filter(patient_user_id=patient_user_id), since)
        return [self.to_dto(r) for r in rows]


class BodyHeightRepo(_SingleValueBiometricRepo):
    model = BodyHeight
    value_field = 'body_height'
    dto_class = BodyHeightDto
    writable_fields = ('patient_user_id', 'body_height', 'unit', 'recorded_at')
    range_filters = {
        'body_height': ('min_value', 'max_value'),
        'recorded_at': ('created_date_from', 'created_date_to'),
    }
    order_columns = {**RECORD_ORDER_COLUMNS, 'Value': 'body_height'}


class BodyWeightRepo(_SingleValueBiometricRepo):
    model = BodyWeight
    value_field = 'body_weight'
    dto_class = BodyWeightDto
    writable_fields = ('patient_user_id', 'body_weight', 'unit', 'recorded_at')
    range_filters = {
        'body_weight': ('min_value', 'max_value'),
        'recorded_at': ('created_date_from', 'created_date_to'),
    }
    order_columns = {**RECORD_ORDER_COLUMNS, 'Value': 'body_weight'}


class BloodGlucoseRepo(_SingleValueBiometricRepo):
    model = BloodGlucose
    value_field = 'blood_glucose'
    dto_class = BloodGlucoseDto
    writable_fields = ('patient_user_id', 'blood_glucose', 'unit', 'recorded_at')
    range_filters = {
        'blood_glucose': ('min_value', 'max_value'),
        'recorded_at': ('created_date_from', 'created_date_to'),
    }
    order_columns = {**RECORD_ORDER_COLUMNS, 'Value': 'blood_glucose'}


class AssessmentTemplateRepo(BaseRepo):
    model = AssessmentTemplate
    writable_fields = ('display_code', 'type', 'title', 'description', 'provider_assessment_code', 'provider')
    exact_filters = {
        'type': 'type',
        'display_code': 'display_code',
        'provider': 'provider',
        'provider_assessment_code': 'provider_assessment_code',
    }
    contains_filters = {'title': 'title'}
    order_columns = {'CreatedAt': 'created_at', 'Title': 'title', 'Type': 'type'}

    def to_dto(self, row) -> AssessmentTemplateDto:
        return AssessmentTemplateDto(
            id=str(row.id),
            display_code=row.display_code,
            type=row.type,
            title=row.title,
            description=row.description,
            provider_assessment_code=row.provider_assessment_code,
            provider=row.provider,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @storage_operation
    def get_by_provider_assessment_code(self, provider: str, code: str):
        row = AssessmentTemplate.objects.filter(provider=provider, provider_assessment_code=code).first()
        return self.to_dto(row) if row is not None else None
