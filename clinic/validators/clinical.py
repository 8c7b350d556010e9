from __future__ import annotations

from rest_framework import serializers

from ..domain.clinical import (
    AssessmentTemplateDomainModel,
    AssessmentTemplateSearchFilters,
    BiometricSearchFilters,
    BloodGlucoseDomainModel,
    BloodPressureDomainModel,
    BloodPressureSearchFilters,
    BodyHeightDomainModel,
    BodyWeightDomainModel,
    LabRecordDomainModel,
    LabRecordSearchFilters,
)
from .base import BaseSearchQuerySerializer, BaseValidator, SanitizedCharField

PATIENT_USER_ID = dict(max_length=64)


# -- serializers --------------------------------------------------------------

class LabRecordSerializer(serializers.Serializer):
    PatientUserId = serializers.CharField(**PATIENT_USER_ID)
    TypeName = SanitizedCharField(required=False, allow_null=True, max_length=128)
    DisplayName = SanitizedCharField(max_length=128)
    PrimaryValue = serializers.FloatField()
    SecondaryValue = serializers.FloatField(required=False, allow_null=True)
    Unit = SanitizedCharField(required=False, allow_null=True, max_length=32)
    ReportId = serializers.CharField(required=False, allow_null=True, max_length=64)
    OrderId = serializers.CharField(required=False, allow_null=True, max_length=64)
    RecordedAt = serializers.DateTimeField(required=False, allow_null=True)


class LabRecordQuerySerializer(BaseSearchQuerySerializer):
    patientUserId = serializers.CharField(required=False, **PATIENT_USER_ID)
    typeName = SanitizedCharField(required=False)
    displayName = SanitizedCharField(required=False)
    minValue = serializers.FloatField(required=False)
    maxValue = serializers.FloatField(required=False)
    dateFrom = serializers.DateTimeField(required=False)
    dateTo = serializers.DateTimeField(required=False)
    reportId = serializers.CharField(required=False)
    orderId = serializers.CharField(required=False)


class BloodPressureSerializer(serializers.Serializer):
    PatientUserId = serializers.CharField(**PATIENT_USER_ID)
    Systolic = serializers.FloatField(min_value=0, max_value=400)
    Diastolic = serializers.FloatField(min_value=0, max_value=300)
    Unit = SanitizedCharField(required=False, allow_null=True, max_length=16)
    RecordedAt = serializers.DateTimeField(required=False, allow_null=True)
    RecordedByUserId = serializers.CharField(required=False, allow_null=True, max_length=64)


class BloodPressureQuerySerializer(BaseSearchQuerySerializer):
    patientUserId = serializers.CharField(required=False, **PATIENT_USER_ID)
    minSystolic = serializers.FloatField(required=False)
    maxSystolic = serializers.FloatField(required=False)
    minDiastolic = serializers.FloatField(required=False)
    maxDiastolic = serializers.FloatField(required=False)
    createdDateFrom = serializers.DateTimeField(required=False)
    createdDateTo = serializers.DateTimeField(required=False)
    recordedByUserId = serializers.CharField(required=False)


class BodyHeightSerializer(serializers.Serializer):
    PatientUserId = serializers.CharField(**PATIENT_USER_ID)
    BodyHeight = serializers.FloatField(min_value=0)
    Unit = SanitizedCharField(required=False, allow_null=True, max_length=16)
    RecordedAt = serializers.DateTimeField(required=False, allow_null=True)


class BodyWeightSerializer(serializers.Serializer):
    PatientUserId = serializers.CharField(**PATIENT_USER_ID)
    BodyWeight = serializers.FloatField(min_value=0)
    Unit = SanitizedCharField(required=False, allow_null=True, max_length=16)
    RecordedAt = serializers.DateTimeField(required=False, allow_null=True)


class BloodGlucoseSerializer(serializers.Serializer):
    PatientUserId = serializers.CharField(**PATIENT_USER_ID)
    BloodGlucose = serializers.FloatField(min_value=0)
    Unit = SanitizedCharField(required=False, allow_null=True, max_length=16)
    RecordedAt = serializers.DateTimeField(required=False, allow_null=True)


class BiometricQuerySerializer(BaseSearchQuerySerializer):
    patientUserId = serializers.CharField(required=False, **PATIENT_USER_ID)
    minValue = serializers.FloatField(required=False)
    maxValue = serializers.FloatField(required=False)
    createdDateFrom = serializers.DateTimeField(required=False)
    createdDateTo = serializers.DateTimeField(required=False)


class AssessmentTemplateSerializer(serializers.Serializer):
    DisplayCode = SanitizedCharField(required=False, allow_null=True, max_length=64)
    Type = serializers.ChoiceField(choices=['Careplan service', 'Clinical assessment', 'Survey', 'Custom'])
    Title = SanitizedCharField(max_length=255)
    Description = SanitizedCharField(required=False, allow_null=True, allow_blank=True)
    ProviderAssessmentCode = SanitizedCharField(required=False, allow_null=True, max_length=64)
    Provider = SanitizedCharField(required=False, allow_null=True, max_length=64)


class AssessmentTemplateQuerySerializer(BaseSearchQuerySerializer):
    title = SanitizedCharField(required=False)
    type = serializers.CharField(required=False)
    displayCode = serializers.CharField(required=False)
    provider = serializers.CharField(required=False)
    providerAssessmentCode = serializers.CharField(required=False)


# -- validators --------------------------------------------------------------

class RecordValidator(BaseValidator):
    """create / update / search for one record type."""
    serializer_class: type = serializers.Serializer
    query_serializer_class: type = BaseSearchQuerySerializer
    domain_model: type = object
    search_filters: type = object

    def create(self, request):
        vd = self.validate(self.serializer_class, request.data)
        return self.to_model(self.domain_model, vd)

    def update(self, request, id: str):
        vd = self.validate(self.serializer_class, request.data, partial=True)
        return self.to_model(self.domain_model, vd, id=id)

    def search(self, request):
        vd = self.validate(self.query_serializer_class, request.query_params)
        return self.to_filters(self.search_filters, vd)


class LabRecordValidator(RecordValidator):
    serializer_class = LabRecordSerializer
    query_serializer_class = LabRecordQuerySerializer
    domain_model = LabRecordDomainModel
    search_filters = LabRecordSearchFilters


class BloodPressureValidator(RecordValidator):
    serializer_class = BloodPressureSerializer
    query_serializer_class = BloodPressureQuerySerializer
    domain_model = BloodPressureDomainModel
    search_filters = BloodPressureSearchFilters

    def create(self, request):
        model = super().create(request)
        if model.recorded_by_user_id is None and getattr(request, 'user', None) is not None:
            model.recorded_by_user_id = request.user.id
        return model


class BodyHeightValidator(RecordValidator):
    serializer_class = BodyHeightSerializer
    query_serializer_class = BiometricQuerySerializer
    domain_model = BodyHeightDomainModel
    search_filters = BiometricSearchFilters


class BodyWeightValidator(RecordValidator):
    serializer_class = BodyWeightSerializer
    query_serializer_class = BiometricQuerySerializer
    domain_model = BodyWeightDomainModel
    search_filters = BiometricSearchFilters


class BloodGlucoseValidator(RecordValidator):
    serializer_class = BloodGlucoseSerializer
    query_serializer_class = BiometricQuerySerializer
    domain_model = BloodGlucoseDomainModel
    search_filters = BiometricSearchFilters


class AssessmentTemplateValidator(RecordValidator):
    serializer_class = AssessmentTemplateSerializer
    query_serializer_class = AssessmentTemplateQuerySerializer
    domain_model = AssessmentTemplateDomainModel
    search_filters = AssessmentTemplateSearchFilters

    def get_provider_code(self, kwargs: dict) -> tuple[str, str]:
        vd = self.validate(ProviderCodeSerializer, kwargs)
        return vd['provider'], vd['code']


class ProviderCodeSerializer(serializers.Serializer):
    provider = SanitizedCharField(max_length=64)
    code = SanitizedCharField(max_length=64)
