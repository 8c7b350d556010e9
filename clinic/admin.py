"""
Django admin registrations for the clinic models.

Superusers can inspect clinical records, API clients and the EHR
forwarding queue through ``/admin/``.
"""

from django.contrib import admin

from .models import (
    ApiClient,
    AssessmentTemplate,
    AuditEvent,
    BloodGlucose,
    BloodPressure,
    BodyHeight,
    BodyWeight,
    CareplanEnrollment,
    Conversation,
    Doctor,
    EhrRecordJob,
    LabRecord,
    Patient,
    User,
    UserAppRegistration,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'phone', 'email', 'is_active')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'first_name', 'last_name', 'phone', 'email')


@admin.register(ApiClient)
class ApiClientAdmin(admin.ModelAdmin):
    list_display = ('client_code', 'name', 'is_active')
    search_fields = ('client_code', 'name')


@admin.register(UserAppRegistration)
class UserAppRegistrationAdmin(admin.ModelAdmin):
    list_display = ('user', 'app_name', 'created_at')
    search_fields = ('user__username', 'app_name')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('user', 'ehr_id', 'created_at')
    search_fields = ('user__username', 'user__first_name', 'user__phone')


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('user', 'ehr_id', 'created_at')
    search_fields = ('user__username', 'user__first_name', 'user__phone')


@admin.register(LabRecord)
class LabRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient_user_id', 'display_name', 'primary_value', 'unit', 'recorded_at')
    search_fields = ('patient_user_id', 'display_name', 'type_name')


@admin.register(BloodPressure)
class BloodPressureAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient_user_id', 'systolic', 'diastolic', 'recorded_at')
    search_fields = ('patient_user_id',)


@admin.register(BodyHeight, BodyWeight, BloodGlucose)
class BiometricAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient_user_id', 'unit', 'recorded_at', 'created_at')
    search_fields = ('patient_user_id',)


@admin.register(AssessmentTemplate)
class AssessmentTemplateAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'type', 'provider', 'provider_assessment_code')
    list_filter = ('type', 'provider')
    search_fields = ('title', 'display_code', 'provider_assessment_code')


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ('id', 'topic', 'is_group_conversation', 'last_message_timestamp')
    search_fields = ('topic',)


@admin.register(CareplanEnrollment)
class CareplanEnrollmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient_user_id', 'plan_code', 'start_date', 'end_date', 'is_active')
    list_filter = ('plan_code', 'is_active')


@admin.register(EhrRecordJob)
class EhrRecordJobAdmin(admin.ModelAdmin):
    list_display = ('id', 'record_type', 'patient_user_id', 'app_name', 'status', 'attempts', 'next_attempt_at')
    list_filter = ('status', 'record_type')
    search_fields = ('patient_user_id', 'record_id')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'user', 'action', 'object_type', 'object_id')
    list_filter = ('action',)
