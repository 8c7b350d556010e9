"""
Database models for the CareHub API.

Each entity type owns one table.  Clinical records reference the patient
user by id rather than embedding it; the user is created and managed on
its own.  Record identifiers are UUIDs, user identifiers are generated
UUID strings so that integrations can supply their own ids.
"""
from __future__ import annotations

import uuid
from django.contrib.auth.models import AbstractUser
from django.db import models


def new_user_id() -> str:
    return str(uuid.uuid4())


class TimestampedModel(models.Model):
    """Abstract base carrying the audit timestamps every DTO exposes."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class User(AbstractUser):
    """Custom user model holding the person details and a role.

    Roles: 'patient', 'doctor', 'admin' and 'system'.  A patient or doctor
    additionally owns a :class:`Patient` or :class:`Doctor` row.
    """
    ROLE_PATIENT = 'patient'
    ROLE_DOCTOR = 'doctor'
    ROLE_ADMIN = 'admin'
    ROLE_SYSTEM = 'system'
    ROLE_CHOICES = [
        (ROLE_PATIENT, 'Patient'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_SYSTEM, 'System'),
    ]
    id = models.CharField(max_length=64, primary_key=True, default=new_user_id, editable=False)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    phone = models.CharField(max_length=32, blank=True, default='', db_index=True)
    prefix = models.CharField(max_length=16, blank=True, default='')
    gender = models.CharField(max_length=16, blank=True, default='')
    birth_date = models.DateField(null=True, blank=True)
    image_resource_id = models.UUIDField(null=True, blank=True)
    default_time_zone = models.CharField(max_length=16, blank=True, default='+05:30')
    current_time_zone = models.CharField(max_length=16, blank=True, default='+05:30')

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class ApiClient(models.Model):
    """A calling application allowed to use the API (authenticateClient)."""
    client_code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=255)
    api_key = models.CharField(max_length=128, unique=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.client_code})"


class UserAppRegistration(models.Model):
    """Records which mobile/web application a user signed up through.

    Used to decide whether the user's clinical data may be forwarded to
    the EHR store.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='app_registrations')
    app_name = models.CharField(max_length=128)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('user', 'app_name')]

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.app_name}"


class Patient(TimestampedModel):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='patient')
    ehr_id = models.CharField(max_length=128, null=True, blank=True)
    addresses = models.JSONField(default=list, blank=True)

    def __str__(self) -> str:
        return f"patient {self.user_id}"


class Doctor(TimestampedModel):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor')
    ehr_id = models.CharField(max_length=128, null=True, blank=True)
    specialities = models.JSONField(default=list, blank=True)
    about = models.TextField(blank=True, default='')

    def __str__(self) -> str:
        return f"doctor {self.user_id}"


# ---------------------------------------------------------------------------
# Clinical records
# ---------------------------------------------------------------------------

class PatientRecord(TimestampedModel):
    """Abstract base for records owned by a patient user."""
    patient_user = models.ForeignKey(
        User, on_delete=models.CASCADE, db_constraint=False, related_name='+', db_index=True
    )
    recorded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True


class LabRecord(PatientRecord):
    type_name = models.CharField(max_length=128, blank=True, null=True)
    display_name = models.CharField(max_length=128, db_index=True)
    primary_value = models.FloatField(null=True, blank=True)
    secondary_value = models.FloatField(null=True, blank=True)
    unit = models.CharField(max_length=32, blank=True, null=True)
    report_id = models.CharField(max_length=64, blank=True, null=True)
    order_id = models.CharField(max_length=64, blank=True, null=True)

    class Meta:
        indexes = [models.Index(fields=['patient_user', 'display_name', 'recorded_at'])]

    def __str__(self) -> str:
        return f"{self.display_name}={self.primary_value} {self.unit or ''}"


class BloodPressure(PatientRecord):
    systolic = models.FloatField()
    diastolic = models.FloatField()
    unit = models.CharField(max_length=16, default='mmHg')
    recorded_by_user_id = models.CharField(max_length=64, blank=True, null=True)

    def __str__(self) -> str:
        return f"BP {self.systolic}/{self.diastolic} {self.unit}"


class BodyHeight(PatientRecord):
    body_height = models.FloatField()
    unit = models.CharField(max_length=16, default='cm')


class BodyWeight(PatientRecord):
    body_weight = models.FloatField()
    unit = models.CharField(max_length=16, default='kg')


class BloodGlucose(PatientRecord):
    blood_glucose = models.FloatField()
    unit = models.CharField(max_length=16, default='mg|dL')


class AssessmentTemplate(TimestampedModel):
    TYPE_CHOICES = [
        ('Careplan service', 'Careplan service'),
        ('Clinical assessment', 'Clinical assessment'),
        ('Survey', 'Survey'),
        ('Custom', 'Custom'),
    ]
    display_code = models.CharField(max_length=64, blank=True, null=True)
    type = models.CharField(max_length=64, choices=TYPE_CHOICES, default='Custom')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    provider_assessment_code = models.CharField(max_length=64, blank=True, null=True)
    provider = models.CharField(max_length=64, blank=True, null=True)

    class Meta:
        indexes = [models.Index(fields=['provider', 'provider_assessment_code'])]

    def __str__(self) -> str:
        return self.title


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------

class Conversation(TimestampedModel):
    is_group_conversation = models.BooleanField(default=False)
    topic = models.CharField(max_length=255, blank=True, null=True)
    marked = models.BooleanField(default=False)
    initiating_user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='initiated_conversations')
    other_user = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='other_conversations'
    )
    participants = models.ManyToManyField(User, related_name='conversations', blank=True)
    last_message_timestamp = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"conversation {self.id} ({self.topic or '-'})"


class ChatMessage(TimestampedModel):
    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(User, on_delete=models.CASCADE, related_name='chat_messages')
    message = models.TextField()

    class Meta:
        indexes = [models.Index(fields=['conversation', 'created_at'])]

    def __str__(self) -> str:
        return f"msg {self.id} conversation={self.conversation_id}"


# ---------------------------------------------------------------------------
# Care plans
# ---------------------------------------------------------------------------

class CareplanEnrollment(TimestampedModel):
    patient_user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='careplan_enrollments')
    provider = models.CharField(max_length=64)
    plan_code = models.CharField(max_length=64)
    plan_name = models.CharField(max_length=255)
    participant_id = models.CharField(max_length=64, blank=True, null=True)
    start_date = models.DateField()
    end_date = models.DateField()
    is_active = models.BooleanField(default=True)

    def __str__(self) -> str:
        return f"{self.plan_code} for {self.patient_user_id}"


class CareplanActivity(TimestampedModel):
    STATUS_PENDING = 'pending'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = [(STATUS_PENDING, 'Pending'), (STATUS_COMPLETED, 'Completed')]

    enrollment = models.ForeignKey(CareplanEnrollment, on_delete=models.CASCADE, related_name='activities')
    patient_user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='careplan_activities')
    type = models.CharField(max_length=64)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    week = models.PositiveIntegerField()
    day = models.PositiveIntegerField()
    scheduled_at = models.DateField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=['enrollment', 'week', 'day'])]


# ---------------------------------------------------------------------------
# Statistics, EHR queue, audit
# ---------------------------------------------------------------------------

class AppDownload(models.Model):
    app_name = models.CharField(max_length=128, unique=True)
    total_downloads = models.PositiveIntegerField(default=0)
    ios_downloads = models.PositiveIntegerField(default=0)
    android_downloads = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.app_name}: {self.total_downloads}"


class EhrRecordJob(TimestampedModel):
    """A clinical data point queued for forwarding to the EHR store."""
    STATUS_PENDING = 'pending'
    STATUS_PROCESSING = 'processing'
    STATUS_DONE = 'done'
    STATUS_FAILED = 'failed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PROCESSING, 'Processing'),
        (STATUS_DONE, 'Done'),
        (STATUS_FAILED, 'Failed'),
    ]

    patient_user_id = models.CharField(max_length=64, db_index=True)
    record_id = models.CharField(max_length=64)
    provider = models.CharField(max_length=64, blank=True, null=True)
    record_type = models.CharField(max_length=32)
    value = models.FloatField(null=True, blank=True)
    secondary_value = models.FloatField(null=True, blank=True)
    unit = models.CharField(max_length=32, blank=True, null=True)
    name = models.CharField(max_length=128, blank=True, null=True)
    display_name = models.CharField(max_length=128, blank=True, null=True)
    app_name = models.CharField(max_length=128, blank=True, null=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, default='')
    next_attempt_at = models.DateTimeField(null=True, blank=True, db_index=True)
    ehr_resource_id = models.CharField(max_length=128, blank=True, null=True)

    def __str__(self) -> str:
        return f"ehr {self.record_type}:{self.record_id} -> {self.app_name} [{self.status}]"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at']),
            models.Index(fields=['object_type', 'object_id', 'created_at']),
        ]
