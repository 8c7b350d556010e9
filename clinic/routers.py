"""
URL mappings for the CareHub API.

All resource routes live under ``api/v1/``; trailing slashes are omitted.
Path ids are matched as plain strings and validated by the controllers so
that a malformed id answers with the error envelope instead of a bare 404.
"""
from django.urls import include, path

from .auth_views import app_registrations_view, jwt_logout_view, jwt_refresh_view, login_view
from .views import careplans, chat, clinical, doctors, health, patients, statistics

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    # Authentication
    path('api/v1/users/login', login_view),
    path('api/v1/users/refresh', jwt_refresh_view),
    path('api/v1/users/logout', jwt_logout_view),
    path('api/v1/users/<str:userId>/app-registrations', app_registrations_view),

    # Lab records and biometrics
    path('api/v1/lab-records', clinical.lab_records),
    path('api/v1/lab-records/<str:id>', clinical.lab_record_detail),
    path('api/v1/blood-pressure', clinical.blood_pressures),
    path('api/v1/blood-pressure/<str:id>', clinical.blood_pressure_detail),
    path('api/v1/body-heights', clinical.body_heights),
    path('api/v1/body-heights/<str:id>', clinical.body_height_detail),
    path('api/v1/body-weights', clinical.body_weights),
    path('api/v1/body-weights/<str:id>', clinical.body_weight_detail),
    path('api/v1/blood-glucose', clinical.blood_glucoses),
    path('api/v1/blood-glucose/<str:id>', clinical.blood_glucose_detail),

    # Assessment templates
    path('api/v1/assessment-templates', clinical.assessment_templates),
    path('api/v1/assessment-templates/providers/<str:provider>/codes/<str:code>',
         clinical.assessment_template_by_provider_code),
    path('api/v1/assessment-templates/<str:id>', clinical.assessment_template_detail),

    # Patients and doctors
    path('api/v1/patients', patients.patients),
    path('api/v1/patients/<str:userId>', patients.patient_detail),
    path('api/v1/doctors', doctors.doctors),
    path('api/v1/doctors/<str:userId>', doctors.doctor_detail),

    # Chat
    path('api/v1/chats/conversations/start', chat.start_conversation),
    path('api/v1/chats/conversations/<str:conversationId>/messages', chat.conversation_messages),
    path('api/v1/chats/conversations/<str:conversationId>', chat.conversation_detail),
    path('api/v1/chats/users/<str:userId>/conversations', chat.user_conversations),
    path('api/v1/chats/messages/<str:messageId>', chat.message_detail),

    # Care plans
    path('api/v1/care-plans', careplans.available_careplans),
    path('api/v1/care-plans/patients/<str:patientUserId>/enroll', careplans.enroll),
    path('api/v1/care-plans/patients/<str:patientUserId>/enrollments', careplans.patient_enrollments),
    path('api/v1/care-plans/<str:id>/fetch-tasks', careplans.fetch_tasks),
    path('api/v1/care-plans/<str:id>/weekly-status', careplans.weekly_status),
    path('api/v1/care-plans/<str:id>/tasks/<str:taskId>', careplans.update_task),

    # Statistics
    path('api/v1/users-statistics/by-ages', statistics.users_by_age),
    path('api/v1/users-statistics/by-genders', statistics.users_by_gender),
    path('api/v1/users-statistics/app-downloads', statistics.app_downloads),
    path('api/v1/patient-statistics/<str:patientUserId>', statistics.patient_stats),
    path('api/v1/patient-statistics/<str:patientUserId>/report', statistics.patient_stats_report),
]
