import uuid

import pytest

from clinic.models import CareplanActivity, CareplanEnrollment

pytestmark = pytest.mark.django_db


def enroll(client, patient_user_id='u1', **body):
    body.setdefault('PlanCode', 'HeartFailure')
    return client.post(f"/api/v1/care-plans/patients/{patient_user_id}/enroll", body, format='json')


def test_available_careplans(client_for, patient):
    r = client_for(patient).get('/api/v1/care-plans')
    assert r.status_code == 200
    codes = [p['Code'] for p in r.data['Data']['AvailablePlans']]
    assert 'HeartFailure' in codes
    r = client_for(patient).get('/api/v1/care-plans', {'provider': 'Elsewhere'})
    assert r.data['Data']['AvailablePlans'] == []


def test_enroll_schedules_weekly_activities(client_for, patient):
    r = enroll(client_for(patient), StartDate='2026-01-05')
    assert r.status_code == 201
    enrollment = r.data['Data']['Enrollment']
    assert enrollment['PlanName'] == 'Heart Failure Motivator'
    assert enrollment['StartDate'] == '2026-01-05'
    assert enrollment['EndDate'] == '2026-03-29'
    assert enrollment['IsActive'] is True
    assert CareplanActivity.objects.filter(enrollment_id=enrollment['id']).count() == 36


def test_enroll_unknown_plan(client_for, patient):
    r = enroll(client_for(patient), PlanCode='Nope')
    assert r.status_code == 400
    assert not CareplanEnrollment.objects.exists()


def test_enroll_twice_in_same_plan(client_for, patient):
    enroll(client_for(patient))
    r = enroll(client_for(patient))
    assert r.status_code == 400
    assert CareplanEnrollment.objects.count() == 1


def test_patient_cannot_enroll_someone_else(client_for, patient, other_patient):
    assert enroll(client_for(patient), patient_user_id='u2').status_code == 403


def test_patient_enrollments(client_for, patient, doctor):
    enroll(client_for(doctor))
    enroll(client_for(doctor), PlanCode='Cholesterol')
    r = client_for(patient).get('/api/v1/care-plans/patients/u1/enrollments')
    assert r.status_code == 200
    assert {e['PlanCode'] for e in r.data['Data']['PatientEnrollments']} == {'HeartFailure', 'Cholesterol'}
    r = client_for(patient).get('/api/v1/care-plans/patients/u1/enrollments', {'isActive': 'false'})
    assert r.data['Data']['PatientEnrollments'] == []
    assert r.data['Message'] == 'No records found!'


def test_fetch_tasks_until_date(client_for, patient):
    enrollment = enroll(client_for(patient), StartDate='2026-01-05').data['Data']['Enrollment']
    url = f"/api/v1/care-plans/{enrollment['id']}/fetch-tasks"
    r = client_for(patient).get(url, {'scheduledUntil': '2026-01-11'})
    assert r.status_code == 200
    tasks = r.data['Data']['CareplanActivities']
    assert [t['Week'] for t in tasks] == [1, 1, 1]
    assert [t['ScheduledAt'] for t in tasks] == ['2026-01-05', '2026-01-07', '2026-01-09']
    assert len(client_for(patient).get(url).data['Data']['CareplanActivities']) == 36


def test_weekly_status(client_for, patient):
    enrollment = enroll(client_for(patient), StartDate='2026-01-05').data['Data']['Enrollment']
    CareplanActivity.objects.filter(enrollment_id=enrollment['id'], week=1, day=1).update(
        status=CareplanActivity.STATUS_COMPLETED)
    r = client_for(patient).get(f"/api/v1/care-plans/{enrollment['id']}/weekly-status")
    status = r.data['Data']['WeeklyStatus']
    assert status['PlanCode'] == 'HeartFailure'
    assert len(status['Weeks']) == 12
    first = status['Weeks'][0]
    assert (first['Week'], first['Total'], first['Completed'], first['Pending']) == (1, 3, 1, 2)
    assert first['StartDate'] == '2026-01-05'


def test_tasks_of_other_patient_are_forbidden(client_for, patient, other_patient):
    enrollment = enroll(client_for(other_patient), patient_user_id='u2').data['Data']['Enrollment']
    r = client_for(patient).get(f"/api/v1/care-plans/{enrollment['id']}/fetch-tasks")
    assert r.status_code == 403


def test_unknown_enrollment(client_for, patient):
    r = client_for(patient).get(f"/api/v1/care-plans/{uuid.uuid4()}/weekly-status")
    assert r.status_code == 404


def test_completing_a_task_updates_weekly_status(client_for, patient):
    enrollment = enroll(client_for(patient), StartDate='2026-01-05').data['Data']['Enrollment']
    base = f"/api/v1/care-plans/{enrollment['id']}"
    task = client_for(patient).get(f"{base}/fetch-tasks").data['Data']['CareplanActivities'][0]
    url = f"{base}/tasks/{task['id']}"

    r = client_for(patient).put(url, {'Status': 'completed'}, format='json')
    assert r.status_code == 200
    done = r.data['Data']['CareplanActivity']
    assert done['Status'] == 'completed'
    assert done['CompletedAt'] is not None

    weeks = client_for(patient).get(f"{base}/weekly-status").data['Data']['WeeklyStatus']['Weeks']
    assert (weeks[0]['Completed'], weeks[0]['Pending']) == (1, 2)

    r = client_for(patient).patch(url, {'Status': 'pending'}, format='json')
    assert r.data['Data']['CareplanActivity']['CompletedAt'] is None


def test_task_update_validation(client_for, patient, other_patient):
    enrollment = enroll(client_for(patient)).data['Data']['Enrollment']
    task_id = CareplanActivity.objects.filter(enrollment_id=enrollment['id']).values_list('pk', flat=True)[0]
    url = f"/api/v1/care-plans/{enrollment['id']}/tasks/{task_id}"

    r = client_for(patient).put(url, {'Status': 'skipped'}, format='json')
    assert r.status_code == 400
    assert 'Status' in r.data['Data']['Errors']

    missing = f"/api/v1/care-plans/{enrollment['id']}/tasks/{uuid.uuid4()}"
    assert client_for(patient).put(missing, {'Status': 'completed'}, format='json').status_code == 404
    assert client_for(other_patient).put(url, {'Status': 'completed'}, format='json').status_code == 403
    assert not CareplanActivity.objects.filter(status=CareplanActivity.STATUS_COMPLETED).exists()
