import datetime as dt

import pytest
from django.utils import timezone

from clinic.models import AppDownload, User

pytestmark = pytest.mark.django_db


def test_users_by_gender(client_for, patient, other_patient, doctor):
    r = client_for(doctor).get('/api/v1/users-statistics/by-genders')
    assert r.status_code == 200
    assert r.data['Data']['UsersByGender'] == [
        {'Status': 'Female', 'Count': 1, 'Ratio': 50.0},
        {'Status': 'Male', 'Count': 1, 'Ratio': 50.0},
    ]


def test_users_by_age(client_for, patient, other_patient, doctor):
    today = timezone.localdate()
    User.objects.filter(pk='u1').update(birth_date=today - dt.timedelta(days=365 * 30))
    stats = client_for(doctor).get('/api/v1/users-statistics/by-ages').data['Data']['UsersByAge']
    by_status = {s['Status']: s for s in stats}
    assert by_status['Below 35']['Count'] == 1
    assert by_status['35 to 70']['Count'] == 0
    assert by_status['Not specified'] == {'Status': 'Not specified', 'Count': 1, 'Ratio': 50.0}


def test_month_needs_year(client_for, doctor):
    r = client_for(doctor).get('/api/v1/users-statistics/by-genders', {'month': 3})
    assert r.status_code == 400
    assert 'year' in r.data['Data']['Errors']


def test_statistics_are_staff_only(client_for, patient):
    assert client_for(patient).get('/api/v1/users-statistics/by-ages').status_code == 403


def test_app_downloads(client_for, admin_user, doctor):
    body = {'AppName': 'HF Helper', 'TotalDownloads': 30, 'IOSDownloads': 10, 'AndroidDownloads': 20}
    assert client_for(doctor).put('/api/v1/users-statistics/app-downloads', body, format='json').status_code == 403

    r = client_for(admin_user).put('/api/v1/users-statistics/app-downloads', body, format='json')
    assert r.status_code == 200
    assert r.data['Data']['AppDownload']['IOSDownloads'] == 10

    body['TotalDownloads'] = 31
    client_for(admin_user).put('/api/v1/users-statistics/app-downloads', body, format='json')
    assert AppDownload.objects.count() == 1

    r = client_for(doctor).get('/api/v1/users-statistics/app-downloads')
    downloads = r.data['Data']['AppDownloads']
    assert [(d['AppName'], d['TotalDownloads']) for d in downloads] == [('HF Helper', 31)]


def record_vitals(client):
    for weight in (72, 71.5):
        client.post('/api/v1/body-weights', {'PatientUserId': 'u1', 'BodyWeight': weight}, format='json')
    client.post('/api/v1/blood-pressure', {'PatientUserId': 'u1', 'Systolic': 128, 'Diastolic': 84}, format='json')
    client.post('/api/v1/blood-glucose', {'PatientUserId': 'u1', 'BloodGlucose': 110}, format='json')
    client.post('/api/v1/lab-records', {'PatientUserId': 'u1', 'DisplayName': 'HDL', 'PrimaryValue': 48,
                                        'Unit': 'mg/dL'}, format='json')


def test_patient_stats(client_for, doctor, patient):
    record_vitals(client_for(doctor))
    r = client_for(patient).get('/api/v1/patient-statistics/u1')
    assert r.status_code == 200
    stats = r.data['Data']['Stats']
    assert stats['BodyWeight']['CurrentBodyWeight'] == 71.5
    assert stats['BodyWeight']['AverageBodyWeight'] == 71.75
    assert len(stats['BodyWeight']['History']) == 2
    assert stats['BloodPressure']['CurrentBloodPressureSystolic'] == 128
    assert stats['BloodGlucose']['CurrentBloodGlucose'] == 110
    assert [r['PrimaryValue'] for r in stats['Lipids']['HDL']] == [48]
    assert stats['Lipids']['LDL'] == []


def test_patient_stats_of_other_patient(client_for, patient, other_patient):
    assert client_for(patient).get('/api/v1/patient-statistics/u2').status_code == 403


def test_patient_report_is_pdf(client_for, doctor, patient, settings):
    record_vitals(client_for(doctor))
    r = client_for(patient).get('/api/v1/patient-statistics/u1/report')
    assert r.status_code == 200
    assert r['Content-Type'] == 'application/pdf'
    assert r['Content-Disposition'].startswith('attachment; filename="health-report-')
    assert r.content.startswith(b'%PDF')
    # charts are removed once the report is built
    assert not list(settings.REPORTS_DIR.glob('*.png'))


def test_report_without_data_is_still_pdf(client_for, patient):
    r = client_for(patient).get('/api/v1/patient-statistics/u1/report')
    assert r.status_code == 200
    assert r.content.startswith(b'%PDF')


def test_report_for_unknown_user(client_for, doctor):
    r = client_for(doctor).get('/api/v1/patient-statistics/nobody/report')
    assert r.status_code == 404
    assert r.data['Message'] == 'Patient not found.'


def test_history_is_dated_by_measurement_time(client_for, doctor, patient):
    client = client_for(doctor)
    now = timezone.now()
    client.post('/api/v1/body-weights', {'PatientUserId': 'u1', 'BodyWeight': 72}, format='json')
    for weight, days_ago in ((74, 10), (80, 300)):
        client.post('/api/v1/body-weights', {'PatientUserId': 'u1', 'BodyWeight': weight,
                                              'RecordedAt': (now - dt.timedelta(days=days_ago)).isoformat()},
                    format='json')
    body_weight = client_for(patient).get('/api/v1/patient-statistics/u1').data['Data']['Stats']['BodyWeight']
    assert [h['BodyWeight'] for h in body_weight['History']] == [74, 72]
    assert body_weight['CurrentBodyWeight'] == 72
