"""
API tests for lab records, biometrics and assessment templates.
"""
import uuid

import pytest

from clinic.models import BloodPressure, EhrRecordJob, LabRecord

pytestmark = pytest.mark.django_db


def create_lab_record(client, patient_user_id='u1', **body):
    payload = {'PatientUserId': patient_user_id, 'PrimaryValue': 5.4, 'Unit': 'mmol/L', 'DisplayName': 'Glucose'}
    payload.update(body)
    return client.post('/api/v1/lab-records', payload, format='json')


def test_create_lab_record(client_for, doctor, patient):
    client = client_for(doctor)
    r = create_lab_record(client)
    assert r.status_code == 201
    assert r.data['HttpCode'] == 201
    assert r.data['Message'] == 'Glucose record created successfully!'
    record = r.data['Data']['LabRecord']
    assert record['DisplayName'] == 'Glucose'
    assert record['PatientUserId'] == 'u1'
    assert record['PrimaryValue'] == 5.4
    assert record['Unit'] == 'mmol/L'


def test_get_lab_record_returns_created_fields(client_for, doctor, patient):
    client = client_for(doctor)
    created = create_lab_record(client, TypeName='Lipid', ReportId='R-1').data['Data']['LabRecord']
    r = client.get(f"/api/v1/lab-records/{created['id']}")
    assert r.status_code == 200
    record = r.data['Data']['LabRecord']
    for key in ('id', 'PatientUserId', 'DisplayName', 'PrimaryValue', 'Unit', 'TypeName', 'ReportId'):
        assert record[key] == created[key]


def test_create_reports_every_invalid_field(client_for, doctor):
    r = client_for(doctor).post('/api/v1/lab-records', {'PrimaryValue': 'abc'}, format='json')
    assert r.status_code == 400
    errors = r.data['Data']['Errors']
    assert {'PatientUserId', 'DisplayName', 'PrimaryValue'} <= set(errors)


def test_invalid_record_id_is_rejected(client_for, doctor):
    r = client_for(doctor).get('/api/v1/lab-records/not-a-uuid')
    assert r.status_code == 400


def test_missing_api_key_is_rejected(doctor):
    from rest_framework.test import APIClient
    client = APIClient()
    client.force_authenticate(user=doctor)
    r = client.get('/api/v1/lab-records')
    assert r.status_code in (401, 403)
    assert r.data['Data'] is None
    assert r.data['Message']


def test_search_without_matches(client_for, doctor):
    r = client_for(doctor).get('/api/v1/lab-records', {'displayName': 'Nothing'})
    assert r.status_code == 200
    assert r.data['Message'] == 'No records found!'
    assert r.data['Data']['LabRecordRecords']['TotalCount'] == 0
    assert r.data['Data']['LabRecordRecords']['Items'] == []


def test_display_name_search_is_case_sensitive(client_for, doctor, patient):
    client = client_for(doctor)
    create_lab_record(client)

    def total(display_name):
        r = client.get('/api/v1/lab-records', {'displayName': display_name})
        return r.data['Data']['LabRecordRecords']['TotalCount']

    assert total('glucose') == 0
    assert total('luco') == 1


def test_search_message_and_range_filters(client_for, doctor, patient):
    client = client_for(doctor)
    for value in (4.0, 5.0, 6.0):
        create_lab_record(client, PrimaryValue=value)
    r = client.get('/api/v1/lab-records', {'patientUserId': 'u1', 'minValue': 4.5})
    assert r.data['Message'] == 'Total 2 lab records retrieved successfully!'
    r = client.get('/api/v1/lab-records', {'maxValue': 5.0})
    assert r.data['Data']['LabRecordRecords']['TotalCount'] == 2
    r = client.get('/api/v1/lab-records', {'minValue': 4.5, 'maxValue': 5.5})
    assert [i['PrimaryValue'] for i in r.data['Data']['LabRecordRecords']['Items']] == [5.0]


def test_negative_page_index_is_first_page(client_for, doctor, patient):
    client = client_for(doctor)
    for value in range(5):
        create_lab_record(client, PrimaryValue=value)
    first = client.get('/api/v1/lab-records', {'pageIndex': 0, 'itemsPerPage': 2}).data['Data']['LabRecordRecords']
    negative = client.get('/api/v1/lab-records', {'pageIndex': -3, 'itemsPerPage': 2}).data['Data']['LabRecordRecords']
    assert negative['PageIndex'] == 0
    assert negative['Items'] == first['Items']
    assert negative['TotalCount'] == 5
    assert negative['RetrievedCount'] == 2


def test_repeated_search_has_identical_order(client_for, doctor, patient):
    client = client_for(doctor)
    for _ in range(4):
        create_lab_record(client, DisplayName='HDL')
    params = {'orderBy': 'DisplayName', 'order': 'descending'}
    first = client.get('/api/v1/lab-records', params).data['Data']['LabRecordRecords']['Items']
    second = client.get('/api/v1/lab-records', params).data['Data']['LabRecordRecords']['Items']
    assert [i['id'] for i in first] == [i['id'] for i in second]


def test_unknown_order_column_falls_back_to_default(client_for, doctor, patient):
    create_lab_record(client_for(doctor))
    r = client_for(doctor).get('/api/v1/lab-records', {'orderBy': 'Bogus'})
    assert r.data['Data']['LabRecordRecords']['OrderedBy'] == 'CreatedAt'


def test_partial_update_keeps_absent_fields(client_for, doctor, patient):
    client = client_for(doctor)
    created = create_lab_record(client, TypeName='Chemistry').data['Data']['LabRecord']
    r = client.put(f"/api/v1/lab-records/{created['id']}", {'PrimaryValue': 6.1}, format='json')
    assert r.status_code == 200
    updated = r.data['Data']['LabRecord']
    assert updated['PrimaryValue'] == 6.1
    assert updated['DisplayName'] == 'Glucose'
    assert updated['Unit'] == 'mmol/L'
    assert updated['TypeName'] == 'Chemistry'


def test_update_missing_record(client_for, doctor):
    r = client_for(doctor).patch(f"/api/v1/lab-records/{uuid.uuid4()}", {'PrimaryValue': 1}, format='json')
    assert r.status_code == 404
    assert r.data['Message'] == 'Lab record not found.'


def test_delete_lab_record(client_for, doctor, patient):
    client = client_for(doctor)
    created = create_lab_record(client).data['Data']['LabRecord']
    r = client.delete(f"/api/v1/lab-records/{created['id']}")
    assert r.status_code == 200
    assert r.data['Data'] == {'Deleted': True}
    assert not LabRecord.objects.filter(pk=created['id']).exists()
    assert client.delete(f"/api/v1/lab-records/{created['id']}").status_code == 404


def test_blood_pressure_deleted_record_is_not_found(client_for, doctor, patient):
    client = client_for(doctor)
    r = client.post('/api/v1/blood-pressure', {'PatientUserId': 'u1', 'Systolic': 120, 'Diastolic': 80},
                    format='json')
    assert r.status_code == 201
    record = r.data['Data']['BloodPressure']
    assert record['Unit'] == 'mmHg'
    assert record['RecordedByUserId'] == doctor.id
    assert client.delete(f"/api/v1/blood-pressure/{record['id']}").status_code == 200
    r = client.get(f"/api/v1/blood-pressure/{record['id']}")
    assert r.status_code == 404
    assert 'not found' in r.data['Message']
    assert not BloodPressure.objects.exists()


def test_blood_pressure_search_by_systolic_range(client_for, doctor, patient):
    client = client_for(doctor)
    for systolic in (110, 130, 150):
        client.post('/api/v1/blood-pressure', {'PatientUserId': 'u1', 'Systolic': systolic, 'Diastolic': 80},
                    format='json')
    r = client.get('/api/v1/blood-pressure', {'minSystolic': 120, 'maxSystolic': 140})
    items = r.data['Data']['BloodPressureRecords']['Items']
    assert [i['Systolic'] for i in items] == [130]
    assert r.data['Message'] == 'Total 1 blood pressure records retrieved successfully!'


@pytest.mark.parametrize('path,body,key,value_key', [
    ('/api/v1/body-heights', {'BodyHeight': 172}, 'BodyHeight', 'BodyHeight'),
    ('/api/v1/body-weights', {'BodyWeight': 70.5}, 'BodyWeight', 'BodyWeight'),
    ('/api/v1/blood-glucose', {'BloodGlucose': 98}, 'BloodGlucose', 'BloodGlucose'),
])
def test_single_value_biometrics(client_for, doctor, patient, path, body, key, value_key):
    client = client_for(doctor)
    r = client.post(path, {'PatientUserId': 'u1', **body}, format='json')
    assert r.status_code == 201
    record = r.data['Data'][key]
    assert record[value_key] == list(body.values())[0]
    assert record['Unit']
    r = client.get(path, {'patientUserId': 'u1', 'minValue': 1})
    assert r.data['Data'][f'{key}Records']['TotalCount'] == 1
    r = client.get(path, {'maxValue': 1})
    assert r.data['Message'] == 'No records found!'


def test_patient_cannot_write_records_of_another_patient(client_for, patient, other_patient):
    r = create_lab_record(client_for(patient), patient_user_id='u2')
    assert r.status_code == 403


def test_patient_search_is_pinned_to_own_records(client_for, doctor, patient, other_patient):
    staff = client_for(doctor)
    create_lab_record(staff, patient_user_id='u1')
    create_lab_record(staff, patient_user_id='u2')
    r = client_for(patient).get('/api/v1/lab-records', {'patientUserId': 'u2'})
    items = r.data['Data']['LabRecordRecords']['Items']
    assert [i['PatientUserId'] for i in items] == ['u1']


def test_patient_cannot_read_another_patients_record(client_for, doctor, patient, other_patient):
    created = create_lab_record(client_for(doctor), patient_user_id='u2').data['Data']['LabRecord']
    r = client_for(patient).get(f"/api/v1/lab-records/{created['id']}")
    assert r.status_code == 403


def test_lab_record_forwarded_once_per_eligible_app(client_for, doctor, patient, register_app):
    register_app(patient, 'Heart &amp; Stroke Helper™', 'HF Helper', 'Some Other App')
    create_lab_record(client_for(doctor))
    jobs = EhrRecordJob.objects.all()
    assert jobs.count() == 2
    assert {j.app_name for j in jobs} == {'Heart &amp; Stroke Helper™', 'HF Helper'}
    assert {j.record_type for j in jobs} == {'LabRecord'}


def test_lab_record_not_forwarded_without_eligible_app(client_for, doctor, patient, register_app):
    register_app(patient, 'Some Other App')
    create_lab_record(client_for(doctor))
    assert not EhrRecordJob.objects.exists()


# -- assessment templates ----------------------------------------------------

TEMPLATE = {
    'Type': 'Clinical assessment',
    'Title': 'Kansas City Cardiomyopathy Questionnaire',
    'DisplayCode': 'KCCQ',
    'Provider': 'CareHub',
    'ProviderAssessmentCode': 'KCCQ-12',
}


def test_assessment_template_writes_need_admin(client_for, doctor):
    r = client_for(doctor).post('/api/v1/assessment-templates', TEMPLATE, format='json')
    assert r.status_code == 403


def test_assessment_template_crud_and_provider_lookup(client_for, admin_user, doctor):
    admin = client_for(admin_user)
    r = admin.post('/api/v1/assessment-templates', TEMPLATE, format='json')
    assert r.status_code == 201
    template = r.data['Data']['AssessmentTemplate']
    assert template['Title'] == TEMPLATE['Title']

    r = client_for(doctor).get('/api/v1/assessment-templates/providers/CareHub/codes/KCCQ-12')
    assert r.status_code == 200
    assert r.data['Data']['AssessmentTemplate']['id'] == template['id']

    r = client_for(doctor).get('/api/v1/assessment-templates/providers/CareHub/codes/missing')
    assert r.status_code == 404

    r = admin.get('/api/v1/assessment-templates', {'title': 'Kansas'})
    assert r.data['Data']['AssessmentTemplateRecords']['TotalCount'] == 1

    r = admin.put(f"/api/v1/assessment-templates/{template['id']}", {'Description': 'Heart failure'},
                  format='json')
    assert r.data['Data']['AssessmentTemplate']['Description'] == 'Heart failure'
    assert r.data['Data']['AssessmentTemplate']['Title'] == TEMPLATE['Title']

    assert admin.delete(f"/api/v1/assessment-templates/{template['id']}").status_code == 200
