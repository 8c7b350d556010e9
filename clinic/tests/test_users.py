import pytest
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken

from clinic.models import AuditEvent, Doctor, Patient, User, UserAppRegistration
from clinic.validators.base import sanitize_phone

pytestmark = pytest.mark.django_db

NEW_PATIENT = {
    'Phone': '+91 90000 00001',
    'FirstName': 'Leela',
    'LastName': 'Menon',
    'Gender': 'Female',
    'BirthDate': '1990-04-12',
    'Password': 'secret123',
}


# -- patients ----------------------------------------------------------------

def test_patient_self_registration_needs_only_client_key(client_for):
    r = client_for().post('/api/v1/patients', NEW_PATIENT, format='json')
    assert r.status_code == 201
    assert r.data['Message'] == 'Patient created successfully!'
    patient = r.data['Data']['Patient']
    assert patient['User']['Phone'] == '+91-9000000001'
    assert patient['User']['Prefix'] == 'Miss'
    assert patient['User']['Role'] == User.ROLE_PATIENT
    assert patient['User']['UserName']
    assert Patient.objects.filter(user_id=patient['UserId']).exists()
    assert AuditEvent.objects.filter(action='patient.create', object_id=patient['UserId']).exists()


def test_patient_registration_without_key_is_rejected(api_key):
    from rest_framework.test import APIClient
    r = APIClient().post('/api/v1/patients', NEW_PATIENT, format='json')
    assert r.status_code in (401, 403)
    assert r.data['Status'] == 'failure'


def test_duplicate_patient_phone_is_rejected(client_for, patient):
    body = dict(NEW_PATIENT, Phone='+91-9876543210')
    r = client_for().post('/api/v1/patients', body, format='json')
    assert r.status_code == 400
    assert 'already exists' in r.data['Message']


def test_invalid_patient_fields_are_all_reported(client_for):
    r = client_for().post('/api/v1/patients', {'Phone': '12', 'Gender': 'Robot', 'Email': 'nope'}, format='json')
    assert r.status_code == 400
    assert {'Phone', 'Gender', 'Email'} <= set(r.data['Data']['Errors'])


def test_patient_reads_and_updates_own_profile(client_for, patient):
    client = client_for(patient)
    r = client.get('/api/v1/patients/u1')
    assert r.status_code == 200
    assert r.data['Data']['Patient']['User']['FirstName'] == 'Asha'

    r = client.put('/api/v1/patients/u1', {'LastName': 'Iyer', 'Addresses': [{'City': 'Pune'}]}, format='json')
    assert r.status_code == 200
    assert r.data['Message'] == 'Patient records updated successfully!'
    updated = r.data['Data']['Patient']
    assert updated['User']['LastName'] == 'Iyer'
    assert updated['User']['FirstName'] == 'Asha'
    assert updated['Addresses'] == [{'City': 'Pune'}]


def test_patient_cannot_read_other_patient(client_for, patient, other_patient):
    assert client_for(patient).get('/api/v1/patients/u2').status_code == 403


def test_patient_search_is_staff_only(client_for, patient, other_patient, doctor):
    assert client_for(patient).get('/api/v1/patients').status_code == 403
    r = client_for(doctor).get('/api/v1/patients', {'name': 'Ravi'})
    assert r.status_code == 200
    items = r.data['Data']['Patients']['Items']
    assert [i['UserId'] for i in items] == ['u2']


def test_staff_deletes_patient(client_for, patient, doctor):
    r = client_for(doctor).delete('/api/v1/patients/u1')
    assert r.status_code == 200
    assert r.data['Data'] == {'Deleted': True}
    assert not Patient.objects.filter(user_id='u1').exists()
    assert not User.objects.get(pk='u1').is_active
    assert client_for(doctor).get('/api/v1/patients/u1').status_code == 404


def test_deleted_patient_can_register_again(client_for, admin_user):
    user_id = client_for().post('/api/v1/patients', NEW_PATIENT, format='json').data['Data']['Patient']['UserId']
    assert client_for(admin_user).delete(f"/api/v1/patients/{user_id}").status_code == 200

    r = client_for().post('/api/v1/patients', NEW_PATIENT, format='json')
    assert r.status_code == 201
    assert r.data['Data']['Patient']['UserId'] != user_id


def test_patient_name_search_is_case_sensitive(client_for, other_patient, doctor):
    r = client_for(doctor).get('/api/v1/patients', {'name': 'ravi'})
    assert r.data['Data']['Patients']['TotalCount'] == 0
    r = client_for(doctor).get('/api/v1/patients', {'name': 'Kum'})
    assert r.data['Data']['Patients']['TotalCount'] == 1


def test_taken_user_name_is_rejected(client_for, patient, other_patient):
    r = client_for().post('/api/v1/patients', dict(NEW_PATIENT, UserName='user-u1'), format='json')
    assert r.status_code == 400
    assert r.data['Message'] == 'User name user-u1 is already taken!'

    r = client_for(other_patient).put('/api/v1/patients/u2', {'UserName': 'user-u1'}, format='json')
    assert r.status_code == 400
    r = client_for(other_patient).put('/api/v1/patients/u2', {'UserName': 'user-u2'}, format='json')
    assert r.status_code == 200


def test_phone_separators_are_normalised():
    assert sanitize_phone('+91 (98765) 43210') == '+91-9876543210'
    assert sanitize_phone('+1-(555) 010-9999') == '+1-5550109999'
    assert sanitize_phone(' 98765-43210 ') == '9876543210'


# -- doctors -----------------------------------------------------------------

NEW_DOCTOR = {
    'Phone': '+91-9111111111',
    'FirstName': 'Kiran',
    'LastName': 'Das',
    'Gender': 'Male',
    'Specialities': ['Cardiology'],
    'About': 'Heart failure clinic',
}


def test_only_admins_register_doctors(client_for, doctor, admin_user):
    assert client_for(doctor).post('/api/v1/doctors', NEW_DOCTOR, format='json').status_code == 403

    r = client_for(admin_user).post('/api/v1/doctors', NEW_DOCTOR, format='json')
    assert r.status_code == 201
    created = r.data['Data']['Doctor']
    assert created['User']['Prefix'] == 'Mr.'
    assert created['User']['Role'] == User.ROLE_DOCTOR
    assert created['Specialities'] == ['Cardiology']
    assert Doctor.objects.filter(user_id=created['UserId']).exists()

    r = client_for(admin_user).post('/api/v1/doctors', NEW_DOCTOR, format='json')
    assert r.status_code == 400


def test_doctor_search_by_speciality(client_for, admin_user, patient):
    client_for(admin_user).post('/api/v1/doctors', NEW_DOCTOR, format='json')
    r = client_for(patient).get('/api/v1/doctors', {'speciality': 'cardio'})
    assert r.status_code == 200
    assert r.data['Data']['Doctors']['TotalCount'] == 1
    assert r.data['Message'] == 'Total 1 doctors retrieved successfully!'


def test_doctor_update_by_staff(client_for, doctor):
    Doctor.objects.create(user=doctor)
    r = client_for(doctor).put('/api/v1/doctors/d1', {'About': 'Diabetes'}, format='json')
    assert r.status_code == 200
    assert r.data['Data']['Doctor']['About'] == 'Diabetes'
    assert r.data['Data']['Doctor']['User']['FirstName'] == 'Meera'


# -- authentication ----------------------------------------------------------

def test_login_with_user_name(client_for, patient):
    r = client_for().post('/api/v1/users/login', {'UserName': 'user-u1', 'Password': 'P@ssw0rd1'}, format='json')
    assert r.status_code == 200
    data = r.data['Data']
    assert data['Token']
    assert data['AccessToken']
    assert data['RefreshToken']
    assert data['User'] == {'id': 'u1', 'UserName': 'user-u1', 'DisplayName': 'Asha Rao', 'Role': 'patient'}


def test_login_with_phone_uses_patient_role(client_for, patient):
    r = client_for().post('/api/v1/users/login', {'Phone': '+91 98765 43210', 'Password': 'P@ssw0rd1'},
                          format='json')
    assert r.status_code == 200
    assert r.data['Data']['User']['id'] == 'u1'


def test_login_with_wrong_password(client_for, patient):
    r = client_for().post('/api/v1/users/login', {'UserName': 'user-u1', 'Password': 'wrong'}, format='json')
    assert r.status_code == 401
    assert r.data['Message'] == 'Invalid login credentials.'
    assert AuditEvent.objects.filter(action='login', detail__result='fail').exists()


def test_login_needs_an_identifier(client_for):
    r = client_for().post('/api/v1/users/login', {'Password': 'x'}, format='json')
    assert r.status_code == 400
    assert 'UserName' in r.data['Data']['Errors']


def test_token_authenticates_requests(client_for, patient):
    token = client_for().post('/api/v1/users/login', {'UserName': 'user-u1', 'Password': 'P@ssw0rd1'},
                              format='json').data['Data']
    client = client_for()
    client.credentials(HTTP_X_API_KEY='test-api-key', HTTP_AUTHORIZATION=f"Bearer {token['AccessToken']}")
    assert client.get('/api/v1/patients/u1').status_code == 200
    client.credentials(HTTP_X_API_KEY='test-api-key', HTTP_AUTHORIZATION=f"Token {token['Token']}")
    assert client.get('/api/v1/patients/u1').status_code == 200


def test_refresh_and_logout(client_for, patient):
    tokens = client_for().post('/api/v1/users/login', {'UserName': 'user-u1', 'Password': 'P@ssw0rd1'},
                               format='json').data['Data']
    r = client_for().post('/api/v1/users/refresh', {'RefreshToken': tokens['RefreshToken']}, format='json')
    assert r.status_code == 200
    assert r.data['Data']['AccessToken']

    r = client_for(patient).post('/api/v1/users/logout', {'RefreshToken': tokens['RefreshToken']}, format='json')
    assert r.status_code == 200
    assert r.data['Data'] == {'Blacklisted': 1}
    assert BlacklistedToken.objects.count() == 1

    r = client_for().post('/api/v1/users/refresh', {'RefreshToken': tokens['RefreshToken']}, format='json')
    assert r.status_code == 401


def test_unauthenticated_request_is_rejected(client_for):
    r = client_for().get('/api/v1/lab-records')
    assert r.status_code in (401, 403)
    assert r.data['Status'] == 'failure'


def test_app_registration(client_for, patient, other_patient):
    client = client_for(patient)
    r = client.post('/api/v1/users/u1/app-registrations', {'AppName': 'HF Helper'}, format='json')
    assert r.status_code == 201
    assert r.data['Data']['AppRegistrations'] == ['HF Helper']

    r = client.post('/api/v1/users/u1/app-registrations', {'AppName': 'HF Helper'}, format='json')
    assert r.status_code == 200
    assert UserAppRegistration.objects.filter(user_id='u1').count() == 1

    r = client.post('/api/v1/users/u2/app-registrations', {'AppName': 'HF Helper'}, format='json')
    assert r.status_code == 403
