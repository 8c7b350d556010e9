"""
End-to-end tests through real credentials.

The seeded test client and users from ``ensure_test_users`` log in and
call the API with the tokens they receive, the way a mobile app does.
Uses Django REST Framework's APIClient within the APITestCase base class.
"""

from io import StringIO

from django.core.management import call_command
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from clinic.models import ApiClient, AuditEvent, User


class CareHubAPITests(APITestCase):
    def setUp(self) -> None:
        call_command('ensure_test_users', stdout=StringIO())
        self.client = APIClient()
        self.client.credentials(HTTP_X_API_KEY='test-api-key')

    def login(self, user_name: str) -> dict:
        r = self.client.post('/api/v1/users/login', {'UserName': user_name, 'Password': '123456'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        return r.data['Data']

    def as_user(self, user_name: str) -> APIClient:
        tokens = self.login(user_name)
        client = APIClient()
        client.credentials(HTTP_X_API_KEY='test-api-key', HTTP_AUTHORIZATION=f"Bearer {tokens['AccessToken']}")
        return client

    def test_seed_command_is_idempotent(self) -> None:
        call_command('ensure_test_users', stdout=StringIO())
        self.assertEqual(ApiClient.objects.count(), 1)
        self.assertEqual(User.objects.filter(username__in=['admin1', 'system1', 'doctor1', 'patient1']).count(), 4)

    def test_doctor_records_and_patient_reads(self) -> None:
        patient_id = User.objects.get(username='patient1').id
        doctor = self.as_user('doctor1')
        r = doctor.post('/api/v1/lab-records', {
            'PatientUserId': patient_id, 'DisplayName': 'LDL', 'PrimaryValue': 130, 'Unit': 'mg/dL',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['Status'], 'success')

        patient = self.as_user('patient1')
        r = patient.get('/api/v1/lab-records')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['Message'], 'Total 1 lab records retrieved successfully!')
        self.assertEqual(r.data['Data']['LabRecordRecords']['Items'][0]['DisplayName'], 'LDL')

    def test_envelope_on_unknown_route_parameters(self) -> None:
        doctor = self.as_user('doctor1')
        r = doctor.get('/api/v1/body-weights/123')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['Status'], 'failure')
        self.assertEqual(r.data['HttpCode'], 400)
        self.assertIn('id', r.data['Data']['Errors'])

    def test_inactive_client_key_is_rejected(self) -> None:
        ApiClient.objects.update(is_active=False)
        r = self.client.post('/api/v1/users/login', {'UserName': 'doctor1', 'Password': '123456'}, format='json')
        self.assertIn(r.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_logins_are_audited(self) -> None:
        self.login('admin1')
        self.assertTrue(AuditEvent.objects.filter(action='login', user__username='admin1').exists())

    def test_healthz(self) -> None:
        r = APIClient().get('/healthz')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.json(), {'Status': 'success', 'Database': True, 'Cache': True})
