import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.models import ApiClient, Patient, User, UserAppRegistration

API_KEY = 'test-api-key'


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def _reports_dir(settings, tmp_path):
    settings.REPORTS_DIR = tmp_path / 'reports'


@pytest.fixture
def api_key(db):
    ApiClient.objects.create(client_code='TEST', name='Test client', api_key=API_KEY)
    return API_KEY


def make_user(user_id, role=User.ROLE_PATIENT, **extra):
    extra.setdefault('username', f'user-{user_id}')
    extra.setdefault('phone', '')
    user = User.objects.create_user(id=user_id, role=role, password='P@ssw0rd1', **extra)
    if role == User.ROLE_PATIENT:
        Patient.objects.create(user=user)
    return user


@pytest.fixture
def patient(db):
    return make_user('u1', first_name='Asha', last_name='Rao', gender='female', phone='+91-9876543210')


@pytest.fixture
def other_patient(db):
    return make_user('u2', first_name='Ravi', last_name='Kumar', gender='male', phone='+91-9876500000')


@pytest.fixture
def doctor(db):
    return make_user('d1', role=User.ROLE_DOCTOR, first_name='Meera', last_name='Shah')


@pytest.fixture
def admin_user(db):
    return make_user('a1', role=User.ROLE_ADMIN)


@pytest.fixture
def client_for(api_key):
    """APIClient presenting the API key, authenticated as ``user`` when given."""
    def build(user=None):
        client = APIClient()
        client.credentials(HTTP_X_API_KEY=api_key)
        if user is not None:
            client.force_authenticate(user=user)
        return client
    return build


@pytest.fixture
def register_app():
    def register(user, *app_names):
        for name in app_names:
            UserAppRegistration.objects.create(user=user, app_name=name)
    return register
