import datetime as dt

import pytest
from django.core.management import call_command
from django.utils import timezone

from clinic.ehr.analytics import EHRAnalyticsHandler, EHRQueueWorker
from clinic.ehr.injector import get_fhir_store
from clinic.ehr.record_types import EHRRecordTypes
from clinic.ehr.stores import MockFhirStore, observation_resource
from clinic.models import EhrRecordJob
from clinic.repositories.ehr_jobs import EhrJobRepo

pytestmark = pytest.mark.django_db


class BrokenStore(MockFhirStore):

    def add_observation(self, job, patient_ehr_id=None):
        raise RuntimeError('store unavailable')


def queue_job(**values):
    values.setdefault('patient_user_id', 'u1')
    values.setdefault('record_id', 'r-1')
    values.setdefault('record_type', EHRRecordTypes.BodyWeight)
    values.setdefault('value', 70.5)
    values.setdefault('unit', 'kg')
    return EhrRecordJob.objects.create(**values)


def test_no_eligible_app_queues_nothing(patient, register_app):
    register_app(patient, 'Some Other App')
    handler = EHRAnalyticsHandler()
    assert handler.get_eligible_app_names('u1') == []
    assert handler.forward('u1', 'r-1', EHRRecordTypes.BodyWeight, 70.5, 'kg') == 0
    assert not EhrRecordJob.objects.exists()


def test_one_job_per_eligible_app(patient, register_app):
    register_app(patient, 'HF Helper', 'REAN HealthGuru', 'Some Other App')
    handler = EHRAnalyticsHandler()
    assert handler.get_eligible_app_names('u1') == ['HF Helper', 'REAN HealthGuru']
    assert handler.forward('u1', 'r-1', EHRRecordTypes.BodyWeight, 70.5, 'kg') == 2
    assert EhrRecordJob.objects.filter(status=EhrRecordJob.STATUS_PENDING).count() == 2


def test_forwarding_can_be_switched_off(settings, patient, register_app):
    settings.EHR_ENABLED = False
    register_app(patient, 'HF Helper')
    assert EHRAnalyticsHandler().forward('u1', 'r-1', EHRRecordTypes.BodyWeight, 70.5) == 0
    assert not EhrRecordJob.objects.exists()


def test_biometric_create_queues_job(client_for, doctor, patient, register_app):
    register_app(patient, 'HF Helper')
    r = client_for(doctor).post('/api/v1/body-weights', {'PatientUserId': 'u1', 'BodyWeight': 71}, format='json')
    assert r.status_code == 201
    job = EhrRecordJob.objects.get()
    assert job.record_type == EHRRecordTypes.BodyWeight
    assert job.record_id == r.data['Data']['BodyWeight']['id']
    assert job.value == 71
    assert job.unit == 'kg'
    assert job.app_name == 'HF Helper'


def test_blood_pressure_update_queues_again(client_for, doctor, patient, register_app):
    register_app(patient, 'HF Helper')
    client = client_for(doctor)
    created = client.post('/api/v1/blood-pressure', {'PatientUserId': 'u1', 'Systolic': 120, 'Diastolic': 80},
                          format='json').data['Data']['BloodPressure']
    client.put(f"/api/v1/blood-pressure/{created['id']}", {'Systolic': 135}, format='json')
    values = list(EhrRecordJob.objects.order_by('created_at').values_list('value', 'secondary_value'))
    assert values == [(120, 80), (135, 80)]



def test_lab_record_without_type_is_named_by_display_name(client_for, doctor, patient, register_app):
    register_app(patient, 'HF Helper')
    body = {'PatientUserId': 'u1', 'DisplayName': 'HDL', 'PrimaryValue': 48, 'Unit': 'mg/dL'}
    assert client_for(doctor).post('/api/v1/lab-records', body, format='json').status_code == 201
    job = EhrRecordJob.objects.get()
    assert (job.name, job.display_name) == ('HDL', 'HDL')

def test_worker_marks_jobs_done(patient):
    job = queue_job()
    store = MockFhirStore()
    stats = EHRQueueWorker(store).process()
    assert stats == {'done': 1, 'retry': 0, 'failed': 0}
    job.refresh_from_db()
    assert job.status == EhrRecordJob.STATUS_DONE
    assert job.attempts == 1
    assert job.ehr_resource_id == store.resources[0]['id']
    assert store.resources[0]['resourceType'] == 'Observation'


def test_worker_retries_with_backoff(patient):
    job = queue_job()
    before = timezone.now()
    stats = EHRQueueWorker(BrokenStore(), max_attempts=3, retry_base_seconds=10).process()
    assert stats == {'done': 0, 'retry': 1, 'failed': 0}
    job.refresh_from_db()
    assert job.status == EhrRecordJob.STATUS_PENDING
    assert job.attempts == 1
    assert job.last_error == 'store unavailable'
    assert job.next_attempt_at >= before + dt.timedelta(seconds=10)

    # not due yet
    assert EHRQueueWorker(MockFhirStore()).process() == {'done': 0, 'retry': 0, 'failed': 0}



def test_claimed_job_is_handed_out_once(patient):
    job = queue_job()
    repo = EhrJobRepo()
    claimed = repo.claim_due_jobs(10)
    assert [j.pk for j in claimed] == [job.pk]
    assert claimed[0].status == EhrRecordJob.STATUS_PROCESSING
    assert claimed[0].attempts == 1
    # a second worker polling at the same time gets nothing
    assert repo.claim_due_jobs(10) == []
    assert EHRQueueWorker(MockFhirStore()).process() == {'done': 0, 'retry': 0, 'failed': 0}


def test_abandoned_claim_is_picked_up_again(settings, patient):
    settings.EHR_CLAIM_TIMEOUT = 60
    job = queue_job()
    EhrJobRepo().claim_due_jobs(10)
    EhrRecordJob.objects.filter(pk=job.pk).update(updated_at=timezone.now() - dt.timedelta(minutes=5))
    assert EHRQueueWorker(MockFhirStore()).process() == {'done': 1, 'retry': 0, 'failed': 0}
    job.refresh_from_db()
    assert job.status == EhrRecordJob.STATUS_DONE
    assert job.attempts == 2

def test_worker_gives_up_after_max_attempts(patient):
    job = queue_job(attempts=2)
    stats = EHRQueueWorker(BrokenStore(), max_attempts=3).process()
    assert stats == {'done': 0, 'retry': 0, 'failed': 1}
    job.refresh_from_db()
    assert job.status == EhrRecordJob.STATUS_FAILED
    assert job.attempts == 3


def test_blood_pressure_observation_has_components():
    job = EhrRecordJob(patient_user_id='u1', record_id='r-9', record_type=EHRRecordTypes.BloodPressure,
                       value=120, secondary_value=80, unit='mmHg', created_at=timezone.now())
    resource = observation_resource(job, 'ehr-42')
    assert resource['subject'] == {'reference': 'Patient/ehr-42'}
    assert [c['valueQuantity']['value'] for c in resource['component']] == [120, 80]
    assert 'valueQuantity' not in resource


def test_unknown_provider_is_rejected():
    from django.core.exceptions import ImproperlyConfigured
    with pytest.raises(ImproperlyConfigured):
        get_fhir_store('Nope')


def test_process_ehr_queue_command(patient):
    queue_job()
    call_command('process_ehr_queue', '--provider', 'Mock')
    assert EhrRecordJob.objects.get().status == EhrRecordJob.STATUS_DONE
