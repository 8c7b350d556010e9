"""
FHIR store clients.

A store turns CareHub users and queued clinical data points into FHIR
resources and writes them to an EHR backend, returning the id the backend
assigned.  ``GcpFhirStore`` talks to the Google Cloud Healthcare FHIR REST
API; ``MockFhirStore`` only logs and is used in development and tests.
"""
from __future__ import annotations

import logging
import uuid
from typing import Optional

import requests

from .record_types import DIASTOLIC_LOINC, LOINC_CODES, SYSTOLIC_LOINC, EHRRecordTypes

logger = logging.getLogger(__name__)

LOINC_SYSTEM = 'http://loinc.org'
USER_ID_SYSTEM = 'urn:carehub:user-id'


def _coding(code: tuple[str, str], text: Optional[str] = None) -> dict:
    return {
        'coding': [{'system': LOINC_SYSTEM, 'code': code[0], 'display': code[1]}],
        'text': text or code[1],
    }


def _name(user) -> list[dict]:
    name = {'family': user.last_name or '', 'given': [user.first_name] if user.first_name else []}
    if user.prefix:
        name['prefix'] = [user.prefix]
    return [name]


def _telecom(user) -> list[dict]:
    telecom = []
    if user.phone:
        telecom.append({'system': 'phone', 'value': user.phone})
    if user.email:
        telecom.append({'system': 'email', 'value': user.email})
    return telecom


def patient_resource(user) -> dict:
    resource = {
        'resourceType': 'Patient',
        'name': _name(user),
        'telecom': _telecom(user),
    }
    if user.id:
        resource['identifier'] = [{'system': USER_ID_SYSTEM, 'value': user.id}]
    if user.gender:
        resource['gender'] = user.gender.lower()
    if user.birth_date:
        resource['birthDate'] = user.birth_date.isoformat()
    return resource


def practitioner_resource(user) -> dict:
    resource = patient_resource(user)
    resource['resourceType'] = 'Practitioner'
    return resource


def observation_resource(job, patient_ehr_id: Optional[str] = None) -> dict:
    """Build a FHIR Observation from a queued ``EhrRecordJob``."""
    code = LOINC_CODES.get(job.record_type, LOINC_CODES[EHRRecordTypes.LabRecord])
    if patient_ehr_id:
        subject = {'reference': f"Patient/{patient_ehr_id}"}
    else:
        subject = {'identifier': {'system': USER_ID_SYSTEM, 'value': job.patient_user_id}}
    resource = {
        'resourceType': 'Observation',
        'status': 'final',
        'identifier': [{'system': 'urn:carehub:record-id', 'value': job.record_id}],
        'code': _coding(code, job.display_name or job.name),
        'subject': subject,
        'effectiveDateTime': job.created_at.isoformat() if job.created_at else None,
    }
    if job.record_type == EHRRecordTypes.BloodPressure:
        resource['component'] = [
            {'code': _coding(SYSTOLIC_LOINC), 'valueQuantity': {'value': job.value, 'unit': job.unit}},
            {'code': _coding(DIASTOLIC_LOINC), 'valueQuantity': {'value': job.secondary_value, 'unit': job.unit}},
        ]
    else:
        resource['valueQuantity'] = {'value': job.value, 'unit': job.unit}
    return resource


class FhirStore:
    provider = ''

    def create_patient(self, user) -> str:
        raise NotImplementedError

    def create_practitioner(self, user) -> str:
        raise NotImplementedError

    def add_observation(self, job, patient_ehr_id: Optional[str] = None) -> str:
        raise NotImplementedError


class GcpFhirStore(FhirStore):
    provider = 'GCP'

    def __init__(self, base_url: str, access_token: str = '', timeout: int = 10):
        if not base_url:
            raise RuntimeError('GCP FHIR store base URL is not configured')
        self.base_url = base_url.rstrip('/')
        self.access_token = access_token
        self.timeout = timeout

    def _post(self, body: dict) -> str:
        url = f"{self.base_url}/{body['resourceType']}"
        headers = {'Content-Type': 'application/fhir+json;charset=utf-8'}
        if self.access_token:
            headers['Authorization'] = f"Bearer {self.access_token}"
        r = requests.post(url, json=body, headers=headers, timeout=self.timeout)
        r.raise_for_status()
        data = r.json()
        resource_id = data.get('id')
        if not resource_id:
            raise RuntimeError(f"Invalid response from FHIR store: missing id for {body['resourceType']}")
        return resource_id

    def create_patient(self, user) -> str:
        return self._post(patient_resource(user))

    def create_practitioner(self, user) -> str:
        return self._post(practitioner_resource(user))

    def add_observation(self, job, patient_ehr_id: Optional[str] = None) -> str:
        return self._post(observation_resource(job, patient_ehr_id))


class MockFhirStore(FhirStore):
    provider = 'Mock'

    def __init__(self, **kwargs):
        self.resources: list[dict] = []

    def _store(self, body: dict) -> str:
        resource_id = str(uuid.uuid4())
        self.resources.append({'id': resource_id, **body})
        logger.info('Mock FHIR store: %s %s', body['resourceType'], resource_id)
        return resource_id

    def create_patient(self, user) -> str:
        return self._store(patient_resource(user))

    def create_practitioner(self, user) -> str:
        return self._store(practitioner_resource(user))

    def add_observation(self, job, patient_ehr_id: Optional[str] = None) -> str:
        return self._store(observation_resource(job, patient_ehr_id))
