"""
Registry of FHIR store providers.

``EHR_PROVIDER`` names the provider used by the services and the queue
worker.  Additional providers register a factory taking keyword settings.
"""
from __future__ import annotations

from typing import Callable

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .stores import FhirStore, GcpFhirStore, MockFhirStore

_PROVIDERS: dict[str, Callable[..., FhirStore]] = {}


def register_provider(name: str, factory: Callable[..., FhirStore]) -> None:
    _PROVIDERS[name] = factory


def get_fhir_store(name: str | None = None) -> FhirStore:
    name = name or settings.EHR_PROVIDER
    factory = _PROVIDERS.get(name)
    if factory is None:
        raise ImproperlyConfigured(f"Unknown EHR provider: {name}")
    return factory(
        base_url=settings.GCP_FHIR_BASE_URL,
        access_token=settings.GCP_FHIR_ACCESS_TOKEN,
        timeout=settings.EHR_TIMEOUT,
    )


register_provider(GcpFhirStore.provider, GcpFhirStore)
register_provider(MockFhirStore.provider, MockFhirStore)
