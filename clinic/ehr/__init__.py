"""Forwarding of clinical data to external FHIR-based EHR stores."""
