"""Clinical records application for the CareHub API.

This package contains the models, validators, repositories, services and
controllers implementing the clinical data REST API, plus the EHR
forwarding queue, chart rendering and PDF report helpers.
"""
