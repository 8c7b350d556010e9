from .patient_report import build_patient_report  # noqa: F401
