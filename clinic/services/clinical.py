"""
Services for clinical records.

These are thin: they delegate to a repository and exist so that
controllers depend on one seam per entity, where cross-system work can be
added without touching the storage code.
"""
from __future__ import annotations

from ..repositories.base import BaseRepo
from ..repositories.clinical import AssessmentTemplateRepo


class CrudService:

    def __init__(self, repo: BaseRepo):
        self.repo = repo

    def create(self, model):
        return self.repo.create(model)

    def get_by_id(self, id):
        return self.repo.get_by_id(id)

    def search(self, filters):
        return self.repo.search(filters)

    def update(self, id, model):
        return self.repo.update(id, model)

    def delete(self, id) -> bool:
        return self.repo.delete(id)


class LabRecordService(CrudService):
    pass


class BloodPressureService(CrudService):
    pass


class BodyHeightService(CrudService):
    pass


class BodyWeightService(CrudService):
    pass


class BloodGlucoseService(CrudService):
    pass


class AssessmentTemplateService(CrudService):
    repo: AssessmentTemplateRepo

    def get_by_provider_assessment_code(self, provider: str, code: str):
        return self.repo.get_by_provider_assessment_code(provider, code)
