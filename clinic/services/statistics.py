"""
User statistics and per-patient biometrics reports.

Patient statistics cover the last six months: body weight, blood pressure,
blood glucose and the lipid panel taken from lab records.
"""
from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Optional

from django.utils import timezone

from ..charts import ChartColors, ChartGenerator, LineChartOptions, MultiLineChartOptions
from ..domain.base import to_wire
from ..domain.statistics import AgeFilters, AppDownloadDomainModel, AppDownloadDto, StatisticsFilters
from ..reports import build_patient_report
from ..repositories.clinical import BloodGlucoseRepo, BloodPressureRepo, BodyWeightRepo, LabRecordRepo
from ..repositories.statistics import StatisticsRepo
from ..repositories.users import UserRepo

logger = logging.getLogger(__name__)

STATS_PERIOD_DAYS = 182

LIPID_DISPLAY_NAMES = ['Total Cholesterol', 'HDL', 'LDL', 'Triglyceride Level', 'A1C Level']
LIPID_COLORS = [ChartColors.Blue, ChartColors.Green, ChartColors.Orange, ChartColors.Red, ChartColors.Purple]


def _when(record) -> dt.datetime:
    return record.recorded_at or record.created_at


class StatisticsService:

    def __init__(self, statistics_repo: StatisticsRepo, user_repo: UserRepo, lab_record_repo: LabRecordRepo,
                 body_weight_repo: BodyWeightRepo, blood_pressure_repo: BloodPressureRepo,
                 blood_glucose_repo: BloodGlucoseRepo, chart_generator: ChartGenerator | None = None):
        self.statistics_repo = statistics_repo
        self.user_repo = user_repo
        self.lab_record_repo = lab_record_repo
        self.body_weight_repo = body_weight_repo
        self.blood_pressure_repo = blood_pressure_repo
        self.blood_glucose_repo = blood_glucose_repo
        self.chart_generator = chart_generator or ChartGenerator()

    # -- users / apps ----------------------------------------------------

    def get_users_by_age(self, filters: AgeFilters) -> list[dict]:
        return self.statistics_repo.get_users_by_age(filters)

    def get_users_by_gender(self, filters: StatisticsFilters) -> list[dict]:
        return self.statistics_repo.get_users_by_gender(filters)

    def update_app_downloads(self, model: AppDownloadDomainModel) -> AppDownloadDto:
        return self.statistics_repo.upsert_app_downloads(model)

    def get_app_downloads(self) -> list[AppDownloadDto]:
        return self.statistics_repo.get_app_downloads()

    # -- patient biometrics ----------------------------------------------

    def get_patient_stats(self, patient_user_id: str) -> dict:
        since = timezone.now() - dt.timedelta(days=STATS_PERIOD_DAYS)

        weights = self.body_weight_repo.get_recent(patient_user_id, since)
        body_weight = {
            'History': [{'BodyWeight': w.body_weight, 'Unit': w.unit, 'DayStr': _when(w).date().isoformat()}
                        for w in weights],
            'AverageBodyWeight': round(sum(w.body_weight for w in weights) / len(weights), 2) if weights else None,
            'CurrentBodyWeight': weights[-1].body_weight if weights else None,
            'Unit': weights[-1].unit if weights else None,
            'LastMeasuredDate': _when(weights[-1]) if weights else None,
        }

        pressures = self.blood_pressure_repo.get_recent(patient_user_id, since)
        blood_pressure = {
            'History': [{'Systolic': p.systolic, 'Diastolic': p.diastolic, 'DayStr': _when(p).date().isoformat()}
                        for p in pressures],
            'CurrentBloodPressureSystolic': pressures[-1].systolic if pressures else None,
            'CurrentBloodPressureDiastolic': pressures[-1].diastolic if pressures else None,
            'LastMeasuredDate': _when(pressures[-1]) if pressures else None,
        }

        glucose = self.blood_glucose_repo.get_recent(patient_user_id, since)
        blood_glucose = {
            'History': [{'BloodGlucose': g.blood_glucose, 'Unit': g.unit, 'DayStr': _when(g).date().isoformat()}
                        for g in glucose],
            'CurrentBloodGlucose': glucose[-1].blood_glucose if glucose else None,
            'Unit': glucose[-1].unit if glucose else None,
            'LastMeasuredDate': _when(glucose[-1]) if glucose else None,
        }

        lipids = {}
        for name in LIPID_DISPLAY_NAMES:
            records = self.lab_record_repo.get_recent_by_display_name(patient_user_id, name, since)
            lipids[name] = to_wire(records)

        return {
            'PatientUserId': patient_user_id,
            'BodyWeight': body_weight,
            'BloodPressure': blood_pressure,
            'BloodGlucose': blood_glucose,
            'Lipids': lipids,
        }

    def create_charts(self, patient_user_id: str, stats: dict) -> dict[str, Optional[Path]]:
        prefix = f"{patient_user_id}-{timezone.now().strftime('%Y%m%d%H%M%S')}"
        gen = self.chart_generator

        weight_points = [(dt.date.fromisoformat(h['DayStr']), h['BodyWeight']) for h in stats['BodyWeight']['History']]
        bp_points = []
        for h in stats['BloodPressure']['History']:
            day = dt.date.fromisoformat(h['DayStr'])
            bp_points.append((day, h['Systolic'], 'Systolic'))
            bp_points.append((day, h['Diastolic'], 'Diastolic'))
        glucose_points = [(dt.date.fromisoformat(h['DayStr']), h['BloodGlucose'])
                          for h in stats['BloodGlucose']['History']]
        lipid_points = []
        for name, records in stats['Lipids'].items():
            for r in records:
                when = r['RecordedAt'] or r['CreatedAt']
                lipid_points.append((dt.datetime.fromisoformat(when).date(), r['PrimaryValue'], name))

        return {
            'BodyWeight': gen.create_line_chart(
                weight_points,
                LineChartOptions(y_axis_label='Kg', title='Body Weight Trend Over 6 Months'),
                f"{prefix}-body-weight"),
            'BloodPressure': gen.create_multi_line_chart(
                bp_points,
                MultiLineChartOptions(categories=['Systolic', 'Diastolic'], y_axis_label='mmHg',
                                      colors=[ChartColors.Red, ChartColors.Blue],
                                      title='Blood Pressure Trend Over 6 Months'),
                f"{prefix}-blood-pressure"),
            'BloodGlucose': gen.create_line_chart(
                glucose_points,
                LineChartOptions(y_axis_label='mg/dL', line_color=ChartColors.Orange,
                                 title='Blood Glucose Trend Over 6 Months'),
                f"{prefix}-blood-glucose"),
            'Lipids': gen.create_multi_line_chart(
                lipid_points,
                MultiLineChartOptions(categories=LIPID_DISPLAY_NAMES, colors=LIPID_COLORS,
                                      title='Lipids Trend Over 6 Months'),
                f"{prefix}-lipids"),
        }

    def generate_patient_report(self, patient_user_id: str) -> bytes | None:
        user = self.user_repo.get_by_id(patient_user_id)
        if user is None:
            return None
        stats = self.get_patient_stats(patient_user_id)
        charts = self.create_charts(patient_user_id, stats)
        try:
            return build_patient_report(user.display_name, stats, charts)
        finally:
            for path in charts.values():
                if path is not None:
                    Path(path).unlink(missing_ok=True)
