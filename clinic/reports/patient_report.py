"""
PDF health report for one patient, built with reportlab.

The report holds one section per biometric with a short summary and the
chart rendered by :class:`clinic.charts.ChartGenerator`.
"""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any, Optional

from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

NO_DATA = 'No data available'

CHART_WIDTH = 160 * mm
CHART_HEIGHT = CHART_WIDTH * 350 / 650


def _fmt(v: Any, unit: str = '') -> str:
    if v is None or v == '':
        return '-'
    if isinstance(v, float):
        v = round(v, 2)
    return f"{v} {unit}".strip()


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle('SectionHeading', parent=styles['Heading2'], textColor=colors.HexColor('#1f2937'),
                              spaceBefore=8, spaceAfter=4))
    styles.add(ParagraphStyle('Muted', parent=styles['Normal'], textColor=colors.grey))
    return styles


def _summary_table(rows: list[tuple[str, str]]) -> Table:
    table = Table(rows, colWidths=[60 * mm, 100 * mm])
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
        ('TOPPADDING', (0, 0), (-1, -1), 2),
    ]))
    return table


def _chart(path: Optional[Path], styles) -> Any:
    if path and Path(path).exists():
        return Image(str(path), width=CHART_WIDTH, height=CHART_HEIGHT)
    return Paragraph(NO_DATA, styles['Muted'])


def build_patient_report(patient_name: str, stats: dict, charts: dict[str, Optional[Path]]) -> bytes:
    """Return the PDF bytes.

    ``stats`` is the structure returned by ``StatisticsService.get_patient_stats``;
    ``charts`` maps section keys (``BodyWeight``, ``BloodPressure``,
    ``BloodGlucose``, ``Lipids``) to PNG paths or None.
    """
    styles = _styles()
    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=20 * mm, rightMargin=20 * mm,
                            topMargin=18 * mm, bottomMargin=18 * mm, title='Health report')
    story: list = [
        Paragraph('Health report', styles['Title']),
        Paragraph(f"Patient: {patient_name}", styles['Normal']),
        Paragraph(f"Generated: {timezone.localtime().strftime('%d %b %Y %H:%M')}", styles['Muted']),
        Spacer(1, 6 * mm),
    ]

    weight = stats.get('BodyWeight', {})
    story += [
        Paragraph('Body weight', styles['SectionHeading']),
        _summary_table([
            ('Current', _fmt(weight.get('CurrentBodyWeight'), weight.get('Unit') or 'kg')),
            ('Average', _fmt(weight.get('AverageBodyWeight'), weight.get('Unit') or 'kg')),
            ('Last measured', _fmt(weight.get('LastMeasuredDate'))),
        ]),
        _chart(charts.get('BodyWeight'), styles),
    ]

    bp = stats.get('BloodPressure', {})
    story += [
        Paragraph('Blood pressure', styles['SectionHeading']),
        _summary_table([
            ('Current systolic', _fmt(bp.get('CurrentBloodPressureSystolic'), 'mmHg')),
            ('Current diastolic', _fmt(bp.get('CurrentBloodPressureDiastolic'), 'mmHg')),
            ('Last measured', _fmt(bp.get('LastMeasuredDate'))),
        ]),
        _chart(charts.get('BloodPressure'), styles),
    ]

    glucose = stats.get('BloodGlucose', {})
    story += [
        Paragraph('Blood glucose', styles['SectionHeading']),
        _summary_table([
            ('Current', _fmt(glucose.get('CurrentBloodGlucose'), glucose.get('Unit') or 'mg/dL')),
            ('Last measured', _fmt(glucose.get('LastMeasuredDate'))),
        ]),
        _chart(charts.get('BloodGlucose'), styles),
    ]

    lipids = stats.get('Lipids', {})
    story += [
        Paragraph('Lipid profile', styles['SectionHeading']),
        _summary_table([
            (name, _fmt(values[-1]['PrimaryValue'], values[-1].get('Unit') or '') if values else '-')
            for name, values in lipids.items()
        ] or [('Lipids', '-')]),
        _chart(charts.get('Lipids'), styles),
    ]

    doc.build(story)
    return buf.getvalue()
