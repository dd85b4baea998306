# aquasense/services/export_service.py
import csv
import io
import logging
from typing import Any, Dict, List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from aquasense.utils.datetime_utils import DateTimeUtils

CSV_BOM = '\ufeff'

# period -> (key field, coverage field, key header, coverage header)
_PERIOD_COLUMNS = {
    'daily': ('date', 'coverageHours', 'Date', 'Coverage Hours'),
    'weekly': ('week', 'coverageDays', 'Week', 'Coverage Days'),
    'monthly': ('month', 'coverageDays', 'Month', 'Coverage Days'),
}


def _fmt(value, digits: int = 2) -> str:
    if value is None:
        return '-'
    if isinstance(value, float):
        return f"{value:.{digits}f}"
    return str(value)


class ExportService:
    """CSV and PDF renderings of a report table."""

    @staticmethod
    def headers(period: str) -> List[str]:
        _, _, key_header, coverage_header = _PERIOD_COLUMNS[period]
        return [key_header, 'Avg Temperature (°C)', 'Avg pH', 'Total Feed (kg)', 'Mortality',
                coverage_header, 'Water Quality']

    @staticmethod
    def row(period: str, report: Dict[str, Any]) -> List[str]:
        key_field, coverage_field, _, _ = _PERIOD_COLUMNS[period]
        return [
            report.get(key_field, ''),
            _fmt(report.get('avgTemperature')),
            _fmt(report.get('avgPh')),
            _fmt(report.get('totalFeedKg')),
            _fmt(report.get('totalMortality') or 0),
            _fmt(report.get(coverage_field) or 0),
            report.get('waterQuality', 'Unknown'),
        ]

    @staticmethod
    def filename(period: str, label: str, extension: str) -> str:
        return f"{period}_report_{label}_{DateTimeUtils.today().isoformat()}.{extension}"

    def to_csv(self, period: str, reports: List[Dict[str, Any]]) -> bytes:
        """UTF-8 with a BOM so spreadsheet apps pick up the encoding."""
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(self.headers(period))
        for report in reports:
            writer.writerow(self.row(period, report))
        return (CSV_BOM + buffer.getvalue()).encode('utf-8')

    def to_pdf(self, period: str, reports: List[Dict[str, Any]], label: str) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=landscape(A4))
        styles = getSampleStyleSheet()
        elements = [
            Paragraph(f"AquaSense {period.capitalize()} Report", styles['Title']),
            Paragraph(f"Period: {label}", styles['Normal']),
            Paragraph(f"Generated: {DateTimeUtils.to_iso_string(DateTimeUtils.now())}", styles['Normal']),
            Spacer(1, 12),
        ]

        table_data = [self.headers(period)] + [self.row(period, r) for r in reports]
        if not reports:
            table_data.append(['No reports for this period'] + [''] * (len(table_data[0]) - 1))
        table = Table(table_data, repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('ALIGN', (1, 1), (-2, -1), 'RIGHT'),
        ]))
        elements.append(table)
        doc.build(elements)
        logging.info(f"PDF export rendered ({period}, {label}, {len(reports)} rows)")
        return buffer.getvalue()
