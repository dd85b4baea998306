# aquasense/services/test_export_service.py
import csv
import io

from aquasense.services.export_service import ExportService, CSV_BOM

REPORTS = [
    {'date': '2024-01-15', 'avgTemperature': 26.5, 'avgPh': 7.0, 'totalFeedKg': 2.5,
     'totalMortality': 1, 'coverageHours': 12, 'waterQuality': 'Fair'},
    {'date': '2024-01-16', 'avgTemperature': None, 'avgPh': None, 'totalFeedKg': None,
     'totalMortality': 0, 'coverageHours': 0},
]


def test_csv_starts_with_bom_and_formats_rows():
    data = ExportService().to_csv('daily', REPORTS).decode('utf-8')

    assert data.startswith(CSV_BOM)
    rows = list(csv.reader(io.StringIO(data[len(CSV_BOM):])))
    assert rows[0][0] == 'Date'
    assert rows[0][5] == 'Coverage Hours'
    assert rows[1] == ['2024-01-15', '26.50', '7.00', '2.50', '1', '12', 'Fair']
    assert rows[2] == ['2024-01-16', '-', '-', '-', '0', '0', 'Unknown']


def test_weekly_headers_use_coverage_days():
    headers = ExportService.headers('weekly')
    assert headers[0] == 'Week'
    assert headers[5] == 'Coverage Days'


def test_pdf_is_rendered_even_without_rows():
    pdf = ExportService().to_pdf('monthly', [], '2024')
    assert pdf.startswith(b'%PDF')


def test_filename_carries_period_and_label():
    name = ExportService.filename('daily', '2024-01', 'csv')
    assert name.startswith('daily_report_2024-01_')
    assert name.endswith('.csv')
