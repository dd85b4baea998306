# aquasense/api/reports/routes.py
import io

from flask import Blueprint, request, jsonify, current_app, send_file
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from aquasense.api.reports.schemas import HourlyQuerySchema, QUERY_SCHEMAS, export_query_schema
from aquasense.api.reports.services import PERIODS
from aquasense.core.security import current_actor

# Registered under /api/users/<uid>/reports
reports_bp = Blueprint('reports_bp', __name__)

MIMETYPES = {
    'csv': 'text/csv; charset=utf-8',
    'pdf': 'application/pdf',
}


@reports_bp.route('/hourly', methods=['GET'])
@jwt_required()
def get_hourly(uid: str):
    try:
        query = HourlyQuerySchema().load(request.args)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    hours = current_app.services['reports'].hourly(current_actor(), uid, query['date'])
    return jsonify({"date": query['date'], "hours": hours}), 200


@reports_bp.route('/<string:period>', methods=['GET'])
@jwt_required()
def get_reports(uid: str, period: str):
    """Daily, weekly or monthly reports with their water quality label."""
    if period not in PERIODS:
        return jsonify({"error_code": "UNKNOWN_PERIOD", "message": f"Unknown report period '{period}'."}), 404
    try:
        query = QUERY_SCHEMAS[period]().load(request.args)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    reports, label = current_app.services['reports'].period_rows(current_actor(), uid, period, **query)
    return jsonify({"period": period, "filter": label, "reports": reports, "count": len(reports)}), 200


@reports_bp.route('/<string:period>/export', methods=['GET'])
@jwt_required()
def export_reports(uid: str, period: str):
    if period not in PERIODS:
        return jsonify({"error_code": "UNKNOWN_PERIOD", "message": f"Unknown report period '{period}'."}), 404
    try:
        query = export_query_schema(period).load(request.args)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    export_format = query.pop('format')
    reports, label = current_app.services['reports'].period_rows(current_actor(), uid, period, **query)

    exporter = current_app.services['exports']
    if export_format == 'pdf':
        content = exporter.to_pdf(period, reports, label)
    else:
        content = exporter.to_csv(period, reports)

    return send_file(
        io.BytesIO(content),
        as_attachment=True,
        download_name=exporter.filename(period, label, export_format),
        mimetype=MIMETYPES[export_format]
    )
