# aquasense/api/cron/routes.py
"""
Cron-triggered runtime passes for hosts without a long-running runtime process.
Every endpoint requires CRON_SECRET (X-Cron-Secret header or ?secret=).
"""
import logging
import re

from flask import Blueprint, request, jsonify, current_app

from aquasense.core.security import cron_secret_required
from aquasense.utils.datetime_utils import DateTimeUtils, DATE_KEY_PATTERN

cron_bp = Blueprint('cron_bp', __name__)


def _respond(result):
    body = result.to_dict()
    body['success'] = result.errors == 0
    return jsonify(body), 200


def _invalid(param: str, expected: str):
    return jsonify({"success": False, "error_code": "VALIDATION_ERROR",
                    "message": f"Invalid '{param}'. Expected {expected}."}), 400


@cron_bp.route('/run-feedings', methods=['POST'])
@cron_secret_required
def run_feedings():
    return _respond(current_app.services['runtime'].feeding.run())


@cron_bp.route('/sample-hourly', methods=['POST'])
@cron_secret_required
def sample_hourly():
    return _respond(current_app.services['runtime'].sampler.run())


@cron_bp.route('/generate-daily', methods=['POST'])
@cron_secret_required
def generate_daily():
    """?date=YYYY-MM-DD, default yesterday (UTC)."""
    date_key = request.args.get('date') or DateTimeUtils.previous_day_key(DateTimeUtils.today())
    if not re.match(DATE_KEY_PATTERN, date_key):
        return _invalid('date', 'YYYY-MM-DD')
    try:
        DateTimeUtils.parse_date_string(date_key)
    except ValueError:
        return _invalid('date', 'YYYY-MM-DD')
    logging.info(f"Cron: generating daily reports for {date_key}")
    return _respond(current_app.services['runtime'].aggregator.run_daily(date_key))


@cron_bp.route('/generate-weekly', methods=['POST'])
@cron_secret_required
def generate_weekly():
    """?week=YYYY-Www, default the previous ISO week."""
    week_key = request.args.get('week') or DateTimeUtils.previous_week_key(DateTimeUtils.today())
    try:
        DateTimeUtils.iso_week_dates(week_key)
    except ValueError:
        return _invalid('week', 'YYYY-Www')
    logging.info(f"Cron: generating weekly reports for {week_key}")
    return _respond(current_app.services['runtime'].aggregator.run_weekly(week_key))


@cron_bp.route('/generate-monthly', methods=['POST'])
@cron_secret_required
def generate_monthly():
    """?month=YYYY-MM, default the previous month."""
    month_key = request.args.get('month') or DateTimeUtils.previous_month_key(DateTimeUtils.today())
    try:
        DateTimeUtils.parse_month_key(month_key)
    except ValueError:
        return _invalid('month', 'YYYY-MM')
    logging.info(f"Cron: generating monthly reports for {month_key}")
    return _respond(current_app.services['runtime'].aggregator.run_monthly(month_key))
