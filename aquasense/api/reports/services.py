# aquasense/api/reports/services.py
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from aquasense.core.access import Actor, ensure_read
from aquasense.models.report import classify_water_quality
from aquasense.models.sensor import HourlyRecord
from aquasense.services import collections as col
from aquasense.utils.datetime_utils import DateTimeUtils, DATE_KEY_FORMAT

PERIOD_DAILY = "daily"
PERIOD_WEEKLY = "weekly"
PERIOD_MONTHLY = "monthly"
PERIODS = (PERIOD_DAILY, PERIOD_WEEKLY, PERIOD_MONTHLY)


def with_water_quality(report: Dict[str, Any]) -> Dict[str, Any]:
    label, score = classify_water_quality(
        report.get('avgTemperature'), report.get('avgPh'), int(report.get('totalMortality') or 0))
    return {**report, 'waterQuality': label, 'waterQualityScore': score}


class ReportService:
    """Read side of the aggregates written by the runtime. Seed documents are never returned."""

    def __init__(self, repo):
        self.repo = repo

    def _reports(self, path: str, key_field: str, filters) -> List[Dict[str, Any]]:
        docs = self.repo.list(path, filters=filters, order_by=key_field)
        return [with_water_quality(doc) for doc in docs if not doc.get('isSeed')]

    def hourly(self, actor: Actor, uid: str, date_key: str) -> List[Dict[str, Any]]:
        """All 24 hour buckets of a day; hours without a document come back empty."""
        ensure_read(actor, uid, col.SUB_HOURLY_RECORDS)
        stored = {doc['id']: doc for doc in self.repo.list(col.hours(uid, date_key)) if not doc.get('isSeed')}
        buckets = []
        for h in range(24):
            hour_key = f"{h:02d}"
            record = HourlyRecord.from_dict(hour_key, stored.get(hour_key)).to_dict()
            record['hasData'] = hour_key in stored
            buckets.append(record)
        return buckets

    def daily(self, actor: Actor, uid: str, date: Optional[str] = None,
              month: Optional[str] = None) -> Tuple[List[Dict[str, Any]], str]:
        """Daily reports for one date, or for a month (default: the current month)."""
        ensure_read(actor, uid, col.SUB_DAILY_REPORTS)
        if date:
            doc = self.repo.get(col.daily_report_doc(uid, date))
            rows = [with_water_quality(doc)] if doc and not doc.get('isSeed') else []
            return rows, date

        month = month or DateTimeUtils.month_key(DateTimeUtils.today())
        start, end = DateTimeUtils.parse_month_key(month)
        filters = [('date', '>=', start.strftime(DATE_KEY_FORMAT)), ('date', '<=', end.strftime(DATE_KEY_FORMAT))]
        return self._reports(col.daily_reports(uid), 'date', filters), month

    def weekly(self, actor: Actor, uid: str, week: Optional[str] = None,
               month: Optional[str] = None) -> Tuple[List[Dict[str, Any]], str]:
        """Weekly reports for one ISO week, or for the weeks whose Monday falls in a month."""
        ensure_read(actor, uid, col.SUB_WEEKLY_REPORTS)
        if week:
            DateTimeUtils.iso_week_dates(week)
            doc = self.repo.get(col.weekly_report_doc(uid, week))
            rows = [with_water_quality(doc)] if doc and not doc.get('isSeed') else []
            return rows, week

        month = month or DateTimeUtils.month_key(DateTimeUtils.today())
        start, end = DateTimeUtils.parse_month_key(month)
        first_monday = start + timedelta(days=(7 - start.weekday()) % 7)
        week_keys = []
        day = first_monday
        while day <= end:
            week_keys.append(DateTimeUtils.iso_week_key(day))
            day += timedelta(weeks=1)
        return self._reports(col.weekly_reports(uid), 'week', [('week', 'in', week_keys)]), month

    def monthly(self, actor: Actor, uid: str, month: Optional[str] = None,
                year: Optional[str] = None) -> Tuple[List[Dict[str, Any]], str]:
        """One month, or every month of a year (default: the current year)."""
        ensure_read(actor, uid, col.SUB_MONTHLY_REPORTS)
        if month:
            DateTimeUtils.parse_month_key(month)
            doc = self.repo.get(col.monthly_report_doc(uid, month))
            rows = [with_water_quality(doc)] if doc and not doc.get('isSeed') else []
            return rows, month

        year = year or str(DateTimeUtils.today().year)
        filters = [('month', '>=', f"{year}-01"), ('month', '<=', f"{year}-12")]
        return self._reports(col.monthly_reports(uid), 'month', filters), year

    def latest_daily(self, uid: str) -> Optional[Dict[str, Any]]:
        docs = self.repo.list(col.daily_reports(uid), order_by='date', descending=True, limit=5)
        for doc in docs:
            if not doc.get('isSeed'):
                return with_water_quality(doc)
        return None

    def period_rows(self, actor: Actor, uid: str, period: str, **filters) -> Tuple[List[Dict[str, Any]], str]:
        handler = {
            PERIOD_DAILY: self.daily,
            PERIOD_WEEKLY: self.weekly,
            PERIOD_MONTHLY: self.monthly,
        }[period]
        return handler(actor, uid, **filters)
