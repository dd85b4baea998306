# aquasense/runtime/aggregation.py
"""
Report rollups: hourly buckets -> daily report -> weekly / monthly reports.

Seed documents (isSeed: true) are display placeholders and never count
towards an aggregate.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from aquasense.models.report import DailyReport, WeeklyReport, MonthlyReport, REPORT_SOURCE
from aquasense.models.sensor import HourlyRecord
from aquasense.runtime.base import PassResult, for_each_active_user
from aquasense.services import collections as col
from aquasense.utils.datetime_utils import DateTimeUtils, DATE_KEY_FORMAT

logger = logging.getLogger(__name__)


def _mean(values: List[float]) -> Optional[float]:
    return round(sum(values) / len(values), 2) if values else None


def _sum_or_none(values: List[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    return sum(present) if present else None


class ReportAggregator:

    def __init__(self, repo):
        self.repo = repo
        # uid -> (day, week, month) keys seen on the previous rolling pass
        self._last_keys: Dict[str, Tuple[str, str, str]] = {}

    # --- single user, single period ---

    def generate_daily(self, uid: str, date_key: str) -> Optional[Dict]:
        """Roll a day's hour buckets and mortality logs into its daily report."""
        hours = [
            HourlyRecord.from_dict(doc['id'], doc)
            for doc in self.repo.list(col.hours(uid, date_key))
            if not doc.get('isSeed')
        ]
        mortality = sum(
            int(doc.get('count') or 0)
            for doc in self.repo.list(col.mortality_logs(uid), filters=[('date', '==', date_key)])
        )

        temperature_count = sum(h.temperatureCount for h in hours)
        ph_count = sum(h.phCount for h in hours)
        feed_hours = [h.feedUsedKg for h in hours if h.feedUsedKg > 0]
        coverage = sum(1 for h in hours if h.has_samples)

        if coverage == 0 and not feed_hours and mortality == 0:
            logger.debug(f"No activity for user {uid} on {date_key}, daily report not written")
            return None

        report = DailyReport(
            date=date_key,
            avgTemperature=round(sum(h.temperatureSum for h in hours) / temperature_count, 2) if temperature_count else None,
            avgPh=round(sum(h.phSum for h in hours) / ph_count, 2) if ph_count else None,
            totalFeedKg=sum(feed_hours) if feed_hours else None,
            totalMortality=mortality,
            coverageHours=coverage
        )
        return self._write(col.daily_report_doc(uid, date_key), report.to_dict())

    def generate_weekly(self, uid: str, week_key: str) -> Optional[Dict]:
        days = DateTimeUtils.iso_week_dates(week_key)
        dailies = self._dailies_between(uid, days[0].strftime(DATE_KEY_FORMAT), days[-1].strftime(DATE_KEY_FORMAT))
        if not dailies:
            return None
        report = WeeklyReport(week=week_key, coverageDays=len(dailies), **self._combine(dailies))
        return self._write(col.weekly_report_doc(uid, week_key), report.to_dict())

    def generate_monthly(self, uid: str, month_key: str) -> Optional[Dict]:
        start, end = DateTimeUtils.parse_month_key(month_key)
        dailies = self._dailies_between(uid, start.strftime(DATE_KEY_FORMAT), end.strftime(DATE_KEY_FORMAT))
        if not dailies:
            return None
        report = MonthlyReport(month=month_key, coverageDays=len(dailies), **self._combine(dailies))
        return self._write(col.monthly_report_doc(uid, month_key), report.to_dict())

    def _dailies_between(self, uid: str, start_key: str, end_key: str) -> List[Dict]:
        docs = self.repo.list(
            col.daily_reports(uid),
            filters=[('date', '>=', start_key), ('date', '<=', end_key)],
            order_by='date'
        )
        return [doc for doc in docs if not doc.get('isSeed')]

    @staticmethod
    def _combine(dailies: List[Dict]) -> Dict:
        return {
            'avgTemperature': _mean([d['avgTemperature'] for d in dailies if d.get('avgTemperature') is not None]),
            'avgPh': _mean([d['avgPh'] for d in dailies if d.get('avgPh') is not None]),
            'totalFeedKg': _sum_or_none([d.get('totalFeedKg') for d in dailies]),
            'totalMortality': sum(int(d.get('totalMortality') or 0) for d in dailies),
        }

    def _write(self, path: str, data: Dict) -> Dict:
        data['source'] = REPORT_SOURCE
        data['generatedAt'] = self.repo.server_timestamp()
        self.repo.set(path, data, merge=True)
        logger.info(f"Report written: {path}")
        return data

    # --- all active users ---

    def run_daily(self, date_key: str) -> PassResult:
        return for_each_active_user(self.repo, "daily", lambda uid: self.generate_daily(uid, date_key) is not None)

    def run_weekly(self, week_key: str) -> PassResult:
        return for_each_active_user(self.repo, "weekly", lambda uid: self.generate_weekly(uid, week_key) is not None)

    def run_monthly(self, month_key: str) -> PassResult:
        return for_each_active_user(self.repo, "monthly", lambda uid: self.generate_monthly(uid, month_key) is not None)

    # --- rolling refresh used by the runtime loop ---

    def run(self, now: Optional[datetime] = None) -> PassResult:
        now = now or DateTimeUtils.now()
        return for_each_active_user(self.repo, "rollup", lambda uid: self.refresh_user(uid, now))

    def refresh_user(self, uid: str, now: datetime) -> bool:
        """
        Recompute the current day, week and month. When a boundary was crossed
        since the last pass, the period that just closed is recomputed once more
        so it picks up the writes made after the previous pass.
        """
        current = (DateTimeUtils.date_key(now), DateTimeUtils.iso_week_key(now), DateTimeUtils.month_key(now))
        previous = self._last_keys.get(uid)

        wrote = False
        if previous is not None:
            day, week, month = previous
            if day != current[0]:
                wrote |= self.generate_daily(uid, day) is not None
            if week != current[1]:
                wrote |= self.generate_weekly(uid, week) is not None
            if month != current[2]:
                wrote |= self.generate_monthly(uid, month) is not None

        wrote |= self.generate_daily(uid, current[0]) is not None
        wrote |= self.generate_weekly(uid, current[1]) is not None
        wrote |= self.generate_monthly(uid, current[2]) is not None

        self._last_keys[uid] = current
        return wrote
