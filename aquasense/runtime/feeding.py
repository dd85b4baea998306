# aquasense/runtime/feeding.py
"""
Feeding pass: executes every due 'pending' schedule exactly once.

pending --claim (transaction)--> in-progress --feed + log--> completed

A schedule whose feed command fails stays 'in-progress' with last_error set
and a 'failed' feeding log; it is not re-queued, so a pond is never fed twice
for the same schedule.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from aquasense.core.errors import FeedActionError
from aquasense.models.feeding_log import FeedingLog, RESULT_SUCCESS, RESULT_FAILED
from aquasense.models.schedule import Schedule, ScheduleStatus
from aquasense.models.sensor import HourlyRecord
from aquasense.runtime.base import PassResult, for_each_active_user
from aquasense.services import collections as col
from aquasense.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

OUTCOME_COMPLETED = "completed"
OUTCOME_FAILED = "failed"
OUTCOME_SKIPPED = "skipped"


class FeedingExecutor:

    def __init__(self, repo, feeder):
        self.repo = repo
        self.feeder = feeder

    def run(self, now: Optional[datetime] = None) -> PassResult:
        now = now or DateTimeUtils.now()
        return for_each_active_user(self.repo, "feeding", lambda uid: self.run_for_user(uid, now) > 0)

    def due_schedules(self, uid: str, now: datetime):
        return self.repo.list(
            col.schedules(uid),
            filters=[('status', '==', ScheduleStatus.PENDING.value), ('scheduled_at', '<=', now)],
            order_by='scheduled_at'
        )

    def run_for_user(self, uid: str, now: datetime) -> int:
        """Execute the user's due schedules; returns how many were completed."""
        completed = 0
        for doc in self.due_schedules(uid, now):
            if self.execute(uid, doc['id'], now) == OUTCOME_COMPLETED:
                completed += 1
        return completed

    def execute(self, uid: str, schedule_id: str, now: datetime) -> str:
        path = col.schedule_doc(uid, schedule_id)

        claimed = self.repo.transact(path, lambda current: self._claim(uid, schedule_id, current, now))
        if claimed is None:
            logger.info(f"Schedule {schedule_id} already claimed or no longer pending, skipping")
            return OUTCOME_SKIPPED

        schedule = Schedule.from_dict({**claimed, 'schedule_id': schedule_id, 'uid': uid})

        try:
            self.feeder.feed(uid, schedule_id, schedule.feed_amount_kg, schedule.notes)
        except FeedActionError as e:
            self._write_log(uid, schedule, now, RESULT_FAILED, str(e))
            self.repo.update(path, {'last_error': str(e)})
            logger.warning(f"Schedule {schedule_id} left in-progress after failed feed: {e}")
            return OUTCOME_FAILED

        self._write_log(uid, schedule, now, RESULT_SUCCESS)
        self._add_feed_to_hour(uid, schedule.feed_amount_kg, now)
        self.repo.transact(path, lambda current: self._complete(uid, schedule_id, current, now))
        logger.info(f"Schedule {schedule_id} completed for user {uid} ({schedule.feed_amount_kg} kg)")
        return OUTCOME_COMPLETED

    @staticmethod
    def _claim(uid: str, schedule_id: str, current: Optional[Dict[str, Any]], now: datetime):
        if current is None or current.get('status') != ScheduleStatus.PENDING.value:
            return None
        schedule = Schedule.from_dict({**current, 'schedule_id': schedule_id, 'uid': uid})
        return schedule.advance(ScheduleStatus.IN_PROGRESS, now).to_dict()

    @staticmethod
    def _complete(uid: str, schedule_id: str, current: Optional[Dict[str, Any]], now: datetime):
        if current is None or current.get('status') != ScheduleStatus.IN_PROGRESS.value:
            return None
        schedule = Schedule.from_dict({**current, 'schedule_id': schedule_id, 'uid': uid})
        return schedule.advance(ScheduleStatus.COMPLETED, now).to_dict()

    def _write_log(self, uid: str, schedule: Schedule, now: datetime, result: str, error: str = None):
        # One log per schedule: the schedule id doubles as the log id.
        log = FeedingLog(
            log_id=schedule.schedule_id,
            uid=uid,
            schedule_id=schedule.schedule_id,
            amount_kg=schedule.feed_amount_kg,
            fed_at=now,
            date=DateTimeUtils.date_key(now),
            hour=DateTimeUtils.hour_key(now),
            result=result,
            error=error
        )
        self.repo.create(col.feeding_logs(uid), log.to_dict(), doc_id=log.log_id)

    def _add_feed_to_hour(self, uid: str, amount_kg: float, now: datetime):
        date_key, hour_key = DateTimeUtils.date_key(now), DateTimeUtils.hour_key(now)

        def fold(current):
            record = HourlyRecord.from_dict(hour_key, current).add_feed(amount_kg).to_dict()
            record['updatedAt'] = now
            return record

        self.repo.transact(col.hour_doc(uid, date_key, hour_key), fold)
