# aquasense/api/schedules/services.py
import logging
import uuid
from typing import Any, Dict, List, Optional

from aquasense.core.access import Actor, ensure_read, ensure_write
from aquasense.core.errors import ConflictError, NotFoundError
from aquasense.models.schedule import Schedule, ScheduleStatus
from aquasense.services import collections as col
from aquasense.utils.datetime_utils import DateTimeUtils

EDITABLE_FIELDS = ('scheduled_at', 'feed_amount_kg', 'notes')


class ScheduleService:
    """
    Feeding schedules as seen by the dashboards.

    Clients create schedules and may edit or delete them while they are still
    'pending'. Only the runtime moves a schedule forward.
    """

    def __init__(self, repo):
        self.repo = repo

    def list_schedules(self, actor: Actor, uid: str, status: Optional[str] = None) -> List[Schedule]:
        ensure_read(actor, uid, col.SUB_SCHEDULES)
        filters = [('status', '==', ScheduleStatus(status).value)] if status else []
        docs = self.repo.list(col.schedules(uid), filters=filters, order_by='scheduled_at')
        return [Schedule.from_dict({**doc, 'uid': uid}) for doc in docs]

    def get_schedule(self, actor: Actor, uid: str, schedule_id: str) -> Schedule:
        ensure_read(actor, uid, col.SUB_SCHEDULES)
        doc = self.repo.get(col.schedule_doc(uid, schedule_id))
        if not doc:
            raise NotFoundError(f"Schedule {schedule_id} not found.", error_code="SCHEDULE_NOT_FOUND")
        return Schedule.from_dict({**doc, 'uid': uid})

    def create_schedule(self, actor: Actor, uid: str, data: Dict[str, Any]) -> Schedule:
        ensure_write(actor, uid, col.SUB_SCHEDULES)
        schedule = Schedule(
            schedule_id=str(uuid.uuid4()),
            uid=uid,
            scheduled_at=DateTimeUtils.validate_datetime_field(data['scheduled_at'], 'scheduled_at'),
            feed_amount_kg=float(data['feed_amount_kg']),
            notes=data.get('notes'),
            status=ScheduleStatus.PENDING,
            created_at=DateTimeUtils.now()
        )
        self.repo.create(col.schedules(uid), schedule.to_dict(), doc_id=schedule.schedule_id)
        logging.info(f"Schedule created (uid: {uid}, id: {schedule.schedule_id}, at: {schedule.scheduled_at})")
        return schedule

    @staticmethod
    def _editable(uid: str, schedule_id: str, current: Optional[Dict[str, Any]], action: str) -> Schedule:
        if current is None:
            raise NotFoundError(f"Schedule {schedule_id} not found.", error_code="SCHEDULE_NOT_FOUND")
        schedule = Schedule.from_dict({**current, 'schedule_id': schedule_id, 'uid': uid})
        if not schedule.is_editable:
            raise ConflictError(
                f"Schedule is '{schedule.status.value}' and can no longer be {action}.",
                error_code="SCHEDULE_LOCKED"
            )
        return schedule

    def update_schedule(self, actor: Actor, uid: str, schedule_id: str, data: Dict[str, Any]) -> Schedule:
        """Edit time/amount/notes. Runs as a transaction so it cannot race the runtime's claim."""
        ensure_write(actor, uid, col.SUB_SCHEDULES)
        changes = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        if 'scheduled_at' in changes:
            changes['scheduled_at'] = DateTimeUtils.validate_datetime_field(changes['scheduled_at'], 'scheduled_at')

        def apply(current):
            self._editable(uid, schedule_id, current, 'edited')
            return {**current, **changes}

        updated = self.repo.transact(col.schedule_doc(uid, schedule_id), apply)
        return Schedule.from_dict({**updated, 'schedule_id': schedule_id, 'uid': uid})

    def delete_schedule(self, actor: Actor, uid: str, schedule_id: str):
        """The status check and the delete share one transaction, like update_schedule."""
        ensure_write(actor, uid, col.SUB_SCHEDULES)
        self.repo.transact_delete(
            col.schedule_doc(uid, schedule_id),
            lambda current: self._editable(uid, schedule_id, current, 'deleted') is not None
        )
        logging.info(f"Schedule deleted (uid: {uid}, id: {schedule_id})")

    def count_pending(self, uid: str) -> int:
        return len(self.repo.list(col.schedules(uid), filters=[('status', '==', ScheduleStatus.PENDING.value)]))
