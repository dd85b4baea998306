# aquasense/api/mortality/services.py
import logging
import uuid
from typing import Any, Dict, List, Optional

from aquasense.core.access import Actor, ensure_read, ensure_write
from aquasense.core.errors import NotFoundError
from aquasense.models.mortality_log import MortalityLog
from aquasense.services import collections as col
from aquasense.utils.datetime_utils import DateTimeUtils


class MortalityService:
    """
    Mortality entries recorded from the dashboards.
    The daily rollup sums them per date; entries for past dates are picked up
    when that day's report is regenerated.
    """

    def __init__(self, repo):
        self.repo = repo

    def list_logs(self, actor: Actor, uid: str, start_date: Optional[str] = None,
                  end_date: Optional[str] = None) -> List[MortalityLog]:
        ensure_read(actor, uid, col.SUB_MORTALITY_LOGS)
        filters = []
        if start_date:
            filters.append(('date', '>=', start_date))
        if end_date:
            filters.append(('date', '<=', end_date))
        docs = self.repo.list(col.mortality_logs(uid), filters=filters, order_by='date', descending=True)
        return [MortalityLog.from_dict({**doc, 'uid': uid}) for doc in docs]

    def create_log(self, actor: Actor, uid: str, data: Dict[str, Any]) -> MortalityLog:
        ensure_write(actor, uid, col.SUB_MORTALITY_LOGS)
        log = MortalityLog(
            log_id=str(uuid.uuid4()),
            uid=uid,
            date=data['date'],
            count=data['count'],
            cause=data.get('cause'),
            notes=data.get('notes'),
            recorded_at=DateTimeUtils.now()
        )
        self.repo.create(col.mortality_logs(uid), log.to_dict(), doc_id=log.log_id)
        logging.info(f"Mortality recorded (uid: {uid}, date: {log.date}, count: {log.count})")
        return log

    def delete_log(self, actor: Actor, uid: str, log_id: str):
        ensure_write(actor, uid, col.SUB_MORTALITY_LOGS)
        path = f"{col.mortality_logs(uid)}/{log_id}"
        if not self.repo.get(path):
            raise NotFoundError(f"Mortality log {log_id} not found.", error_code="MORTALITY_LOG_NOT_FOUND")
        self.repo.delete(path)
