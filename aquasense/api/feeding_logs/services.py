# aquasense/api/feeding_logs/services.py
from typing import Any, Dict, List, Optional

from aquasense.core.access import Actor, ensure_read
from aquasense.services import collections as col
from aquasense.utils.datetime_utils import DateTimeUtils


def _newest_first_key(doc):
    fed_at = doc.get('fed_at')
    return doc.get('date') or '', DateTimeUtils.to_iso_string(fed_at) if fed_at else ''


class FeedingLogService:
    """Read-only access to the runtime's feeding logs."""

    def __init__(self, repo):
        self.repo = repo

    def list_logs(self, actor: Actor, uid: str, date: Optional[str] = None, start_date: Optional[str] = None,
                  end_date: Optional[str] = None, limit: int = 100) -> List[Dict[str, Any]]:
        ensure_read(actor, uid, col.SUB_FEEDING_LOGS)
        filters = []
        if date:
            filters.append(('date', '==', date))
        if start_date:
            filters.append(('date', '>=', start_date))
        if end_date:
            filters.append(('date', '<=', end_date))

        # Range filters on 'date' force it to be the first ordering field.
        order_by = 'date' if (start_date or end_date) else 'fed_at'
        docs = self.repo.list(col.feeding_logs(uid), filters=filters, order_by=order_by, descending=True, limit=limit)
        if order_by == 'date':
            docs.sort(key=_newest_first_key, reverse=True)
        for doc in docs:
            doc.setdefault('log_id', doc.get('id'))
        return docs
