# aquasense/models/feeding_log.py
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Dict, Any

RESULT_SUCCESS = "success"
RESULT_FAILED = "failed"


@dataclass
class FeedingLog:
    """
    Document structure of 'users/{uid}/feedingLogs'.
    Written once per executed schedule; never edited afterwards.
    """
    log_id: str
    uid: str
    schedule_id: str
    amount_kg: float
    fed_at: datetime
    date: str          # YYYY-MM-DD (UTC) of fed_at, used for range queries
    hour: str          # HH (UTC) of fed_at
    result: str = RESULT_SUCCESS
    error: Optional[str] = None
    source: str = "py-runtime"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
