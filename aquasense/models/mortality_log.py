# aquasense/models/mortality_log.py
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Dict, Any


@dataclass
class MortalityLog:
    """Document structure of 'users/{uid}/mortalityLogs'."""
    log_id: str
    uid: str
    date: str      # YYYY-MM-DD
    count: int
    cause: Optional[str] = None
    notes: Optional[str] = None
    recorded_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MortalityLog":
        processed = data.copy()
        if 'log_id' not in processed and 'id' in processed:
            processed['log_id'] = processed['id']
        processed['count'] = int(processed.get('count') or 0)
        known = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in processed.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
