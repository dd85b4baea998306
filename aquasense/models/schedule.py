# aquasense/models/schedule.py
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from aquasense.core.errors import InvalidStatusTransitionError


class ScheduleStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


# Status only moves forward.
_ALLOWED_TRANSITIONS = {
    ScheduleStatus.PENDING: {ScheduleStatus.IN_PROGRESS},
    ScheduleStatus.IN_PROGRESS: {ScheduleStatus.COMPLETED},
    ScheduleStatus.COMPLETED: set(),
}


def can_transition(current: ScheduleStatus, target: ScheduleStatus) -> bool:
    return target in _ALLOWED_TRANSITIONS[current]


@dataclass
class Schedule:
    """
    Document structure of 'users/{uid}/schedules'.
    Created by a user as 'pending'; the runtime moves it to 'in-progress' and 'completed'.
    """
    schedule_id: str
    uid: str
    scheduled_at: datetime
    feed_amount_kg: float
    notes: Optional[str] = None
    status: ScheduleStatus = ScheduleStatus.PENDING
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    last_error: Optional[str] = None

    @property
    def is_editable(self) -> bool:
        return self.status == ScheduleStatus.PENDING

    def advance(self, target: ScheduleStatus, at: datetime) -> "Schedule":
        """Move to `target`, stamping the matching timestamp. Raises on backward moves."""
        if not can_transition(self.status, target):
            raise InvalidStatusTransitionError(
                f"Schedule {self.schedule_id} cannot move from '{self.status.value}' to '{target.value}'."
            )
        self.status = target
        if target == ScheduleStatus.IN_PROGRESS:
            self.started_at = at
        elif target == ScheduleStatus.COMPLETED:
            self.completed_at = at
            self.last_error = None
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schedule":
        processed = data.copy()
        if 'schedule_id' not in processed and 'id' in processed:
            processed['schedule_id'] = processed['id']
        processed['status'] = ScheduleStatus(processed.get('status', ScheduleStatus.PENDING.value))
        processed['feed_amount_kg'] = float(processed.get('feed_amount_kg') or 0)
        known = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in processed.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['status'] = self.status.value
        return data
