# aquasense/core/access.py
"""
Role-based access policy.

The same rules are expressed declaratively in firestore.rules for direct
client access; API handlers and the runtime enforce them here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from aquasense.core.errors import PermissionDeniedError
from aquasense.services import collections as col


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    @classmethod
    def parse(cls, value: Optional[str]) -> 'Role':
        """Unknown or missing roles collapse to the least privileged one."""
        try:
            return cls(value)
        except ValueError:
            return cls.USER


# Subcollections the dashboards may mutate.
DASHBOARD_WRITABLE = frozenset({col.SUB_SCHEDULES, col.SUB_MORTALITY_LOGS})

# Paths the background runtime must reach without a user session.
RUNTIME_CRITICAL_SUBCOLLECTIONS = frozenset({
    col.SUB_SCHEDULES,
    col.SUB_FEEDING_LOGS,
    col.SUB_HOURLY_RECORDS,
    col.SUB_DAILY_REPORTS,
    col.SUB_WEEKLY_REPORTS,
    col.SUB_MONTHLY_REPORTS,
})

RUNTIME_READABLE_SUBCOLLECTIONS = RUNTIME_CRITICAL_SUBCOLLECTIONS | {col.SUB_SENSORS, col.SUB_MORTALITY_LOGS}


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation. The runtime actor has no uid and no session."""
    uid: Optional[str]
    role: Optional[Role]

    @property
    def is_runtime(self) -> bool:
        return self.uid is None

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.ADMIN, Role.SUPERADMIN)


RUNTIME = Actor(uid=None, role=None)


def can_read(actor: Actor, owner_uid: str, subcollection: Optional[str] = None) -> bool:
    if actor.is_runtime:
        return subcollection is None or subcollection in RUNTIME_READABLE_SUBCOLLECTIONS
    if actor.is_staff:
        return True
    return actor.uid == owner_uid


def can_write(actor: Actor, owner_uid: str, subcollection: Optional[str]) -> bool:
    if actor.is_runtime:
        return subcollection in RUNTIME_CRITICAL_SUBCOLLECTIONS
    if subcollection not in DASHBOARD_WRITABLE:
        return False
    if actor.is_staff:
        return True
    return actor.uid == owner_uid


def can_runtime_write_path(path: str) -> bool:
    """Whether an unauthenticated runtime write to `path` is allowed."""
    owner_uid, subcollection = col.subcollection_of(path)
    if owner_uid is None:
        return False
    return can_write(RUNTIME, owner_uid, subcollection)


def can_runtime_read_path(path: str) -> bool:
    parts = [p for p in path.strip('/').split('/') if p]
    if parts == [col.COLLECTION_USERS]:
        return True
    owner_uid, subcollection = col.subcollection_of(path)
    if owner_uid is None:
        return False
    return can_read(RUNTIME, owner_uid, subcollection)


def can_change_role(actor: Actor, target_uid: str) -> bool:
    return actor.role == Role.SUPERADMIN and actor.uid != target_uid


def can_set_active(actor: Actor, target_uid: str, target_role: Role) -> bool:
    if actor.uid == target_uid:
        return False
    if actor.role == Role.SUPERADMIN:
        return True
    return actor.role == Role.ADMIN and target_role == Role.USER


def ensure_read(actor: Actor, owner_uid: str, subcollection: Optional[str] = None):
    if not can_read(actor, owner_uid, subcollection):
        raise PermissionDeniedError("You do not have access to this user's data.")


def ensure_write(actor: Actor, owner_uid: str, subcollection: str):
    if not can_write(actor, owner_uid, subcollection):
        raise PermissionDeniedError("You are not allowed to modify this data.")
