# aquasense/api/admin/services.py
from typing import Any, Dict

from aquasense.core.access import Actor, Role, ensure_read


class AdminService:
    """Read models of the admin dashboard, composed from the per-user services."""

    def __init__(self, user_service, schedule_service, report_service):
        self.users = user_service
        self.schedules = schedule_service
        self.reports = report_service

    def overview(self, actor: Actor, uid: str) -> Dict[str, Any]:
        ensure_read(actor, uid)
        user = self.users.get_user(uid)
        return {
            'user': user,
            'sensors': self.users.latest_sensors(actor, uid),
            'pending_schedules': self.schedules.count_pending(uid),
            'latest_daily_report': self.reports.latest_daily(uid),
        }

    def summary(self) -> Dict[str, Any]:
        users = self.users.list_users(role=Role.USER)
        return {
            'users': len(users),
            'active_users': sum(1 for u in users if u.is_active),
            'pending_schedules': sum(self.schedules.count_pending(u.uid) for u in users),
        }
