# aquasense/api/users/services.py
import logging
from typing import Any, Callable, Dict, List, Optional

from firebase_admin import auth as firebase_auth

from aquasense.core.access import (
    Actor, Role, ensure_read, can_change_role, can_set_active
)
from aquasense.core.errors import NotFoundError, PermissionDeniedError
from aquasense.models.report import classify_water_quality
from aquasense.models.sensor import SensorReading
from aquasense.models.user import User
from aquasense.services import collections as col
from aquasense.services.user_directory import list_user_docs
from aquasense.utils.datetime_utils import DateTimeUtils


class UserService:
    def __init__(self, repo, firebase_auth_client=None):
        self.repo = repo
        self.firebase_auth = firebase_auth_client or firebase_auth

    def get_user(self, uid: str) -> User:
        doc = self.repo.get(col.user_doc(uid))
        if not doc:
            raise NotFoundError(f"User {uid} not found.", error_code="USER_NOT_FOUND")
        return User.from_dict(doc)

    def get_profile(self, actor: Actor, uid: str) -> User:
        ensure_read(actor, uid)
        return self.get_user(uid)

    # --- sensors ---

    def latest_sensors(self, actor: Actor, uid: str) -> Dict[str, Any]:
        """Latest temperature/pH plus today's water quality classification."""
        ensure_read(actor, uid, col.SUB_SENSORS)
        temperature = SensorReading.from_dict(
            col.SENSOR_TEMPERATURE, self.repo.get(col.sensor_doc(uid, col.SENSOR_TEMPERATURE)))
        ph = SensorReading.from_dict(col.SENSOR_PH, self.repo.get(col.sensor_doc(uid, col.SENSOR_PH)))

        today_key = DateTimeUtils.date_key(DateTimeUtils.now())
        mortality_today = sum(
            int(doc.get('count') or 0)
            for doc in self.repo.list(col.mortality_logs(uid), filters=[('date', '==', today_key)])
        )
        label, score = classify_water_quality(temperature.value, ph.value, mortality_today)
        return {
            'uid': uid,
            'temperature': {'value': temperature.value, 'updated_at': temperature.updated_at},
            'ph': {'value': ph.value, 'updated_at': ph.updated_at},
            'mortality_today': mortality_today,
            'water_quality': {'label': label, 'score': score},
        }

    def subscribe_sensors(self, actor: Actor, uid: str, callback: Callable[[List[Dict[str, Any]]], None]):
        ensure_read(actor, uid, col.SUB_SENSORS)
        return self.repo.listen(col.user_sub(uid, col.SUB_SENSORS), callback)

    # --- account management (admin / superadmin) ---

    def list_users(self, role: Optional[Role] = None, active: Optional[bool] = None) -> List[User]:
        filters = []
        if role is not None:
            filters.append(('role', '==', Role(role).value))
        users = [User.from_dict(doc) for doc in list_user_docs(self.repo, filters, active=active)]
        users.sort(key=lambda u: DateTimeUtils.for_firestore(u.join_date) if u.join_date else DateTimeUtils.now())
        return users

    def set_active(self, actor: Actor, uid: str, is_active: bool) -> User:
        target = self.get_user(uid)
        if not can_set_active(actor, uid, target.role):
            raise PermissionDeniedError("You are not allowed to change this account's status.")
        self.repo.update(col.user_doc(uid), {'is_active': is_active})
        target.is_active = is_active
        logging.info(f"Account {'activated' if is_active else 'deactivated'} (uid: {uid}, by: {actor.uid})")
        return target

    def change_role(self, actor: Actor, uid: str, role: Role) -> User:
        if not can_change_role(actor, uid):
            raise PermissionDeniedError("Only a superadmin may change roles, and never their own.")
        target = self.get_user(uid)
        target.role = Role(role)
        self.repo.update(col.user_doc(uid), {'role': target.role.value})
        logging.info(f"Role changed to '{target.role.value}' (uid: {uid}, by: {actor.uid})")
        return target

    def delete_user(self, actor: Actor, uid: str):
        """Delete the Firebase Auth account and the user document."""
        if actor.role != Role.SUPERADMIN or actor.uid == uid:
            raise PermissionDeniedError("This account cannot be deleted by you.")
        self.get_user(uid)
        try:
            self.firebase_auth.delete_user(uid)
        except firebase_auth.UserNotFoundError:
            logging.warning(f"Firebase Auth user was already deleted (uid: {uid}).")
        except Exception as e:
            logging.error(f"Failed to delete Firebase Auth user (uid: {uid}): {e}", exc_info=True)
            raise
        self.repo.delete(col.user_doc(uid))
        logging.info(f"User deleted (uid: {uid}, by: {actor.uid})")

    def stats(self) -> Dict[str, Any]:
        users = self.list_users()
        by_role = {role.value: 0 for role in Role}
        for user in users:
            by_role[user.role.value] += 1
        active = sum(1 for u in users if u.is_active)
        return {
            'total': len(users),
            'active': active,
            'inactive': len(users) - active,
            'by_role': by_role,
        }
