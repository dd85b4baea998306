# aquasense/services/feeder_service.py
import logging
from typing import Optional

from firebase_admin import db as rtdb

from aquasense.core.errors import FeedActionError
from aquasense.services import collections as col
from aquasense.utils.datetime_utils import DateTimeUtils


class FeederService:
    """
    Issues feed commands to a pond's feeder through the Realtime Database.
    The device listens on 'devices/{uid}/feeder/commands' and dispenses the amount.
    """
    def __init__(self, root=None):
        # Tests inject a fake reference root; production resolves rtdb lazily.
        self._root = root

    def _reference(self, path: str):
        if self._root is not None:
            return self._root.child(path)
        return rtdb.reference(path)

    def feed(self, uid: str, schedule_id: str, amount_kg: float, notes: Optional[str] = None) -> dict:
        """Write one feed command keyed by schedule id; a re-sent command overwrites, never duplicates."""
        command = {
            'command': 'feed',
            'amountKg': amount_kg,
            'scheduleId': schedule_id,
            'notes': notes,
            'issuedAt': DateTimeUtils.to_iso_string(DateTimeUtils.now()),
            'status': 'queued',
        }
        try:
            self._reference(col.feeder_commands(uid)).child(schedule_id).set(command)
            logging.info(f"Feed command issued (uid: {uid}, schedule: {schedule_id}, {amount_kg} kg)")
            return command
        except Exception as e:
            logging.error(f"Feed command failed (uid: {uid}, schedule: {schedule_id}): {e}", exc_info=True)
            raise FeedActionError(f"Could not reach the feeder for schedule {schedule_id}") from e
