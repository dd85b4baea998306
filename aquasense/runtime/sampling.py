# aquasense/runtime/sampling.py
import logging
from datetime import datetime
from typing import Optional

from aquasense.models.sensor import SensorReading, HourlyRecord
from aquasense.runtime.base import PassResult, for_each_active_user
from aquasense.services import collections as col
from aquasense.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


class SensorSampler:
    """
    Folds the latest temperature and pH readings into the current hour bucket
    (running sums and counts, averages recomputed on every fold).
    """

    def __init__(self, repo):
        self.repo = repo

    def run(self, now: Optional[datetime] = None) -> PassResult:
        now = now or DateTimeUtils.now()
        return for_each_active_user(self.repo, "sampling", lambda uid: self.sample_user(uid, now))

    def read_latest(self, uid: str):
        temperature = SensorReading.from_dict(
            col.SENSOR_TEMPERATURE, self.repo.get(col.sensor_doc(uid, col.SENSOR_TEMPERATURE)))
        ph = SensorReading.from_dict(col.SENSOR_PH, self.repo.get(col.sensor_doc(uid, col.SENSOR_PH)))
        return temperature, ph

    def sample_user(self, uid: str, now: datetime) -> bool:
        temperature, ph = self.read_latest(uid)
        if temperature.value is None and ph.value is None:
            return False

        date_key, hour_key = DateTimeUtils.date_key(now), DateTimeUtils.hour_key(now)

        def fold(current):
            record = HourlyRecord.from_dict(hour_key, current).fold(temperature.value, ph.value).to_dict()
            record['updatedAt'] = now
            return record

        self.repo.transact(col.hour_doc(uid, date_key, hour_key), fold)
        return True
