# aquasense/models/sensor.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any


@dataclass
class SensorReading:
    """Latest value the pond device wrote to 'users/{uid}/sensors/{kind}'."""
    kind: str
    value: Optional[float]
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, kind: str, data: Optional[Dict[str, Any]]) -> "SensorReading":
        if not data:
            return cls(kind=kind, value=None)
        raw = data.get('value')
        try:
            value = float(raw) if raw is not None else None
        except (TypeError, ValueError):
            value = None
        return cls(kind=kind, value=value, updated_at=data.get('updatedAt') or data.get('updated_at'))


@dataclass
class HourlyRecord:
    """
    Document structure of 'users/{uid}/hourlyRecords/{date}/hours/{HH}'.
    Running sums and counts; the averages are derived from them on every fold.
    """
    hour: str
    temperatureSum: float = 0.0
    temperatureCount: int = 0
    temperatureAvg: float = 0.0
    phSum: float = 0.0
    phCount: int = 0
    phAvg: float = 0.0
    feedUsedKg: float = 0.0
    isSeed: bool = False
    source: str = "py-runtime"

    @classmethod
    def from_dict(cls, hour: str, data: Optional[Dict[str, Any]]) -> "HourlyRecord":
        record = cls(hour=hour)
        if not data:
            return record
        record.temperatureSum = float(data.get('temperatureSum') or 0)
        record.temperatureCount = int(data.get('temperatureCount') or 0)
        record.phSum = float(data.get('phSum') or 0)
        record.phCount = int(data.get('phCount') or 0)
        record.feedUsedKg = float(data.get('feedUsedKg') or 0)
        record._refresh_averages()
        return record

    def _refresh_averages(self):
        self.temperatureAvg = self.temperatureSum / self.temperatureCount if self.temperatureCount else 0.0
        self.phAvg = self.phSum / self.phCount if self.phCount else 0.0

    def fold(self, temperature: Optional[float], ph: Optional[float]) -> "HourlyRecord":
        if temperature is not None:
            self.temperatureSum += temperature
            self.temperatureCount += 1
        if ph is not None:
            self.phSum += ph
            self.phCount += 1
        self.isSeed = False
        self._refresh_averages()
        return self

    def add_feed(self, amount_kg: float) -> "HourlyRecord":
        self.feedUsedKg += amount_kg
        self.isSeed = False
        return self

    @property
    def has_samples(self) -> bool:
        return self.temperatureCount > 0 or self.phCount > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hour': self.hour,
            'temperatureSum': self.temperatureSum,
            'temperatureCount': self.temperatureCount,
            'temperatureAvg': self.temperatureAvg,
            'phSum': self.phSum,
            'phCount': self.phCount,
            'phAvg': self.phAvg,
            'feedUsedKg': self.feedUsedKg,
            'isSeed': self.isSeed,
            'source': self.source,
        }
