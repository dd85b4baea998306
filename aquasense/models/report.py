# aquasense/models/report.py
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, Tuple

REPORT_SOURCE = "py-runtime"

# Water quality bands
PH_RANGE = (6.5, 8.5)
TEMPERATURE_RANGE_C = (24.0, 30.0)


def classify_water_quality(avg_temperature: Optional[float], avg_ph: Optional[float],
                           mortality: int = 0) -> Tuple[str, Optional[int]]:
    """Return (label, score) for a period's averages and mortality."""
    if avg_temperature is None or avg_ph is None:
        return "Unknown", None

    ph_in_range = PH_RANGE[0] <= avg_ph <= PH_RANGE[1]
    temp_in_range = TEMPERATURE_RANGE_C[0] <= avg_temperature <= TEMPERATURE_RANGE_C[1]

    if ph_in_range and temp_in_range and mortality == 0:
        return "Good", 90
    if mortality <= 3 or (ph_in_range and temp_in_range and mortality > 0):
        return "Fair", 70
    return "Poor", 40


@dataclass
class DailyReport:
    """'users/{uid}/dailyReports/{YYYY-MM-DD}'"""
    date: str
    avgTemperature: Optional[float]
    avgPh: Optional[float]
    totalFeedKg: Optional[float]
    totalMortality: int
    coverageHours: int
    isSeed: bool = False
    source: str = REPORT_SOURCE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class WeeklyReport:
    """'users/{uid}/weeklyReports/{YYYY-Www}'"""
    week: str
    avgTemperature: Optional[float]
    avgPh: Optional[float]
    totalFeedKg: Optional[float]
    totalMortality: int
    coverageDays: int
    isSeed: bool = False
    source: str = REPORT_SOURCE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MonthlyReport:
    """'users/{uid}/monthlyReports/{YYYY-MM}'"""
    month: str
    avgTemperature: Optional[float]
    avgPh: Optional[float]
    totalFeedKg: Optional[float]
    totalMortality: int
    coverageDays: int
    isSeed: bool = False
    source: str = REPORT_SOURCE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
