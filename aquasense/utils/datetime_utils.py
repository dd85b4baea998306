# aquasense/utils/datetime_utils.py
"""
Centralized date/time helpers for the whole backend.

Goals of this module:
1. Every timestamp handled by the API and the runtime is timezone-aware UTC
2. Values written to Firestore are normalized the same way everywhere
3. Report buckets (hour, day, ISO week, month) are keyed consistently
"""

import logging
import re
from datetime import datetime, date, timezone, time, timedelta
from typing import Any, List, Tuple
from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

DATE_KEY_FORMAT = '%Y-%m-%d'
DATE_KEY_PATTERN = r'^\d{4}-\d{2}-\d{2}$'
WEEK_KEY_PATTERN = r'^(\d{4})-W(\d{2})$'
MONTH_KEY_PATTERN = r'^(\d{4})-(\d{2})$'


class DateTimeUtils:
    """Date/time helpers shared by the API and the aggregation runtime."""

    @staticmethod
    def now() -> datetime:
        """Current time as a UTC timezone-aware datetime."""
        return datetime.now(timezone.utc)

    @staticmethod
    def today() -> date:
        return datetime.now(timezone.utc).date()

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        Parse an ISO 8601 string into a UTC datetime.

        Supported:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+08:00
        - 2024-01-15T10:30:00.123456Z
        - 2024-01-15T10:30:00 (assumed UTC)
        """
        try:
            if not iso_string:
                raise ValueError("Cannot parse an empty string")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)

            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)

            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime parsing failed: {iso_string} - {e}")
            raise ValueError(f"Invalid ISO datetime: {iso_string}")

    @staticmethod
    def parse_date_string(date_string: str) -> date:
        """Parse a date string (2024-01-15, 2024/01/15, ...) into a date."""
        try:
            if not date_string:
                raise ValueError("Cannot parse an empty string")
            return dateutil_parser.parse(date_string).date()
        except Exception as e:
            logger.error(f"Date parsing failed: {date_string} - {e}")
            raise ValueError(f"Invalid date: {date_string}")

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime -> ISO string with a 'Z' suffix."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat().replace('+00:00', 'Z')

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Normalize date/time values before a Firestore write.

        - date -> datetime (00:00:00 UTC)
        - naive datetime -> UTC-aware datetime
        - dicts and lists are converted recursively
        """
        if isinstance(obj, date) and not isinstance(obj, datetime):
            return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)
        elif isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Normalize values read from Firestore.

        Firestore returns DatetimeWithNanoseconds (a datetime subclass);
        everything comes back UTC-aware.
        """
        if isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.from_firestore(item) for item in obj]
        return obj

    @staticmethod
    def validate_datetime_field(value: Any, field_name: str = "datetime") -> datetime:
        """
        Validate and normalize a datetime coming from an API payload.

        Raises:
            ValueError: when the value is missing or cannot be parsed
        """
        if value is None:
            raise ValueError(f"{field_name} is required")
        if isinstance(value, str):
            return DateTimeUtils.parse_iso_datetime(value)
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
        raise ValueError(f"{field_name} must be a string or datetime")

    # --- Report bucket keys ---

    @staticmethod
    def date_key(dt: datetime) -> str:
        """datetime/date -> 'YYYY-MM-DD' (UTC)."""
        if isinstance(dt, datetime):
            dt = DateTimeUtils.for_firestore(dt)
        return dt.strftime(DATE_KEY_FORMAT)

    @staticmethod
    def hour_key(dt: datetime) -> str:
        """datetime -> 'HH' (UTC hour, zero padded)."""
        return f"{DateTimeUtils.for_firestore(dt).hour:02d}"

    @staticmethod
    def iso_week_key(d: date) -> str:
        """date -> 'YYYY-Www' using ISO-8601 week numbering."""
        if isinstance(d, datetime):
            d = DateTimeUtils.for_firestore(d).date()
        iso_year, iso_week, _ = d.isocalendar()
        return f"{iso_year:04d}-W{iso_week:02d}"

    @staticmethod
    def month_key(d: date) -> str:
        if isinstance(d, datetime):
            d = DateTimeUtils.for_firestore(d).date()
        return f"{d.year:04d}-{d.month:02d}"

    @staticmethod
    def iso_week_dates(week_key: str) -> List[date]:
        """'YYYY-Www' -> the seven dates (Monday..Sunday) of that ISO week."""
        match = re.match(WEEK_KEY_PATTERN, week_key or '')
        if not match:
            raise ValueError(f"Invalid ISO week: {week_key}. Expected YYYY-Www")
        year, week = int(match.group(1)), int(match.group(2))
        try:
            monday = date.fromisocalendar(year, week, 1)
        except ValueError:
            raise ValueError(f"Invalid ISO week: {week_key}")
        return [monday + timedelta(days=i) for i in range(7)]

    @staticmethod
    def get_month_range(year: int, month: int) -> Tuple[date, date]:
        """First and last day of a month."""
        try:
            start_date = date(year, month, 1)
            end_date = start_date + relativedelta(months=1) - relativedelta(days=1)
            return start_date, end_date
        except Exception as e:
            logger.error(f"Month range calculation failed: {year}-{month} - {e}")
            raise ValueError(f"Invalid month: {year}-{month}")

    @staticmethod
    def parse_month_key(month_key: str) -> Tuple[date, date]:
        """'YYYY-MM' -> (first day, last day)."""
        match = re.match(MONTH_KEY_PATTERN, month_key or '')
        if not match:
            raise ValueError(f"Invalid month: {month_key}. Expected YYYY-MM")
        return DateTimeUtils.get_month_range(int(match.group(1)), int(match.group(2)))

    @staticmethod
    def previous_day_key(d: date) -> str:
        return (d - timedelta(days=1)).strftime(DATE_KEY_FORMAT)

    @staticmethod
    def previous_week_key(d: date) -> str:
        return DateTimeUtils.iso_week_key(d - timedelta(weeks=1))

    @staticmethod
    def previous_month_key(d: date) -> str:
        return DateTimeUtils.month_key(d - relativedelta(months=1))
