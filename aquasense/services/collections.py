# aquasense/services/collections.py
"""Firestore collection names and path builders.

Firestore has no DDL: collections appear on first write. Every per-user
path is built here so that all data stays namespaced under its owning uid:

    users/{uid}
    users/{uid}/schedules/{schedule_id}
    users/{uid}/feedingLogs/{log_id}
    users/{uid}/sensors/{temperature|ph}
    users/{uid}/hourlyRecords/{YYYY-MM-DD}/hours/{HH}
    users/{uid}/dailyReports/{YYYY-MM-DD}
    users/{uid}/weeklyReports/{YYYY-Www}
    users/{uid}/monthlyReports/{YYYY-MM}
    users/{uid}/mortalityLogs/{log_id}
"""

from typing import Optional, Tuple

COLLECTION_USERS = "users"
COLLECTION_REVOKED_TOKENS = "revoked_tokens"

SUB_SCHEDULES = "schedules"
SUB_FEEDING_LOGS = "feedingLogs"
SUB_SENSORS = "sensors"
SUB_HOURLY_RECORDS = "hourlyRecords"
SUB_DAILY_REPORTS = "dailyReports"
SUB_WEEKLY_REPORTS = "weeklyReports"
SUB_MONTHLY_REPORTS = "monthlyReports"
SUB_MORTALITY_LOGS = "mortalityLogs"

SENSOR_TEMPERATURE = "temperature"
SENSOR_PH = "ph"

# RTDB
FEEDER_COMMANDS_REF = "devices/{uid}/feeder/commands"


def user_doc(uid: str) -> str:
    return f"{COLLECTION_USERS}/{uid}"


def user_sub(uid: str, sub: str) -> str:
    return f"{COLLECTION_USERS}/{uid}/{sub}"


def schedules(uid: str) -> str:
    return user_sub(uid, SUB_SCHEDULES)


def schedule_doc(uid: str, schedule_id: str) -> str:
    return f"{schedules(uid)}/{schedule_id}"


def feeding_logs(uid: str) -> str:
    return user_sub(uid, SUB_FEEDING_LOGS)


def sensor_doc(uid: str, kind: str) -> str:
    return f"{user_sub(uid, SUB_SENSORS)}/{kind}"


def hours(uid: str, date_key: str) -> str:
    return f"{user_sub(uid, SUB_HOURLY_RECORDS)}/{date_key}/hours"


def hour_doc(uid: str, date_key: str, hour_key: str) -> str:
    return f"{hours(uid, date_key)}/{hour_key}"


def daily_reports(uid: str) -> str:
    return user_sub(uid, SUB_DAILY_REPORTS)


def daily_report_doc(uid: str, date_key: str) -> str:
    return f"{daily_reports(uid)}/{date_key}"


def weekly_reports(uid: str) -> str:
    return user_sub(uid, SUB_WEEKLY_REPORTS)


def weekly_report_doc(uid: str, week_key: str) -> str:
    return f"{weekly_reports(uid)}/{week_key}"


def monthly_reports(uid: str) -> str:
    return user_sub(uid, SUB_MONTHLY_REPORTS)


def monthly_report_doc(uid: str, month_key: str) -> str:
    return f"{monthly_reports(uid)}/{month_key}"


def mortality_logs(uid: str) -> str:
    return user_sub(uid, SUB_MORTALITY_LOGS)


def feeder_commands(uid: str) -> str:
    return FEEDER_COMMANDS_REF.format(uid=uid)


def subcollection_of(path: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a Firestore path into (owner_uid, subcollection).

    'users'                          -> (None, None)
    'users/abc'                      -> ('abc', None)
    'users/abc/schedules/s1'         -> ('abc', 'schedules')
    'revoked_tokens/jti'             -> (None, None)
    """
    parts = [p for p in path.strip('/').split('/') if p]
    if not parts or parts[0] != COLLECTION_USERS or len(parts) < 2:
        return None, None
    if len(parts) == 2:
        return parts[1], None
    return parts[1], parts[2]
