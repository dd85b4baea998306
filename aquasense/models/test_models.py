# aquasense/models/test_models.py
from datetime import datetime, timezone

import pytest

from aquasense.core.access import Role
from aquasense.core.errors import InvalidStatusTransitionError
from aquasense.models.report import classify_water_quality
from aquasense.models.schedule import Schedule, ScheduleStatus, can_transition
from aquasense.models.sensor import HourlyRecord
from aquasense.models.user import User

NOW = datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc)


def _schedule(status=ScheduleStatus.PENDING):
    return Schedule(schedule_id='s1', uid='u1', scheduled_at=NOW, feed_amount_kg=1.5, status=status)


def test_status_only_moves_forward():
    assert can_transition(ScheduleStatus.PENDING, ScheduleStatus.IN_PROGRESS)
    assert can_transition(ScheduleStatus.IN_PROGRESS, ScheduleStatus.COMPLETED)
    for current in ScheduleStatus:
        assert not can_transition(current, ScheduleStatus.PENDING)
    assert not can_transition(ScheduleStatus.PENDING, ScheduleStatus.COMPLETED)


def test_advance_stamps_times():
    schedule = _schedule().advance(ScheduleStatus.IN_PROGRESS, NOW)
    assert schedule.started_at == NOW
    assert not schedule.is_editable
    schedule.advance(ScheduleStatus.COMPLETED, NOW)
    assert schedule.completed_at == NOW


def test_completed_never_regresses():
    schedule = _schedule(ScheduleStatus.COMPLETED)
    with pytest.raises(InvalidStatusTransitionError):
        schedule.advance(ScheduleStatus.PENDING, NOW)


def test_schedule_round_trip_through_dict():
    data = _schedule().to_dict()
    assert data['status'] == 'pending'
    restored = Schedule.from_dict({**data, 'id': 's1', 'created_at': NOW, 'unknown': 1})
    assert restored.status == ScheduleStatus.PENDING
    assert restored.feed_amount_kg == 1.5


@pytest.mark.parametrize('temp, ph, mortality, expected', [
    (None, 7.0, 0, ('Unknown', None)),
    (26.0, 7.2, 0, ('Good', 90)),
    (26.0, 7.2, 2, ('Fair', 70)),
    (35.0, 9.5, 2, ('Fair', 70)),
    (26.0, 7.2, 5, ('Fair', 70)),
    (35.0, 7.2, 5, ('Poor', 40)),
    (35.0, 7.2, 0, ('Fair', 70)),
])
def test_water_quality(temp, ph, mortality, expected):
    assert classify_water_quality(temp, ph, mortality) == expected


def test_hourly_record_fold_keeps_running_averages():
    record = HourlyRecord.from_dict('08', None)
    record.fold(26.0, 7.0).fold(28.0, None).add_feed(1.5)
    assert record.temperatureCount == 2
    assert record.temperatureAvg == pytest.approx(27.0)
    assert record.phCount == 1
    assert record.phAvg == pytest.approx(7.0)
    assert record.feedUsedKg == pytest.approx(1.5)

    again = HourlyRecord.from_dict('08', record.to_dict())
    assert again.temperatureSum == pytest.approx(54.0)
    assert again.has_samples


def test_user_from_legacy_camel_case():
    user = User.from_dict({
        'id': 'u1', 'email': 'a@b.c', 'firstName': 'Ana', 'lastName': 'Reyes',
        'isActive': False, 'role': 'superadmin', 'createdAt': 1705305600000,
    })
    assert user.uid == 'u1'
    assert user.display_name == 'Ana Reyes'
    assert user.role == Role.SUPERADMIN
    assert user.is_active is False
    assert user.join_date.year == 2024
