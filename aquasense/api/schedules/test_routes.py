# aquasense/api/schedules/test_routes.py
from datetime import datetime, timezone

import pytest

from aquasense.services import collections as col

BASE = '/api/users/u1/schedules'


@pytest.fixture
def owner(make_user, auth_headers):
    make_user('u1')
    return auth_headers('u1')


def _create(client, headers, **overrides):
    payload = {'scheduled_at': '2024-01-15T08:00:00Z', 'feed_amount_kg': 1.5, 'notes': 'morning'}
    payload.update(overrides)
    return client.post(BASE, json=payload, headers=headers)


def test_create_schedule_is_pending_and_editable(client, repo, owner):
    response = _create(client, owner)

    assert response.status_code == 201
    body = response.get_json()
    assert body['status'] == 'pending'
    assert body['editable'] is True
    stored = repo.get(col.schedule_doc('u1', body['schedule_id']))
    assert stored['feed_amount_kg'] == 1.5
    assert stored['scheduled_at'] == datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc)


def test_create_rejects_non_positive_amounts(client, owner):
    response = _create(client, owner, feed_amount_kg=0)

    assert response.status_code == 400
    assert 'feed_amount_kg' in response.get_json()['details']


def test_list_schedules_filters_by_status(client, repo, owner):
    _create(client, owner)
    repo.set(col.schedule_doc('u1', 'done'), {
        'scheduled_at': datetime(2024, 1, 14, 8, 0, tzinfo=timezone.utc), 'feed_amount_kg': 1.0, 'status': 'completed'})

    body = client.get(f"{BASE}?status=completed", headers=owner).get_json()

    assert body['count'] == 1
    assert body['schedules'][0]['schedule_id'] == 'done'
    assert body['schedules'][0]['editable'] is False


def test_patch_pending_schedule(client, owner):
    schedule_id = _create(client, owner).get_json()['schedule_id']

    response = client.patch(f"{BASE}/{schedule_id}", json={'feed_amount_kg': 2.0}, headers=owner)

    assert response.status_code == 200
    assert response.get_json()['feed_amount_kg'] == 2.0


def test_status_is_not_client_writable(client, owner):
    schedule_id = _create(client, owner).get_json()['schedule_id']

    response = client.patch(f"{BASE}/{schedule_id}", json={'status': 'completed'}, headers=owner)

    assert response.status_code == 400
    assert 'status' in response.get_json()['details']


@pytest.mark.parametrize('status', ['in-progress', 'completed'])
def test_claimed_schedule_is_locked(client, repo, owner, status):
    repo.set(col.schedule_doc('u1', 's1'), {
        'scheduled_at': datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc), 'feed_amount_kg': 1.0, 'status': status})

    patched = client.patch(f"{BASE}/s1", json={'feed_amount_kg': 9.0}, headers=owner)
    deleted = client.delete(f"{BASE}/s1", headers=owner)

    assert patched.status_code == 409
    assert patched.get_json()['error_code'] == 'SCHEDULE_LOCKED'
    assert deleted.status_code == 409
    assert repo.get(col.schedule_doc('u1', 's1'))['feed_amount_kg'] == 1.0


def test_delete_pending_schedule(client, repo, owner):
    schedule_id = _create(client, owner).get_json()['schedule_id']

    response = client.delete(f"{BASE}/{schedule_id}", headers=owner)

    assert response.status_code == 204
    assert repo.get(col.schedule_doc('u1', schedule_id)) is None


def test_missing_schedule_is_404(client, owner):
    response = client.get(f"{BASE}/nope", headers=owner)

    assert response.status_code == 404
    assert response.get_json()['error_code'] == 'SCHEDULE_NOT_FOUND'


def test_other_users_cannot_touch_schedules(client, make_user, auth_headers, owner):
    make_user('u2')

    response = _create(client, auth_headers('u2'))

    assert response.status_code == 403


def test_staff_can_schedule_for_a_user(client, owner, auth_headers):
    response = _create(client, auth_headers('boss', role='admin'))

    assert response.status_code == 201
