# aquasense/api/users/test_routes.py
from aquasense.services import collections as col
from aquasense.utils.datetime_utils import DateTimeUtils


def test_me_returns_the_callers_profile(client, make_user, auth_headers):
    make_user('u1')

    response = client.get('/api/users/me', headers=auth_headers('u1'))

    assert response.status_code == 200
    body = response.get_json()
    assert body['uid'] == 'u1'
    assert body['role'] == 'user'


def test_requests_without_a_token_are_rejected(client):
    response = client.get('/api/users/me')

    assert response.status_code == 401
    assert response.get_json()['error_code'] == 'AUTHORIZATION_REQUIRED'


def test_user_cannot_read_another_users_profile(client, make_user, auth_headers):
    make_user('u1')
    make_user('u2')

    response = client.get('/api/users/u2', headers=auth_headers('u1'))

    assert response.status_code == 403


def test_admin_can_read_any_profile(client, make_user, auth_headers):
    make_user('u2')

    response = client.get('/api/users/u2', headers=auth_headers('boss', role='admin'))

    assert response.status_code == 200
    assert response.get_json()['uid'] == 'u2'


def test_unknown_user_is_404(client, auth_headers):
    response = client.get('/api/users/ghost', headers=auth_headers('boss', role='superadmin'))

    assert response.status_code == 404
    assert response.get_json()['error_code'] == 'USER_NOT_FOUND'


def test_sensors_include_water_quality(client, repo, make_user, auth_headers):
    make_user('u1')
    repo.set(col.sensor_doc('u1', 'temperature'), {'value': 27.0, 'updatedAt': DateTimeUtils.now()})
    repo.set(col.sensor_doc('u1', 'ph'), {'value': 7.1})

    response = client.get('/api/users/u1/sensors', headers=auth_headers('u1'))

    assert response.status_code == 200
    body = response.get_json()
    assert body['temperature']['value'] == 27.0
    assert body['ph']['value'] == 7.1
    assert body['water_quality']['label'] == 'Good'
    assert body['mortality_today'] == 0


def test_sensors_without_readings_are_unknown(client, make_user, auth_headers):
    make_user('u1')

    body = client.get('/api/users/u1/sensors', headers=auth_headers('u1')).get_json()

    assert body['temperature']['value'] is None
    assert body['water_quality']['label'] == 'Unknown'


def test_sensor_stream_emits_the_current_readings(client, repo, make_user, auth_headers):
    make_user('u1')
    repo.set(col.sensor_doc('u1', 'temperature'), {'value': 26.5})

    response = client.get('/api/users/u1/sensors/stream', headers=auth_headers('u1'))

    assert response.status_code == 200
    assert response.mimetype == 'text/event-stream'
    first = next(iter(response.response))
    first = first.decode('utf-8') if isinstance(first, bytes) else first
    assert first.startswith('event: sensors')
    assert '26.5' in first
    response.close()
    assert not repo.subscriptions[0].active


def test_sensor_stream_is_owner_or_staff_only(client, make_user, auth_headers):
    make_user('u2')

    response = client.get('/api/users/u2/sensors/stream', headers=auth_headers('u1'))

    assert response.status_code == 403
