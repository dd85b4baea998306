# aquasense/api/mortality/test_routes.py
import pytest

BASE = '/api/users/u1/mortality'


@pytest.fixture
def owner(make_user, auth_headers):
    make_user('u1')
    return auth_headers('u1')


def test_record_and_list_mortality(client, owner):
    first = client.post(BASE, json={'date': '2024-01-15', 'count': 2, 'cause': 'low oxygen'}, headers=owner)
    client.post(BASE, json={'date': '2024-01-16', 'count': 1}, headers=owner)

    assert first.status_code == 201
    assert first.get_json()['count'] == 2

    body = client.get(f"{BASE}?start_date=2024-01-15&end_date=2024-01-15", headers=owner).get_json()
    assert body['total'] == 2
    assert [log['date'] for log in body['logs']] == ['2024-01-15']

    everything = client.get(BASE, headers=owner).get_json()
    assert everything['total'] == 3


@pytest.mark.parametrize('payload', [
    {'date': '2024-01-15', 'count': -1},
    {'date': '2024-01-15', 'count': '3'},
    {'date': '2024-02-30', 'count': 1},
    {'date': '15/01/2024', 'count': 1},
])
def test_invalid_entries_are_rejected(client, owner, payload):
    response = client.post(BASE, json=payload, headers=owner)

    assert response.status_code == 400


def test_delete_mortality_entry(client, owner):
    log_id = client.post(BASE, json={'date': '2024-01-15', 'count': 2}, headers=owner).get_json()['log_id']

    assert client.delete(f"{BASE}/{log_id}", headers=owner).status_code == 204
    missing = client.delete(f"{BASE}/{log_id}", headers=owner)
    assert missing.status_code == 404
    assert missing.get_json()['error_code'] == 'MORTALITY_LOG_NOT_FOUND'


def test_recorded_mortality_reaches_the_daily_report(client, app, repo, owner):
    client.post(BASE, json={'date': '2024-01-15', 'count': 4}, headers=owner)

    app.services['runtime'].aggregator.generate_daily('u1', '2024-01-15')

    report = repo.get('users/u1/dailyReports/2024-01-15')
    assert report['totalMortality'] == 4
