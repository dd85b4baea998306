# aquasense/api/cron/test_routes.py
from datetime import datetime, timezone

from aquasense.services import collections as col

SECRET = {'X-Cron-Secret': 'testing-cron-secret'}


def test_cron_requires_the_secret(client):
    response = client.post('/api/cron/run-feedings')

    assert response.status_code == 401
    assert response.get_json()['error_code'] == 'INVALID_CRON_SECRET'
    assert client.post('/api/cron/run-feedings', headers={'X-Cron-Secret': 'wrong'}).status_code == 401


def test_cron_secret_may_be_a_query_parameter(client):
    response = client.post('/api/cron/sample-hourly?secret=testing-cron-secret')

    assert response.status_code == 200


def test_run_feedings_completes_due_schedules(client, repo, feeder, make_user):
    make_user('u1')
    repo.set(col.schedule_doc('u1', 's1'), {
        'scheduled_at': datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc), 'feed_amount_kg': 1.0, 'status': 'pending'})

    body = client.post('/api/cron/run-feedings', headers=SECRET).get_json()

    assert body['success'] is True
    assert body['processed'] == 1
    assert repo.get(col.schedule_doc('u1', 's1'))['status'] == 'completed'
    assert len(feeder.commands) == 1


def test_generate_daily_for_a_given_date(client, repo, make_user):
    make_user('u1')
    repo.set(f"{col.mortality_logs('u1')}/m1", {'date': '2024-01-15', 'count': 3})

    body = client.post('/api/cron/generate-daily?date=2024-01-15', headers=SECRET).get_json()

    assert body['name'] == 'daily'
    assert body['processed'] == 1
    assert repo.get(col.daily_report_doc('u1', '2024-01-15'))['totalMortality'] == 3


def test_generate_daily_rejects_bad_dates(client):
    assert client.post('/api/cron/generate-daily?date=2024-1-5', headers=SECRET).status_code == 400
    assert client.post('/api/cron/generate-daily?date=2024-02-30', headers=SECRET).status_code == 400


def test_generate_weekly_and_monthly(client, repo, make_user):
    make_user('u1')
    repo.set(col.daily_report_doc('u1', '2024-01-15'), {
        'date': '2024-01-15', 'avgTemperature': 26.0, 'avgPh': 7.0, 'totalFeedKg': 1.0, 'totalMortality': 0})

    weekly = client.post('/api/cron/generate-weekly?week=2024-W03', headers=SECRET).get_json()
    monthly = client.post('/api/cron/generate-monthly?month=2024-01', headers=SECRET).get_json()

    assert weekly['processed'] == 1 and monthly['processed'] == 1
    assert repo.get(col.weekly_report_doc('u1', '2024-W03'))['coverageDays'] == 1
    assert client.post('/api/cron/generate-weekly?week=2024-W60', headers=SECRET).status_code == 400
    assert client.post('/api/cron/generate-monthly?month=2024-13', headers=SECRET).status_code == 400
