# aquasense/core/test_security.py
from aquasense.services import collections as col

SCHEDULE = {'scheduled_at': '2024-01-15T08:00:00Z', 'feed_amount_kg': 1.5}


def test_demoted_admin_loses_cross_user_access_with_an_old_token(client, make_user, auth_headers):
    make_user('alice')
    make_user('boss', role='admin')
    boss = auth_headers('boss', role='admin')
    assert client.get('/api/users/alice/schedules', headers=boss).status_code == 200

    demote = client.patch('/api/superadmin/users/boss/role', json={'role': 'user'},
                          headers=auth_headers('root', role='superadmin'))
    assert demote.status_code == 200

    response = client.get('/api/users/alice/schedules', headers=boss)

    assert response.status_code == 403
    assert response.get_json()['error_code'] == 'FORBIDDEN'


def test_demoted_admin_is_locked_out_of_the_admin_dashboard(client, repo, make_user, auth_headers):
    make_user('boss', role='admin')
    boss = auth_headers('boss', role='admin')
    repo.update(col.user_doc('boss'), {'role': 'user'})

    assert client.get('/api/admin/users', headers=boss).status_code == 403


def test_deactivated_user_cannot_write_with_an_old_token(client, repo, make_user, auth_headers):
    make_user('alice')
    alice = auth_headers('alice')
    assert client.post('/api/users/alice/schedules', json=SCHEDULE, headers=alice).status_code == 201

    deactivate = client.patch('/api/admin/users/alice/status', json={'is_active': False},
                              headers=auth_headers('boss', role='admin'))
    assert deactivate.status_code == 200

    response = client.post('/api/users/alice/schedules', json=SCHEDULE, headers=alice)

    assert response.status_code == 403
    assert response.get_json()['error_code'] == 'ACCOUNT_DISABLED'
    assert len(repo.list(col.user_sub('alice', col.SUB_SCHEDULES))) == 1


def test_deactivated_admin_cannot_open_the_admin_dashboard(client, repo, make_user, auth_headers):
    make_user('boss', role='admin')
    boss = auth_headers('boss', role='admin')
    repo.update(col.user_doc('boss'), {'is_active': False})

    response = client.get('/api/admin/users', headers=boss)

    assert response.status_code == 403
    assert response.get_json()['error_code'] == 'ACCOUNT_DISABLED'


def test_token_of_a_deleted_account_is_rejected(client, repo, make_user, auth_headers):
    make_user('alice')
    alice = auth_headers('alice')
    repo.delete(col.user_doc('alice'))

    response = client.get('/api/users/me', headers=alice)

    assert response.status_code == 401
    assert response.get_json()['error_code'] == 'USER_NOT_FOUND'


def test_role_claim_in_the_token_is_not_trusted(client, make_user, auth_headers):
    make_user('alice')
    make_user('mallory')
    forged = auth_headers('mallory', role='superadmin')

    assert client.get('/api/users/alice/schedules', headers=forged).status_code == 403
