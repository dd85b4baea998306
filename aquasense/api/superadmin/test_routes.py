# aquasense/api/superadmin/test_routes.py
import pytest

from aquasense.services import collections as col


@pytest.fixture
def root(make_user, auth_headers):
    make_user('root', role='superadmin')
    return auth_headers('root', role='superadmin')


def test_admins_cannot_use_superadmin_endpoints(client, make_user, auth_headers):
    make_user('boss', role='admin')

    response = client.get('/api/superadmin/users', headers=auth_headers('boss', role='admin'))

    assert response.status_code == 403


def test_list_accounts_by_role(client, make_user, root):
    make_user('u1')
    make_user('boss', role='admin')

    body = client.get('/api/superadmin/users?role=admin', headers=root).get_json()

    assert [u['uid'] for u in body['users']] == ['boss']


def test_promote_user_to_admin(client, repo, make_user, root):
    make_user('u1')

    response = client.patch('/api/superadmin/users/u1/role', json={'role': 'admin'}, headers=root)

    assert response.status_code == 200
    assert response.get_json()['role'] == 'admin'
    assert repo.get(col.user_doc('u1'))['role'] == 'admin'


def test_superadmin_cannot_change_their_own_role(client, repo, root):
    response = client.patch('/api/superadmin/users/root/role', json={'role': 'user'}, headers=root)

    assert response.status_code == 403
    assert repo.get(col.user_doc('root'))['role'] == 'superadmin'


def test_unknown_role_is_rejected(client, make_user, root):
    make_user('u1')

    response = client.patch('/api/superadmin/users/u1/role', json={'role': 'owner'}, headers=root)

    assert response.status_code == 400


def test_superadmin_can_deactivate_an_admin(client, repo, make_user, root):
    make_user('boss', role='admin')

    response = client.patch('/api/superadmin/users/boss/status', json={'is_active': False}, headers=root)

    assert response.status_code == 200
    assert repo.get(col.user_doc('boss'))['is_active'] is False


def test_delete_account(client, repo, firebase_auth, make_user, root):
    make_user('u1')

    response = client.delete('/api/superadmin/users/u1', headers=root)

    assert response.status_code == 204
    assert firebase_auth.deleted == ['u1']
    assert repo.get(col.user_doc('u1')) is None


def test_superadmin_cannot_delete_themselves(client, root):
    assert client.delete('/api/superadmin/users/root', headers=root).status_code == 403


def test_stats(client, make_user, root):
    make_user('u1')
    make_user('u2', is_active=False)
    make_user('boss', role='admin')

    body = client.get('/api/superadmin/stats', headers=root).get_json()

    assert body['total'] == 4
    assert body['inactive'] == 1
    assert body['by_role'] == {'user': 2, 'admin': 1, 'superadmin': 1}
