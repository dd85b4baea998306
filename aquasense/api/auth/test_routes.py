# aquasense/api/auth/test_routes.py
from aquasense.services import collections as col


def _register_token(firebase_auth, token, uid, name='Jane Doe'):
    firebase_auth.tokens[token] = {
        'uid': uid, 'email': f"{uid}@example.com", 'name': name,
        'firebase': {'sign_in_provider': 'google.com'},
    }


def test_first_session_creates_a_user_document(client, repo, firebase_auth):
    _register_token(firebase_auth, 'id-token-1', 'u1')

    response = client.post('/api/auth/session', json={'id_token': 'id-token-1'})

    assert response.status_code == 200
    body = response.get_json()
    assert body['is_new_user'] is True
    assert body['role'] == 'user'
    assert body['access_token'] and body['refresh_token']
    stored = repo.get(col.user_doc('u1'))
    assert stored['role'] == 'user'
    assert stored['is_active'] is True
    assert stored['first_name'] == 'Jane'


def test_existing_user_keeps_their_role(client, firebase_auth, make_user):
    make_user('boss', role='admin')
    _register_token(firebase_auth, 'id-token-2', 'boss')

    body = client.post('/api/auth/session', json={'id_token': 'id-token-2'}).get_json()

    assert body['is_new_user'] is False
    assert body['role'] == 'admin'


def test_invalid_id_token_is_rejected(client):
    response = client.post('/api/auth/session', json={'id_token': 'forged'})

    assert response.status_code == 401
    assert response.get_json()['error_code'] == 'INVALID_ID_TOKEN'


def test_missing_id_token_is_a_validation_error(client):
    response = client.post('/api/auth/session', json={})

    assert response.status_code == 400
    assert 'id_token' in response.get_json()['details']


def test_deactivated_account_cannot_start_a_session(client, firebase_auth, make_user):
    make_user('u1', is_active=False)
    _register_token(firebase_auth, 'id-token-3', 'u1')

    response = client.post('/api/auth/session', json={'id_token': 'id-token-3'})

    assert response.status_code == 403
    assert response.get_json()['error_code'] == 'ACCOUNT_DISABLED'


def test_refresh_picks_up_a_role_change(client, repo, make_user, refresh_headers):
    make_user('u1', role='user')
    repo.update(col.user_doc('u1'), {'role': 'admin'})

    response = client.post('/api/auth/token/refresh', headers=refresh_headers('u1', role='user'))

    assert response.status_code == 200
    assert response.get_json()['role'] == 'admin'


def test_logout_revokes_both_tokens(client, firebase_auth, make_user):
    make_user('u1')
    _register_token(firebase_auth, 'id-token-4', 'u1')
    tokens = client.post('/api/auth/session', json={'id_token': 'id-token-4'}).get_json()

    response = client.post('/api/auth/logout', json={
        'access_token': tokens['access_token'], 'refresh_token': tokens['refresh_token']})
    assert response.status_code == 200

    me = client.get('/api/users/me', headers={'Authorization': f"Bearer {tokens['access_token']}"})
    assert me.status_code == 401
    assert me.get_json()['error_code'] == 'TOKEN_REVOKED'


def test_logout_with_garbage_tokens(client):
    response = client.post('/api/auth/logout', json={'access_token': 'x', 'refresh_token': 'y'})

    assert response.status_code == 422
    assert response.get_json()['error_code'] == 'INVALID_TOKEN'


def test_sign_in_migrates_camel_case_fields(client, repo, firebase_auth):
    repo.set(col.user_doc('legacy'), {
        'email': 'legacy@example.com', 'firstName': 'Old', 'lastName': 'Timer', 'isActive': True, 'role': 'user'})
    _register_token(firebase_auth, 'id-token-5', 'legacy')

    response = client.post('/api/auth/session', json={'id_token': 'id-token-5'})

    assert response.status_code == 200
    stored = repo.get(col.user_doc('legacy'))
    assert stored['is_active'] is True
    assert stored['first_name'] == 'Old' and stored['last_name'] == 'Timer'


def test_deactivated_legacy_account_cannot_start_a_session(client, repo, firebase_auth):
    repo.set(col.user_doc('legacy'), {'email': 'legacy@example.com', 'isActive': False, 'role': 'user'})
    _register_token(firebase_auth, 'id-token-6', 'legacy')

    response = client.post('/api/auth/session', json={'id_token': 'id-token-6'})

    assert response.status_code == 403
    assert repo.get(col.user_doc('legacy'))['is_active'] is False
