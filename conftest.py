# conftest.py
"""
Shared pytest fixtures: an in-memory stand-in for FirestoreRepository, a fake
feeder and a fake firebase_admin.auth, wired into create_app('testing').
"""

import copy
import uuid
from datetime import datetime

import pytest
from flask_jwt_extended import create_access_token, create_refresh_token

from aquasense import create_app
from aquasense.core.errors import FeedActionError, NotFoundError
from aquasense.core.security import ROLE_CLAIM
from aquasense.services import collections as col
from aquasense.utils.datetime_utils import DateTimeUtils


def _normalize(value):
    if isinstance(value, datetime):
        return DateTimeUtils.for_firestore(value)
    return value


_OPERATORS = {
    '==': lambda a, b: a == b,
    '!=': lambda a, b: a != b,
    '<': lambda a, b: a < b,
    '<=': lambda a, b: a <= b,
    '>': lambda a, b: a > b,
    '>=': lambda a, b: a >= b,
    'in': lambda a, b: a in b,
}


class FakeSubscription:
    def __init__(self, repo, path, callback, filters):
        self.repo = repo
        self.path = path
        self.callback = callback
        self.filters = filters
        self.active = True
        self.polling = False

    def check(self):
        pass

    def notify(self):
        if self.active:
            self.callback(self.repo.list(self.path, self.filters))

    def unsubscribe(self):
        self.active = False


class FakeRepository:
    """Dict-backed implementation of the FirestoreRepository contract."""

    def __init__(self):
        self.docs = {}
        self.subscriptions = []

    @staticmethod
    def _parent(path):
        return path.rsplit('/', 1)[0]

    def _with_id(self, path, data):
        doc = copy.deepcopy(data)
        doc['id'] = path.rsplit('/', 1)[1]
        return doc

    def _notify(self, path):
        parent = self._parent(path)
        for sub in self.subscriptions:
            if sub.path == parent:
                sub.notify()

    # --- reads ---

    def get(self, path):
        data = self.docs.get(path)
        return self._with_id(path, data) if data is not None else None

    def list(self, path, filters=(), order_by=None, descending=False, limit=None):
        results = []
        for doc_path, data in self.docs.items():
            if self._parent(doc_path) != path:
                continue
            matched = True
            for field, op, value in filters:
                if field not in data:
                    matched = False
                    break
                if not _OPERATORS[op](_normalize(data[field]), _normalize(value)):
                    matched = False
                    break
            if matched:
                results.append(self._with_id(doc_path, data))
        if order_by:
            results = [r for r in results if r.get(order_by) is not None]
            results.sort(key=lambda r: _normalize(r[order_by]), reverse=descending)
        if limit:
            results = results[:limit]
        return results

    def listen(self, path, callback, filters=()):
        sub = FakeSubscription(self, path, callback, filters)
        self.subscriptions.append(sub)
        sub.notify()
        return sub

    # --- writes ---

    def create(self, path, data, doc_id=None):
        doc_id = doc_id or str(uuid.uuid4())
        doc_path = f"{path}/{doc_id}"
        payload = DateTimeUtils.for_firestore(copy.deepcopy(dict(data)))
        payload['created_at'] = DateTimeUtils.now()
        self.docs[doc_path] = payload
        self._notify(doc_path)
        return doc_id

    def set(self, path, data, merge=False):
        payload = DateTimeUtils.for_firestore(copy.deepcopy(dict(data)))
        if merge and path in self.docs:
            self.docs[path].update(payload)
        else:
            self.docs[path] = payload
        self._notify(path)

    def update(self, path, data):
        if path not in self.docs:
            raise NotFoundError(f"Document not found: '{path}'")
        self.docs[path].update(DateTimeUtils.for_firestore(copy.deepcopy(dict(data))))
        self.docs[path]['updated_at'] = DateTimeUtils.now()
        self._notify(path)

    def delete(self, path):
        self.docs.pop(path, None)
        self._notify(path)

    def transact(self, path, fn):
        current = copy.deepcopy(self.docs.get(path))
        updated = fn(current)
        if updated is not None:
            payload = DateTimeUtils.for_firestore(copy.deepcopy(dict(updated)))
            payload['updated_at'] = DateTimeUtils.now()
            self.docs[path] = {**self.docs.get(path, {}), **payload}
            self._notify(path)
        return updated

    def transact_delete(self, path, fn):
        if not fn(copy.deepcopy(self.docs.get(path))):
            return False
        self.delete(path)
        return True

    @staticmethod
    def server_timestamp():
        return DateTimeUtils.now()


class FakeFeeder:
    def __init__(self):
        self.commands = []
        self.fail = False

    def feed(self, uid, schedule_id, amount_kg, notes=None):
        if self.fail:
            raise FeedActionError(f"Could not reach the feeder for schedule {schedule_id}")
        command = {'uid': uid, 'scheduleId': schedule_id, 'amountKg': amount_kg, 'notes': notes}
        self.commands.append(command)
        return command


class FakeFirebaseAuth:
    """The subset of firebase_admin.auth the services call."""

    def __init__(self):
        self.tokens = {}
        self.deleted = []

    def verify_id_token(self, id_token):
        if id_token not in self.tokens:
            raise ValueError("Invalid ID token")
        return self.tokens[id_token]

    def delete_user(self, uid):
        self.deleted.append(uid)


@pytest.fixture
def repo():
    return FakeRepository()


@pytest.fixture
def feeder():
    return FakeFeeder()


@pytest.fixture
def firebase_auth():
    return FakeFirebaseAuth()


@pytest.fixture
def app(repo, feeder, firebase_auth):
    return create_app('testing', services={'repo': repo, 'feeder': feeder, 'firebase_auth': firebase_auth})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(repo):
    def _make_user(uid, role='user', is_active=True, **extra):
        data = {
            'uid': uid,
            'email': f"{uid}@example.com",
            'first_name': uid.capitalize(),
            'last_name': 'Tester',
            'role': role,
            'is_active': is_active,
            'join_date': DateTimeUtils.now(),
        }
        data.update(extra)
        repo.set(col.user_doc(uid), data)
        return data
    return _make_user


@pytest.fixture
def auth_headers(app, repo, make_user):
    """Bearer headers for `uid`; the account is created with `role` unless the test already stored one."""
    def _auth_headers(uid, role='user'):
        if repo.get(col.user_doc(uid)) is None:
            make_user(uid, role=role)
        with app.app_context():
            token = create_access_token(identity=uid, additional_claims={ROLE_CLAIM: role})
        return {'Authorization': f"Bearer {token}"}
    return _auth_headers


@pytest.fixture
def refresh_headers(app, repo, make_user):
    def _refresh_headers(uid, role='user'):
        if repo.get(col.user_doc(uid)) is None:
            make_user(uid, role=role)
        with app.app_context():
            token = create_refresh_token(identity=uid, additional_claims={ROLE_CLAIM: role})
        return {'Authorization': f"Bearer {token}"}
    return _refresh_headers
