# aquasense/services/firestore_service.py
import logging
import threading
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from aquasense.core.errors import firestore_errors, TransientNetworkError
from aquasense.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

# (field, operator, value), e.g. ('status', '==', 'pending')
Filter = Tuple[str, str, Any]


class Subscription:
    """
    A live query subscription.

    Starts a Firestore snapshot listener; when the listener cannot be started
    or stops being active, it falls back to polling every `poll_interval`
    seconds and keeps feeding the same callback.
    """

    def __init__(self, start_watch: Callable, poll: Callable[[], List[Dict[str, Any]]],
                 callback: Callable[[List[Dict[str, Any]]], None], poll_interval: float):
        self._start_watch = start_watch
        self._poll = poll
        self._callback = callback
        self._poll_interval = poll_interval
        self._watch = None
        self._stop = threading.Event()
        self._poll_thread: Optional[threading.Thread] = None

    @property
    def polling(self) -> bool:
        return self._poll_thread is not None

    def start(self) -> 'Subscription':
        try:
            self._watch = self._start_watch(self._callback)
        except Exception as e:
            logger.warning(f"Snapshot listener unavailable, falling back to polling: {e}")
            self._start_polling()
        return self

    def check(self):
        """Switch to polling if the snapshot listener has died."""
        if self._watch is not None and not getattr(self._watch, 'is_active', True):
            logger.warning("Snapshot listener is no longer active, falling back to polling")
            self._watch = None
            self._start_polling()

    def _start_polling(self):
        if self._poll_thread is not None:
            return
        self._poll_thread = threading.Thread(target=self._poll_loop, daemon=True)
        self._poll_thread.start()

    def _poll_loop(self):
        while not self._stop.is_set():
            try:
                self._callback(self._poll())
            except TransientNetworkError as e:
                logger.warning(f"Polling refresh failed, retrying in {self._poll_interval}s: {e}")
            except Exception as e:
                logger.error(f"Polling refresh failed: {e}", exc_info=True)
            self._stop.wait(self._poll_interval)

    def unsubscribe(self):
        self._stop.set()
        if self._watch is not None:
            try:
                self._watch.unsubscribe()
            except Exception as e:
                logger.warning(f"Failed to close snapshot listener: {e}")
            self._watch = None


class FirestoreRepository:
    """
    Thin wrapper over the Firestore client.

    Paths are slash separated ('users/{uid}/schedules'). Reads return plain
    dicts carrying the document id under 'id'. Every call surfaces errors as
    PermissionDeniedError / NotFoundError / TransientNetworkError.
    """

    def __init__(self, db=None, poll_interval: float = 30):
        self.db = db or firestore.client()
        self.poll_interval = poll_interval

    # --- helpers ---

    @staticmethod
    def _snapshot_to_dict(snapshot) -> Dict[str, Any]:
        data = DateTimeUtils.from_firestore(snapshot.to_dict() or {})
        data['id'] = snapshot.id
        return data

    def _build_query(self, path: str, filters: Iterable[Filter] = (), order_by: Optional[str] = None,
                     descending: bool = False, limit: Optional[int] = None):
        query = self.db.collection(path)
        for field, op, value in filters:
            query = query.where(filter=FieldFilter(field, op, DateTimeUtils.for_firestore(value)))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if limit:
            query = query.limit(limit)
        return query

    # --- reads ---

    @firestore_errors
    def get(self, path: str) -> Optional[Dict[str, Any]]:
        snapshot = self.db.document(path).get()
        if not snapshot.exists:
            return None
        return self._snapshot_to_dict(snapshot)

    @firestore_errors
    def list(self, path: str, filters: Sequence[Filter] = (), order_by: Optional[str] = None,
             descending: bool = False, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        query = self._build_query(path, filters, order_by, descending, limit)
        return [self._snapshot_to_dict(doc) for doc in query.stream()]

    def listen(self, path: str, callback: Callable[[List[Dict[str, Any]]], None],
               filters: Sequence[Filter] = ()) -> Subscription:
        """Subscribe to a collection; the callback receives the full document list on each change."""
        query = self._build_query(path, filters)

        def start_watch(cb):
            def on_snapshot(snapshots, changes, read_time):
                cb([self._snapshot_to_dict(s) for s in snapshots])
            return query.on_snapshot(on_snapshot)

        return Subscription(
            start_watch=start_watch,
            poll=lambda: self.list(path, filters),
            callback=callback,
            poll_interval=self.poll_interval
        ).start()

    # --- writes ---

    @firestore_errors
    def create(self, path: str, data: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        """Add a document to the collection at `path`; stamps 'created_at' server side."""
        doc_id = doc_id or str(uuid.uuid4())
        payload = DateTimeUtils.for_firestore(dict(data))
        payload['created_at'] = firestore.SERVER_TIMESTAMP
        self.db.collection(path).document(doc_id).set(payload)
        logger.info(f"Firestore create ok ({path}/{doc_id})")
        return doc_id

    @firestore_errors
    def set(self, path: str, data: Dict[str, Any], merge: bool = False):
        self.db.document(path).set(DateTimeUtils.for_firestore(dict(data)), merge=merge)

    @firestore_errors
    def update(self, path: str, data: Dict[str, Any]):
        """Partial update; stamps 'updated_at'. Raises NotFoundError when the document is missing."""
        payload = DateTimeUtils.for_firestore(dict(data))
        payload['updated_at'] = firestore.SERVER_TIMESTAMP
        self.db.document(path).update(payload)

    @firestore_errors
    def delete(self, path: str):
        self.db.document(path).delete()

    @firestore_errors
    def transact(self, path: str, fn: Callable[[Optional[Dict[str, Any]]], Optional[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
        """
        Read-modify-write a single document inside a Firestore transaction.

        `fn` receives the current document (or None) and returns the fields to
        store, or None to leave it untouched. The write is merged, so fields
        `fn` does not return are kept. The transaction is retried by the
        client on contention, so `fn` must be free of side effects.
        """
        doc_ref = self.db.document(path)
        transaction = self.db.transaction()

        @firestore.transactional
        def _apply(transaction):
            current = self._read_in_transaction(doc_ref, transaction)
            updated = fn(current)
            if updated is not None:
                payload = DateTimeUtils.for_firestore(updated)
                payload['updated_at'] = firestore.SERVER_TIMESTAMP
                transaction.set(doc_ref, payload, merge=True)
            return updated

        return _apply(transaction)

    @firestore_errors
    def transact_delete(self, path: str, fn: Callable[[Optional[Dict[str, Any]]], bool]) -> bool:
        """
        Delete a document inside a transaction when `fn(current)` approves it.
        `fn` may raise to refuse; the error propagates and nothing is deleted.
        """
        doc_ref = self.db.document(path)
        transaction = self.db.transaction()

        @firestore.transactional
        def _apply(transaction):
            if not fn(self._read_in_transaction(doc_ref, transaction)):
                return False
            transaction.delete(doc_ref)
            return True

        return _apply(transaction)

    def _read_in_transaction(self, doc_ref, transaction) -> Optional[Dict[str, Any]]:
        snapshot = doc_ref.get(transaction=transaction)
        if not snapshot.exists:
            return None
        current = self._snapshot_to_dict(snapshot)
        current.pop('id', None)
        return current

    @staticmethod
    def server_timestamp():
        return firestore.SERVER_TIMESTAMP
