# aquasense/runtime/guard.py
import logging
from typing import Any, Callable, Dict, Optional

from aquasense.core.access import can_runtime_read_path, can_runtime_write_path
from aquasense.core.errors import PermissionDeniedError

logger = logging.getLogger(__name__)


class RuntimeRepository:
    """
    Repository wrapper used by the background runtime.

    The runtime has no user session, so it may only write the runtime-critical
    subcollections. Anything else is refused here, before the call reaches
    Firestore.
    """

    def __init__(self, repo):
        self._repo = repo

    def _check_read(self, path: str):
        if not can_runtime_read_path(path):
            logger.error(f"Runtime read refused: {path}")
            raise PermissionDeniedError(f"Runtime may not read '{path}'")

    def _check_write(self, path: str):
        if not can_runtime_write_path(path):
            logger.error(f"Runtime write refused: {path}")
            raise PermissionDeniedError(f"Runtime may not write '{path}'")

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        self._check_read(path)
        return self._repo.get(path)

    def list(self, path: str, *args, **kwargs):
        self._check_read(path)
        return self._repo.list(path, *args, **kwargs)

    def create(self, path: str, data: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        self._check_write(path)
        return self._repo.create(path, data, doc_id=doc_id)

    def set(self, path: str, data: Dict[str, Any], merge: bool = False):
        self._check_write(path)
        return self._repo.set(path, data, merge=merge)

    def update(self, path: str, data: Dict[str, Any]):
        self._check_write(path)
        return self._repo.update(path, data)

    def delete(self, path: str):
        self._check_write(path)
        return self._repo.delete(path)

    def transact(self, path: str, fn: Callable):
        self._check_write(path)
        return self._repo.transact(path, fn)

    def transact_delete(self, path: str, fn: Callable) -> bool:
        self._check_write(path)
        return self._repo.transact_delete(path, fn)

    def server_timestamp(self):
        return self._repo.server_timestamp()
