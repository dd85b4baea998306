# aquasense/services/user_directory.py
"""Queries over the users collection.

Accounts created by the legacy web client carry `isActive` instead of
`is_active` until their owner signs in again. Filtering on the active flag
therefore runs one query per spelling; a document that already has
`is_active` is judged by that field alone.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from aquasense.services import collections as col

ACTIVE_FIELD = 'is_active'
LEGACY_ACTIVE_FIELD = 'isActive'


def list_user_docs(repo, filters: Sequence[Tuple[str, str, Any]] = (),
                   active: Optional[bool] = None) -> List[Dict[str, Any]]:
    filters = list(filters)
    if active is None:
        return repo.list(col.COLLECTION_USERS, filters=filters)

    docs = repo.list(col.COLLECTION_USERS, filters=filters + [(ACTIVE_FIELD, '==', active)])
    seen = {doc['id'] for doc in docs}
    for doc in repo.list(col.COLLECTION_USERS, filters=filters + [(LEGACY_ACTIVE_FIELD, '==', active)]):
        if doc['id'] not in seen and ACTIVE_FIELD not in doc:
            docs.append(doc)
    return docs


def active_user_ids(repo) -> List[str]:
    return [doc['id'] for doc in list_user_docs(repo, active=True)]
