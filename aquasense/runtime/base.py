# aquasense/runtime/base.py
import logging
from dataclasses import dataclass, asdict
from typing import Callable

from aquasense.services.user_directory import active_user_ids
from aquasense.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


@dataclass
class PassResult:
    """Outcome counters of one runtime pass."""
    name: str
    processed: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data['timestamp'] = DateTimeUtils.to_iso_string(DateTimeUtils.now())
        return data


def for_each_active_user(repo, name: str, fn: Callable[[str], bool]) -> PassResult:
    """
    Run `fn(uid)` for every active user.
    `fn` returns True when it wrote something and False when there was nothing to do.
    A failure for one user is logged and counted; it never aborts the pass.
    """
    result = PassResult(name=name)
    for uid in active_user_ids(repo):
        try:
            if fn(uid):
                result.processed += 1
            else:
                result.skipped += 1
        except Exception as e:
            logger.error(f"[{name}] failed for user {uid}: {e}", exc_info=True)
            result.errors += 1
    logger.info(f"[{name}] processed={result.processed} skipped={result.skipped} errors={result.errors}")
    return result
