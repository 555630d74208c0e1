"""
In-memory stores shared between the HTTP handlers and the sweep thread.

Both stores keep their dict private and take their lock only for the dict
access itself; no caller ever holds a lock across network I/O.
"""

import logging
import threading
from dataclasses import replace
from typing import Dict, List, Optional
from urllib.parse import urlsplit

from .models import WatchRecord, fingerprint

logger = logging.getLogger(__name__)


class InvalidInput(ValueError):
    """Registration fields missing or not absolute URLs."""


def is_absolute_url(value: str) -> bool:
    if not value or not isinstance(value, str):
        return False
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


class WatchRegistry:
    """Fingerprint -> WatchRecord, guarded by one lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, WatchRecord] = {}

    def register(self, target: str, callback: str, token: str) -> bool:
        """
        Insert a watch unless its (target, callback) fingerprint is already known.
        The existing record (and its token) wins on re-registration.
        Raises InvalidInput for empty or non-absolute URLs.
        """
        target = target.strip() if isinstance(target, str) else target
        callback = callback.strip() if isinstance(callback, str) else callback
        if not is_absolute_url(target):
            raise InvalidInput(f"target is not an absolute URL: {target!r}")
        if not is_absolute_url(callback):
            raise InvalidInput(f"callback is not an absolute URL: {callback!r}")

        key = fingerprint(target, callback)
        with self._lock:
            added = key not in self._records
            if added:
                self._records[key] = WatchRecord(target=target, token=token, callback=callback)

        if added:
            logger.info("Registered %s -> %s", target, callback)
        else:
            logger.debug("Already watching %s -> %s; keeping existing record.", target, callback)
        return True

    def snapshot(self) -> List[WatchRecord]:
        with self._lock:
            return list(self._records.values())

    def get(self, key: str) -> Optional[WatchRecord]:
        with self._lock:
            return self._records.get(key)

    def update_token(self, key: str, new_token: str) -> None:
        with self._lock:
            record = self._records.get(key)
            if record is not None:
                self._records[key] = replace(record, token=new_token)

    def evict(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records


class ChangeCache:
    """Fingerprint -> digest of the last status acted upon."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._digests: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._digests.get(key)

    def put(self, key: str, digest: str) -> None:
        with self._lock:
            self._digests[key] = digest

    def evict(self, key: str) -> None:
        with self._lock:
            self._digests.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._digests)
