"""
Webhook delivery with token rotation.

Every failure (transport error, unreadable body, negative or incomplete
acknowledgment) unregisters the watch; the remote side re-registers if it
wants to keep watching. There is no retry.
"""

import logging
from typing import Any, Dict, Optional

import requests

from .models import StatusSnapshot, WatchRecord
from .store import ChangeCache, WatchRegistry

logger = logging.getLogger(__name__)

SOURCE_ROUTE = "Steam"


def build_form(record: WatchRecord, snapshot: StatusSnapshot) -> Dict[str, str]:
    return {
        "page": record.target,
        "gameName": snapshot.label,
        "gameLink": snapshot.link,
        "gameIcon": snapshot.icon,
        "isPlaying": "true" if snapshot.active else "false",
    }


def build_headers(record: WatchRecord) -> Dict[str, str]:
    return {
        "API-Route": SOURCE_ROUTE,
        "API-Token": record.token,
    }


def parse_refresh_token(payload: Any) -> Optional[str]:
    """
    Expected: {"success": true, "data": {"refresh": "<new token>"}}
    Returns the new token, or None if the acknowledgment is not usable.
    """
    if not isinstance(payload, dict) or payload.get("success") is not True:
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    refresh = data.get("refresh")
    if not isinstance(refresh, str) or not refresh:
        return None
    return refresh


class Notifier:
    def __init__(self, registry: WatchRegistry, cache: ChangeCache, timeout: Optional[float] = None) -> None:
        self.registry = registry
        self.cache = cache
        self.timeout = timeout

    def evict(self, record: WatchRecord, reason: str) -> None:
        key = record.fingerprint
        self.cache.evict(key)
        self.registry.evict(key)
        logger.warning("  Evicted %s -> %s (%s)", record.target, record.callback, reason)

    def notify(self, record: WatchRecord, snapshot: StatusSnapshot) -> bool:
        """
        POST the new status to the record's callback.
        Returns True when the token was rotated, False when the watch was evicted.
        """
        try:
            resp = requests.post(
                record.callback,
                data=build_form(record, snapshot),
                headers=build_headers(record),
                timeout=self.timeout,
            )
        except (requests.RequestException, ValueError) as e:
            # ValueError covers requests that cannot be built, e.g. a token http.client cannot encode.
            self.evict(record, f"delivery error: {e!r}")
            return False

        try:
            payload = resp.json()
        except ValueError:
            self.evict(record, f"HTTP {resp.status_code}, body is not JSON: {resp.text[:200]!r}")
            return False

        refresh = parse_refresh_token(payload)
        if refresh is None:
            self.evict(record, f"HTTP {resp.status_code}, rejected or missing refresh token")
            return False

        self.registry.update_token(record.fingerprint, refresh)
        logger.info("  Delivered to %s (playing=%s); token rotated.", record.callback, snapshot.active)
        return True
