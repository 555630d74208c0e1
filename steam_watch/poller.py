"""
Poll cycle: snapshot the registry, probe each target in turn, and deliver
only what changed since the last delivery.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .models import StatusSnapshot, WatchRecord, status_digest
from .notifier import Notifier
from .store import ChangeCache, WatchRegistry

logger = logging.getLogger(__name__)

ProbeFn = Callable[[str], Tuple[Optional[StatusSnapshot], Optional[int]]]


@dataclass
class SweepStats:
    checked: int = 0
    unreachable: int = 0
    unchanged: int = 0
    delivered: int = 0
    evicted: int = 0
    errors: int = 0


class Poller:
    def __init__(
        self,
        registry: WatchRegistry,
        cache: ChangeCache,
        probe: ProbeFn,
        notifier: Notifier,
        target_delay: float = 3.0,
        sweep_delay: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.registry = registry
        self.cache = cache
        self.probe = probe
        self.notifier = notifier
        self.target_delay = target_delay
        self.sweep_delay = sweep_delay
        self.sleep = sleep

    def check(self, record: WatchRecord, stats: SweepStats) -> None:
        snapshot, status = self.probe(record.target)
        if status != 200 or snapshot is None:
            stats.unreachable += 1
            logger.warning("  Probe failed for %s (HTTP status=%s); skipping this sweep.", record.target, status)
            return

        key = record.fingerprint
        digest = status_digest(snapshot, record.callback)
        if self.cache.get(key) == digest:
            stats.unchanged += 1
            logger.debug("  Unchanged: %s", record.target)
            return

        # Written before delivery; the notifier removes it again on failure.
        self.cache.put(key, digest)
        logger.info("  CHANGE: %s playing=%s game=%r", record.target, snapshot.active, snapshot.label)
        if self.notifier.notify(record, snapshot):
            stats.delivered += 1
        else:
            stats.evicted += 1

    def run_sweep(self) -> SweepStats:
        records = self.registry.snapshot()
        stats = SweepStats()
        logger.info("===== Sweep: %d watches =====", len(records))

        # Every record is followed by the target delay, whether it was skipped,
        # unchanged, delivered or evicted.
        for idx, record in enumerate(records, start=1):
            stats.checked += 1
            logger.debug("(%d/%d) Checking %s", idx, len(records), record.target)
            try:
                self.check(record, stats)
            except Exception:
                stats.errors += 1
                logger.exception("  Unexpected error while checking %s", record.target)
            self.sleep(self.target_delay)

        logger.info(
            "Sweep done: checked=%d unreachable=%d unchanged=%d delivered=%d evicted=%d errors=%d",
            stats.checked, stats.unreachable, stats.unchanged, stats.delivered, stats.evicted, stats.errors,
        )
        return stats

    def run_forever(self) -> None:
        while True:
            self.run_sweep()
            self.sleep(self.sweep_delay)
