import functools
import logging
import threading

import uvicorn

from . import __version__
from .app import create_app
from .config import WatchSettings, setup_logging
from .notifier import Notifier
from .poller import Poller
from .prober import build_session, probe_status
from .store import ChangeCache, WatchRegistry

logger = logging.getLogger(__name__)


def build_poller(settings: WatchSettings, registry: WatchRegistry, cache: ChangeCache) -> Poller:
    session = build_session(settings.user_agent)
    probe = functools.partial(probe_status, session, timeout=settings.http_timeout)
    notifier = Notifier(registry, cache, timeout=settings.http_timeout)
    return Poller(
        registry,
        cache,
        probe,
        notifier,
        target_delay=settings.target_delay,
        sweep_delay=settings.sweep_delay,
    )


def start_sweeper(poller: Poller) -> threading.Thread:
    # Daemon: the sweep loop lives exactly as long as the process.
    t = threading.Thread(target=poller.run_forever, name="steam-watch-sweeper", daemon=True)
    t.start()
    return t


def main() -> int:
    settings = WatchSettings()
    setup_logging(settings)

    logger.info("Steam Play Watch v%s", __version__)
    logger.info(
        "Pacing: %.1fs between targets, %.1fs between sweeps; HTTP timeout=%s",
        settings.target_delay, settings.sweep_delay, settings.http_timeout,
    )
    if settings.http_timeout is None:
        logger.info("No HTTP timeout configured; a hung endpoint will stall the sweep.")

    registry = WatchRegistry()
    cache = ChangeCache()
    start_sweeper(build_poller(settings, registry, cache))

    logger.info("Server is now running on %s:%d", settings.host, settings.port)
    uvicorn.run(create_app(registry), host=settings.host, port=settings.port, log_level="info")
    return 0
