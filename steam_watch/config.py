"""
Settings and logging for the watch service.

Every value can be overridden from the environment:
  STEAM_WATCH_HOST=0.0.0.0        # listen address
  STEAM_WATCH_PORT=5555           # listen port
  STEAM_WATCH_TARGET_DELAY=3      # seconds between targets within one sweep
  STEAM_WATCH_SWEEP_DELAY=30      # seconds between sweeps
  STEAM_WATCH_HTTP_TIMEOUT=20     # request timeout in seconds (unset = no timeout)
  STEAM_WATCH_UA='Custom UA'
  STEAM_WATCH_LOG=/path/to/watch.log
  DEBUG_STEAM_WATCH=1             # log at DEBUG level
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5555
TARGET_DELAY_SECONDS = 3.0
SWEEP_DELAY_SECONDS = 30.0

USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) Steam-Play-Watch/1.0"

logger = logging.getLogger("steam_watch")


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    s = raw.strip()
    return s if s else default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Ignoring %s=%r (not an integer), using %s.", name, raw, default)
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        logger.warning("Ignoring %s=%r (not a number), using %s.", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring %s=%r (negative), using %s.", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class WatchSettings:
    host: str = field(default_factory=lambda: _env_str("STEAM_WATCH_HOST", DEFAULT_HOST))
    port: int = field(default_factory=lambda: _env_int("STEAM_WATCH_PORT", DEFAULT_PORT))

    # Pacing of the poll cycle.
    target_delay: float = field(default_factory=lambda: _env_float("STEAM_WATCH_TARGET_DELAY", TARGET_DELAY_SECONDS))
    sweep_delay: float = field(default_factory=lambda: _env_float("STEAM_WATCH_SWEEP_DELAY", SWEEP_DELAY_SECONDS))

    # None means requests waits forever; a hung endpoint then stalls the sweep.
    http_timeout: Optional[float] = field(default_factory=lambda: _env_float("STEAM_WATCH_HTTP_TIMEOUT", None))

    user_agent: str = field(default_factory=lambda: _env_str("STEAM_WATCH_UA", USER_AGENT))
    log_file: Optional[str] = field(default_factory=lambda: os.environ.get("STEAM_WATCH_LOG") or None)
    debug: bool = field(default_factory=lambda: bool(os.environ.get("DEBUG_STEAM_WATCH")))


def setup_logging(settings: WatchSettings) -> logging.Logger:
    """
    Console handler (concise) always; file handler only when a log file is configured.
    Safe to call more than once.
    """
    level = logging.DEBUG if settings.debug else logging.INFO
    logger.setLevel(level)

    if logger.handlers:
        return logger

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(ch)

    if settings.log_file:
        log_dir = os.path.dirname(settings.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(settings.log_file, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(fh)

    return logger
