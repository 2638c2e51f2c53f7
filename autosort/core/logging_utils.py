"""Log helpers for the sort run and the service.

Everything goes through the "spotify_auto_sort" logger, whose handlers are set
up by logging_config. Messages are plain text built by the caller and must
never include access tokens, refresh tokens or raw Spotify response bodies.
"""

import logging

logger = logging.getLogger("spotify_auto_sort")

STEP = "→"
SUCCESS = "✅"
WARNING = "⚠️"
ERROR = "❌"


def _emit(level: int, message: str, marker: str = "") -> None:
    if marker:
        logger.log(level, "%s %s", marker, message)
    else:
        logger.log(level, "%s", message)


def log_section(title: str) -> None:
    """Header line that opens a scheduled run or a CLI pass."""
    logger.info("=== %s ===", title)


def log_info(message: str) -> None:
    _emit(logging.INFO, message)


def log_step(message: str) -> None:
    _emit(logging.INFO, message, STEP)


def log_success(message: str) -> None:
    _emit(logging.INFO, message, SUCCESS)


def log_warning(message: str) -> None:
    # Non-fatal: a skipped page, one failed playlist in a batch.
    _emit(logging.WARNING, message, WARNING)


def log_error(message: str) -> None:
    _emit(logging.ERROR, message, ERROR)


def log_progress(current: int, total: int, prefix: str = "") -> None:
    """
    Position inside a loop, e.g. log_progress(2, 5, prefix="Sorting playlists")
    logs "Sorting playlists 2/5". `current` is clamped to 0..total.
    """
    total = max(total, 0)
    current = max(0, min(current, total))
    _emit(logging.INFO, f"{current}/{total}", prefix)
