import logging
import sys


def configure_logging(level: int | str = logging.INFO) -> None:
    """
    Configure root logging for the application.

    - Logs go to stdout
    - Simple, readable format with time, level, and logger name
    - Calling it again only adjusts the level (uvicorn may already own handlers)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()

    # Avoid adding handlers multiple times
    if root.handlers:
        root.setLevel(level)
        return

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)

    root.addHandler(handler)
    root.setLevel(level)

    # urllib3 logs full request lines, which include playlist ids and query strings
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)
