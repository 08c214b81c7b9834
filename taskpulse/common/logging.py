"""Logging setup shared by the API, the live pipeline and integrations."""

import logging
import sys

from taskpulse.config import settings

ROOT_LOGGER = "taskpulse"


def setup_logging(level: str | None = None) -> None:
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    root.handlers = [handler]
    root.propagate = False

    # Suppress noisy loggers
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
