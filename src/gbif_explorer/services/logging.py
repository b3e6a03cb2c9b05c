"""Logging setup for the CLI and flows."""

from __future__ import annotations

import logging

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: str | int = "INFO", fmt: str = DEFAULT_FORMAT) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    logging.basicConfig(level=level, format=fmt)
    logging.getLogger().setLevel(level)
    # urllib3 logs every retry at WARNING; keep it quiet unless debugging
    if logging.getLogger().level > logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.ERROR)
