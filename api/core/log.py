"""
Logging setup for the API process.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    # basicConfig is a no-op once the root logger has handlers (uvicorn reload,
    # pytest), so the level is applied separately.
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
