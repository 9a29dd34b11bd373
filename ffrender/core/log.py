"""Logging setup for command-line use."""

from __future__ import annotations

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO, format: Optional[str] = None) -> None:
    """Configure the root logger once; an existing configuration wins.

    Logs go to stderr because stdout may carry the rendered image.
    """
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=level,
        format=format or DEFAULT_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
