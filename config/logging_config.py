"""
CYAI Threat Platform - Logging Setup
"""

from __future__ import annotations

import logging
from typing import Optional

from .app_config import LoggingConfig


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """Configure root logging for the server and CLI"""
    config = config or LoggingConfig()
    level = getattr(logging, str(config.level).upper(), logging.INFO)
    logging.basicConfig(level=level, format=config.format)
    # werkzeug request lines are noisy at INFO
    logging.getLogger("werkzeug").setLevel(max(level, logging.WARNING))
