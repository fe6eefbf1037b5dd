"""CYAI Threat Platform Configuration"""

from .app_config import AppConfig, get_config, reload_config, build_config
from .logging_config import configure_logging

__all__ = ['AppConfig', 'get_config', 'reload_config', 'build_config', 'configure_logging']
