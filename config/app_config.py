"""
CYAI Threat Platform - Application Configuration

Centralized configuration management with environment variable support.
Values come from the environment (optionally a .env file) and may be
overridden by a YAML file pointed to by CYAI_CONFIG_FILE.
"""

from __future__ import annotations

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field, fields, is_dataclass, asdict

from dotenv import load_dotenv

SENSITIVE_KEYS = frozenset({"api_key", "password", "token", "secret"})
DEFAULT_DETECTION_SERVICE_URL = "http://127.0.0.1:5000"


# ==================== Configuration Paths ====================

def get_project_root() -> Path:
    """Get project root directory"""
    return Path(__file__).parent.parent


def get_data_dir() -> Path:
    """Get data directory"""
    data_dir = Path(os.environ.get("CYAI_DATA_DIR", get_project_root() / "data"))
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


# ==================== Environment Variable Helpers ====================

def get_env(key: str, default: Any = None, required: bool = False) -> Any:
    """Get environment variable with optional default"""
    value = os.environ.get(key, default)
    if required and value is None:
        raise ValueError(f"Required environment variable {key} is not set")
    return value


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable"""
    value = os.environ.get(key, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    elif value in ("false", "0", "no", "off"):
        return False
    return default


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable"""
    try:
        return int(os.environ.get(key, default))
    except (ValueError, TypeError):
        return default


def get_env_float(key: str, default: float = 0.0) -> float:
    """Get float environment variable"""
    try:
        return float(os.environ.get(key, default))
    except (ValueError, TypeError):
        return default


def get_env_list(key: str, default: List[str] = None, separator: str = ",") -> List[str]:
    """Get list environment variable"""
    value = os.environ.get(key)
    if value:
        return [item.strip() for item in value.split(separator)]
    return default or []


# ==================== Configuration Classes ====================

@dataclass
class DatabaseConfig:
    """Database configuration"""
    url: str = field(default_factory=lambda: get_env(
        "DATABASE_URL",
        f"sqlite:///{get_data_dir() / 'cyai_threat_platform.db'}"
    ))
    echo: bool = field(default_factory=lambda: get_env_bool("DB_ECHO", False))


@dataclass
class StorageConfig:
    """Model file storage"""
    model_dir: str = field(default_factory=lambda: get_env(
        "MODEL_STORAGE_DIR", str(get_data_dir() / "ai-models")
    ))


@dataclass
class DetectionServiceConfig:
    """Remote detection function endpoint"""
    base_url: str = field(default_factory=lambda: get_env("DETECTION_SERVICE_URL", DEFAULT_DETECTION_SERVICE_URL))
    api_key: Optional[str] = field(default_factory=lambda: get_env("DETECTION_SERVICE_KEY"))
    timeout_seconds: float = field(default_factory=lambda: get_env_float("DETECTION_SERVICE_TIMEOUT", 30.0))


@dataclass
class PipelineConfig:
    """Timing of the staged analysis pipeline"""
    stage_delay: float = field(default_factory=lambda: get_env_float("PIPELINE_STAGE_DELAY", 0.6))
    stage_jitter: float = field(default_factory=lambda: get_env_float("PIPELINE_STAGE_JITTER", 0.3))
    scan_tick_interval: float = field(default_factory=lambda: get_env_float("SCAN_TICK_INTERVAL", 0.1))


@dataclass
class ReportConfig:
    """Reporting configuration"""
    output_dir: str = field(default_factory=lambda: get_env(
        "REPORT_OUTPUT_DIR", str(get_data_dir() / "reports")
    ))
    detail_limit: int = field(default_factory=lambda: get_env_int("REPORT_DETAIL_LIMIT", 20))


@dataclass
class ServerConfig:
    """Server configuration"""
    host: str = field(default_factory=lambda: get_env("SERVER_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: get_env_int("SERVER_PORT", 5000))
    debug: bool = field(default_factory=lambda: get_env_bool("SERVER_DEBUG", False))
    cors_origins: List[str] = field(default_factory=lambda: get_env_list("CORS_ORIGINS", ["*"]))


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = field(default_factory=lambda: get_env("LOG_LEVEL", "INFO"))
    format: str = field(default_factory=lambda: get_env(
        "LOG_FORMAT", "%(asctime)s %(levelname)s %(name)s: %(message)s"
    ))


@dataclass
class AppConfig:
    """Main application configuration"""
    name: str = field(default_factory=lambda: get_env("APP_NAME", "CYAI Threat Detection System"))
    version: str = field(default_factory=lambda: get_env("APP_VERSION", "1.0.0"))
    environment: str = field(default_factory=lambda: get_env("APP_ENV", "development"))

    # Sub-configurations
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    detection_service: DetectionServiceConfig = field(default_factory=DetectionServiceConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (hiding sensitive values)"""

        def hide_sensitive(obj):
            if isinstance(obj, dict):
                return {
                    k: "***" if any(s in k.lower() for s in SENSITIVE_KEYS) and v else hide_sensitive(v)
                    for k, v in obj.items()
                }
            elif isinstance(obj, list):
                return [hide_sensitive(item) for item in obj]
            return obj

        return hide_sensitive(asdict(self))


# ==================== YAML Configuration Loading ====================

def load_yaml_config(path: Path) -> Dict[str, Any]:
    """Load configuration from YAML file"""
    if path.exists():
        with open(path, 'r') as f:
            return yaml.safe_load(f) or {}
    return {}


def apply_overrides(target: Any, overrides: Dict[str, Any]) -> Any:
    """Apply nested YAML overrides onto a config dataclass in place"""
    known = {f.name for f in fields(target)}
    for key, value in (overrides or {}).items():
        if key not in known:
            continue
        current = getattr(target, key)
        if is_dataclass(current) and isinstance(value, dict):
            apply_overrides(current, value)
        else:
            setattr(target, key, value)
    return target


def build_config(config_file: Optional[str] = None) -> AppConfig:
    """Build configuration from environment, .env and optional YAML file"""
    load_dotenv()
    config = AppConfig()
    config_file = config_file or get_env("CYAI_CONFIG_FILE")
    if config_file:
        apply_overrides(config, load_yaml_config(Path(config_file)))
    return config


# ==================== Global Configuration Instance ====================

_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get or create global configuration instance"""
    global _config
    if _config is None:
        _config = build_config()
    return _config


def reload_config(config_file: Optional[str] = None) -> AppConfig:
    """Reload configuration from environment"""
    global _config
    _config = build_config(config_file)
    return _config
