"""
Pytest configuration and fixtures
"""
import random

import pytest

from config.app_config import AppConfig
from core.detection_client import DetectionServiceClient
from database.db_manager import DatabaseManager

# Nothing listens on the discard port; calls fail fast and trigger fallbacks
OFFLINE_SERVICE_URL = "http://127.0.0.1:9"


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source"""
    return random.Random(1234)


@pytest.fixture
def db(tmp_path) -> DatabaseManager:
    """Database manager on a temporary SQLite file"""
    manager = DatabaseManager(
        f"sqlite:///{tmp_path / 'test.db'}",
        model_dir=str(tmp_path / "ai-models"),
    )
    yield manager
    manager.dispose()


@pytest.fixture
def upload_model(db):
    """Register a model, optionally activating it"""
    def _upload(model_type="network_intrusion", name="CIC-IDS Classifier", version="1.2.0", active=True):
        model = db.upload_model(
            file_name="model.onnx",
            content=b"weights",
            name=name,
            model_type=model_type,
            version=version,
            model_config={"threshold": 0.5},
            accuracy=0.97,
        )
        if active:
            model = db.activate_model(model.id)
        return model
    return _upload


@pytest.fixture
def app_config(tmp_path, monkeypatch) -> AppConfig:
    """Configuration rooted in a temporary data directory with zero pipeline delays"""
    monkeypatch.setenv("CYAI_DATA_DIR", str(tmp_path / "data"))
    config = AppConfig()
    config.pipeline.stage_delay = 0
    config.pipeline.stage_jitter = 0
    config.pipeline.scan_tick_interval = 0.01
    config.report.output_dir = str(tmp_path / "reports")
    config.detection_service.base_url = OFFLINE_SERVICE_URL
    config.detection_service.timeout_seconds = 2
    return config


@pytest.fixture
def offline_client() -> DetectionServiceClient:
    return DetectionServiceClient(OFFLINE_SERVICE_URL, timeout=2)


@pytest.fixture
def app(app_config, db, offline_client, rng):
    """Flask app wired to the temporary database"""
    from api.server import create_app

    flask_app = create_app(app_config, db=db, detection_client=offline_client, rng=rng)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    """Flask test client"""
    return app.test_client()
