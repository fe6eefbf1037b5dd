"""
CYAI Threat Platform - Database Manager

Handles all database operations with SQLAlchemy
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Any, Type, TypeVar

from sqlalchemy import create_engine, desc
from sqlalchemy.orm import sessionmaker, Session, scoped_session

from core.exceptions import ValidationError, NotFoundError
from .models import (
    Base, AIModel, AIPrediction, NetworkAnalysis, ThreatDetection,
    DETECTION_STATUSES
)

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=Base)

_DATE_FIELDS = ('created_at', 'updated_at', 'detected_at', 'timestamp')


def _parse_dates(data: Dict[str, Any], drop_invalid: bool) -> Dict[str, Any]:
    """SQLite requires datetime objects, not strings"""
    for date_field in _DATE_FIELDS:
        if date_field in data and isinstance(data[date_field], str):
            try:
                data[date_field] = datetime.fromisoformat(data[date_field].replace('Z', '+00:00'))
            except (ValueError, AttributeError):
                if drop_invalid:
                    del data[date_field]
    return data


class DatabaseManager:
    """
    Database manager for CYAI Threat Platform

    Supports SQLite (development) and PostgreSQL (production)
    """

    def __init__(self, database_url: Optional[str] = None, model_dir: Optional[str] = None,
                 echo: bool = False):
        """
        Initialize database manager

        Args:
            database_url: Database connection URL. If None, uses SQLite in data folder.
            model_dir: Directory uploaded model files are written to.
            echo: Log SQL statements
        """
        data_dir = Path(__file__).parent.parent / "data"
        if database_url is None:
            data_dir.mkdir(parents=True, exist_ok=True)
            database_url = f"sqlite:///{data_dir / 'cyai_threat_platform.db'}"

        self.database_url = database_url
        self.model_dir = Path(model_dir) if model_dir else data_dir / "ai-models"
        self.engine = create_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,
            connect_args={"check_same_thread": False} if "sqlite" in database_url else {}
        )

        session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.Session = scoped_session(session_factory)

        Base.metadata.create_all(self.engine)
        logger.info(f"[Database] Ready at {self._safe_url()}")

    def _safe_url(self) -> str:
        return self.engine.url.render_as_string(hide_password=True)

    def get_session(self) -> Session:
        """Get a database session"""
        return self.Session()

    def close_session(self, session: Session):
        """Close a database session"""
        session.close()

    def dispose(self):
        """Release pooled connections"""
        self.Session.remove()
        self.engine.dispose()

    def get_stats(self, session: Optional[Session] = None) -> Dict[str, int]:
        """Row counts per table"""
        should_close = session is None
        session = session or self.get_session()

        try:
            return {
                'models': session.query(AIModel).count(),
                'active_models': session.query(AIModel).filter(AIModel.is_active == True).count(),  # noqa: E712
                'predictions': session.query(AIPrediction).count(),
                'network_analyses': session.query(NetworkAnalysis).count(),
                'detections': session.query(ThreatDetection).count(),
            }
        finally:
            if should_close:
                session.close()

    # ==================== Generic CRUD Operations ====================

    def create(self, model_class: Type[T], data: Dict[str, Any], session: Optional[Session] = None) -> T:
        """Create a new record"""
        should_close = session is None
        session = session or self.get_session()
        data = _parse_dates(dict(data), drop_invalid=True)

        try:
            instance = model_class(**data)
            session.add(instance)
            session.commit()
            session.refresh(instance)
            return instance
        except Exception as e:
            session.rollback()
            raise e
        finally:
            if should_close:
                session.close()

    def get(self, model_class: Type[T], id: str, session: Optional[Session] = None) -> Optional[T]:
        """Get a record by ID"""
        should_close = session is None
        session = session or self.get_session()

        try:
            return session.query(model_class).filter_by(id=id).first()
        finally:
            if should_close:
                session.close()

    def get_all(self, model_class: Type[T], filters: Optional[Dict] = None,
                limit: int = 100, offset: int = 0, order_by: Optional[str] = None,
                session: Optional[Session] = None) -> List[T]:
        """Get all records with optional filters, newest first when order_by is given"""
        should_close = session is None
        session = session or self.get_session()

        try:
            query = session.query(model_class)

            if filters:
                for key, value in filters.items():
                    if hasattr(model_class, key):
                        query = query.filter(getattr(model_class, key) == value)

            if order_by and hasattr(model_class, order_by):
                query = query.order_by(desc(getattr(model_class, order_by)))

            return query.offset(offset).limit(limit).all()
        finally:
            if should_close:
                session.close()

    def update(self, model_class: Type[T], id: str, data: Dict[str, Any],
               session: Optional[Session] = None) -> Optional[T]:
        """Update a record"""
        should_close = session is None
        session = session or self.get_session()
        data = _parse_dates(dict(data), drop_invalid=False)

        try:
            instance = session.query(model_class).filter_by(id=id).first()
            if instance:
                for key, value in data.items():
                    if hasattr(instance, key):
                        setattr(instance, key, value)
                if hasattr(instance, 'updated_at'):
                    instance.updated_at = datetime.now(timezone.utc)
                session.commit()
                session.refresh(instance)
            return instance
        except Exception as e:
            session.rollback()
            raise e
        finally:
            if should_close:
                session.close()

    def delete(self, model_class: Type[T], id: str, session: Optional[Session] = None) -> bool:
        """Delete a record"""
        should_close = session is None
        session = session or self.get_session()

        try:
            instance = session.query(model_class).filter_by(id=id).first()
            if instance:
                session.delete(instance)
                session.commit()
                return True
            return False
        except Exception as e:
            session.rollback()
            raise e
        finally:
            if should_close:
                session.close()

    # ==================== Model Registry Operations ====================

    def upload_model(self, file_name: str, content: bytes, name: str, model_type: str,
                     version: str, model_config: Optional[Dict[str, Any]] = None,
                     accuracy: Optional[float] = None) -> AIModel:
        """Store a model file and register it (inactive)"""
        if not file_name or not name or not model_type or not version:
            raise ValidationError("Model file, name, type and version are required")

        self.model_dir.mkdir(parents=True, exist_ok=True)
        stored_name = f"{int(time.time() * 1000)}-{Path(file_name).name}"
        (self.model_dir / stored_name).write_bytes(content or b'')

        try:
            model = self.create(AIModel, {
                'name': name,
                'model_type': model_type,
                'version': version,
                'file_path': stored_name,
                'model_config': model_config or {},
                'accuracy': accuracy,
                'is_active': False,
            })
        except Exception:
            (self.model_dir / stored_name).unlink(missing_ok=True)
            raise

        logger.info(f"[Models] Uploaded {name} v{version} ({model_type}) as {stored_name}")
        return model

    def list_models(self, model_type: Optional[str] = None) -> List[AIModel]:
        """All registered models, newest first"""
        filters = {'model_type': model_type} if model_type else None
        return self.get_all(AIModel, filters, limit=1000, order_by='created_at')

    def activate_model(self, model_id: str) -> AIModel:
        """Make one model the active model of its type"""
        session = self.get_session()
        try:
            model = session.query(AIModel).filter_by(id=model_id).first()
            if model is None:
                raise NotFoundError(f"Model not found: {model_id}")

            session.query(AIModel).filter(
                AIModel.model_type == model.model_type,
                AIModel.id != model.id
            ).update({AIModel.is_active: False}, synchronize_session=False)
            model.is_active = True
            model.updated_at = datetime.now(timezone.utc)
            session.commit()
            session.refresh(model)
            logger.info(f"[Models] Activated {model.name} for {model.model_type}")
            return model
        except NotFoundError:
            raise
        except Exception as e:
            session.rollback()
            raise e
        finally:
            session.close()

    def delete_model(self, model_id: str) -> bool:
        """Remove the stored file, then the registry row"""
        model = self.get(AIModel, model_id)
        if model is None:
            raise NotFoundError(f"Model not found: {model_id}")

        stored = self.model_dir / model.file_path
        if stored.exists():
            stored.unlink()
        deleted = self.delete(AIModel, model_id)
        logger.info(f"[Models] Deleted {model.name}")
        return deleted

    def get_active_model(self, model_type: str) -> Optional[AIModel]:
        """The single active model for a type; None when absent or ambiguous"""
        active = self.get_all(AIModel, {'model_type': model_type, 'is_active': True}, limit=2)
        if len(active) != 1:
            if len(active) > 1:
                logger.warning(f"[Models] Multiple active models for {model_type}; ignoring all")
            return None
        return active[0]

    # ==================== Detection Records ====================

    def create_prediction(self, data: Dict[str, Any]) -> AIPrediction:
        return self.create(AIPrediction, data)

    def list_predictions(self, limit: int = 100, model_id: Optional[str] = None) -> List[AIPrediction]:
        filters = {'model_id': model_id} if model_id else None
        return self.get_all(AIPrediction, filters, limit=limit, order_by='timestamp')

    def create_network_analysis(self, data: Dict[str, Any]) -> NetworkAnalysis:
        return self.create(NetworkAnalysis, data)

    def create_threat_detection(self, data: Dict[str, Any]) -> ThreatDetection:
        return self.create(ThreatDetection, data)

    def list_threat_detections(self, limit: int = 100) -> List[ThreatDetection]:
        """Most recent detections first"""
        return self.get_all(ThreatDetection, limit=limit, order_by='detected_at')

    def update_detection_status(self, detection_id: str, status: str) -> ThreatDetection:
        """Move a detection through its triage workflow"""
        if status not in DETECTION_STATUSES:
            raise ValidationError(
                f"Invalid status '{status}'. Expected one of: {', '.join(DETECTION_STATUSES)}"
            )
        detection = self.update(ThreatDetection, detection_id, {'status': status})
        if detection is None:
            raise NotFoundError(f"Detection not found: {detection_id}")
        return detection


# Global database manager instance
_db_manager: Optional[DatabaseManager] = None


def get_db_manager(database_url: Optional[str] = None, model_dir: Optional[str] = None) -> DatabaseManager:
    """Get or create global database manager instance"""
    global _db_manager

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url, model_dir)

    return _db_manager


def init_db(database_url: Optional[str] = None, model_dir: Optional[str] = None) -> DatabaseManager:
    """Initialize the database (alias for get_db_manager)"""
    return get_db_manager(database_url, model_dir)
