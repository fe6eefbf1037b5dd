"""
CYAI Threat Platform - Database Models

SQLAlchemy models for persistent storage
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Dict, Any, List

from sqlalchemy import (
    Column, String, Text, Integer, Float, Boolean,
    DateTime, ForeignKey, JSON
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime) -> str:
    return value.isoformat() if value else None


def _string_list(value: Any) -> List[str]:
    """JSON columns may hold anything; only lists are shown"""
    if isinstance(value, list):
        return [str(item) for item in value]
    return []


DETECTION_STATUSES = ('active', 'investigating', 'resolved', 'false_positive')


# ==================== Model Registry ====================

class AIModel(Base):
    """Uploaded detection model descriptor"""
    __tablename__ = 'ai_models'

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(256), nullable=False)
    model_type = Column(String(64), nullable=False)  # threat category id
    version = Column(String(64), nullable=False)
    file_path = Column(String(512), nullable=False)  # name inside the model storage dir
    model_config = Column(JSON, default=dict)
    accuracy = Column(Float, nullable=True)
    is_active = Column(Boolean, default=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    predictions = relationship('AIPrediction', back_populates='model', cascade='all, delete-orphan')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'model_type': self.model_type,
            'version': self.version,
            'file_path': self.file_path,
            'model_config': self.model_config or {},
            'accuracy': self.accuracy,
            'is_active': bool(self.is_active),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


# ==================== Inference Records ====================

class AIPrediction(Base):
    """One mock inference run"""
    __tablename__ = 'ai_predictions'

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    model_id = Column(String(64), ForeignKey('ai_models.id'), nullable=False)
    input_data = Column(JSON, nullable=False)
    prediction_result = Column(JSON, nullable=False)
    confidence_score = Column(Float, nullable=False)
    prediction_type = Column(String(64), nullable=False)  # threat_detection, advanced_detection
    source_ip = Column(String(64), nullable=True)
    destination_ip = Column(String(64), nullable=True)
    processing_time_ms = Column(Integer, nullable=True)
    timestamp = Column(DateTime, default=utcnow)

    model = relationship('AIModel', back_populates='predictions')
    detections = relationship('ThreatDetection', back_populates='prediction')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'model_id': self.model_id,
            'input_data': self.input_data,
            'prediction_result': self.prediction_result,
            'confidence_score': self.confidence_score,
            'prediction_type': self.prediction_type,
            'source_ip': self.source_ip,
            'destination_ip': self.destination_ip,
            'processing_time_ms': self.processing_time_ms,
            'timestamp': _iso(self.timestamp),
        }


class NetworkAnalysis(Base):
    """Summary of one network scan processed by an active model"""
    __tablename__ = 'network_analysis'

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    analysis_type = Column(String(64), nullable=False)
    input_data = Column(JSON, nullable=False)  # sample of the uploaded records
    analysis_result = Column(JSON, nullable=False)
    anomaly_score = Column(Float, nullable=True)
    metrics = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'analysis_type': self.analysis_type,
            'input_data': self.input_data,
            'analysis_result': self.analysis_result,
            'anomaly_score': self.anomaly_score,
            'metrics': self.metrics or {},
            'created_at': _iso(self.created_at),
        }


class ThreatDetection(Base):
    """Stored detection shown on alert and report views"""
    __tablename__ = 'threat_detections'

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    prediction_id = Column(String(64), ForeignKey('ai_predictions.id'), nullable=True)
    threat_type = Column(String(128), nullable=False)
    category = Column(String(64), nullable=True)
    severity = Column(String(32), nullable=False)
    confidence = Column(Float, nullable=False)
    source_ip = Column(String(64), nullable=True)
    destination_ip = Column(String(64), nullable=True)
    protocol = Column(String(32), nullable=True)
    attack_type = Column(String(128), nullable=True)
    indicators = Column(JSON, default=list)
    mitigation_steps = Column(JSON, default=list)
    explanation = Column(Text, nullable=True)
    detected_at = Column(DateTime, default=utcnow)
    status = Column(String(32), default='active')

    prediction = relationship('AIPrediction', back_populates='detections')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'prediction_id': self.prediction_id,
            'threat_type': self.threat_type,
            'category': self.category,
            'severity': self.severity,
            'confidence': self.confidence,
            'source_ip': self.source_ip,
            'destination_ip': self.destination_ip,
            'protocol': self.protocol,
            'attack_type': self.attack_type,
            'indicators': _string_list(self.indicators),
            'mitigation_steps': _string_list(self.mitigation_steps),
            'explanation': self.explanation,
            'detected_at': _iso(self.detected_at),
            'status': self.status,
        }
