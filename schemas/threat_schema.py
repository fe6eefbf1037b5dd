"""
CYAI Threat Schema - Unified Data Format

Detection results, per-record network verdicts and AI explanations share this
format. Wire (JSON) keys keep the camelCase names the dashboard clients use.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
from enum import Enum
import uuid


class Severity(str, Enum):
    """Severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Prediction(str, Enum):
    """Per-record verdict"""
    ATTACK = "attack"
    BENIGN = "benign"


class Decision(str, Enum):
    """Explanation decision"""
    THREAT = "threat"
    BENIGN = "benign"


SEVERITY_ORDER = [Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]


def severity_from_confidence(confidence: float) -> Severity:
    """Map a confidence score onto a severity level"""
    if confidence >= 0.9:
        return Severity.CRITICAL
    if confidence >= 0.7:
        return Severity.HIGH
    if confidence >= 0.5:
        return Severity.MEDIUM
    return Severity.LOW


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class ThreatCategory:
    """One of the eight fixed threat categories"""
    id: str
    name: str
    description: str
    icon: str
    severity: Severity
    color: str
    examples: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'icon': self.icon,
            'severity': self.severity.value,
            'color': self.color,
            'examples': list(self.examples),
        }


@dataclass
class DetectionResult:
    """
    Detection result - a confidence score with canned text fields keyed by category.

    Produced by the advanced detection handler and by the local mock generator.
    """
    category: str
    threat_type: str
    confidence: float
    severity: Severity
    explanation: str = ""
    id: str = field(default_factory=new_id)
    timestamp: str = field(default_factory=utc_now_iso)
    source_ip: Optional[str] = None
    target_ip: Optional[str] = None
    user_id: Optional[str] = None
    file_name: Optional[str] = None
    indicators: List[str] = field(default_factory=list)
    mitigation_steps: List[str] = field(default_factory=list)
    affected_assets: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to wire dictionary (optional fields omitted when unset)"""
        data = {
            'id': self.id,
            'category': self.category,
            'threatType': self.threat_type,
            'confidence': self.confidence,
            'severity': Severity(self.severity).value,
            'timestamp': self.timestamp,
            'explanation': self.explanation,
            'indicators': list(self.indicators),
            'mitigationSteps': list(self.mitigation_steps),
            'affectedAssets': list(self.affected_assets),
        }
        for key, value in (('sourceIP', self.source_ip), ('targetIP', self.target_ip),
                           ('userId', self.user_id), ('fileName', self.file_name)):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DetectionResult':
        """Create from a wire or storage dictionary (camelCase or snake_case keys)"""
        def pick(*keys, default=None):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return default

        severity = pick('severity', default=Severity.LOW.value)
        try:
            severity = Severity(severity)
        except ValueError:
            severity = Severity.LOW

        return cls(
            id=pick('id', default=None) or new_id(),
            category=pick('category', default=''),
            threat_type=pick('threatType', 'threat_type', default='Unknown threat'),
            confidence=_as_confidence(pick('confidence', default=0.0)),
            severity=severity,
            timestamp=pick('timestamp', 'detected_at', default=None) or utc_now_iso(),
            source_ip=pick('sourceIP', 'source_ip'),
            target_ip=pick('targetIP', 'target_ip', 'destination_ip'),
            user_id=pick('userId', 'user_id'),
            file_name=pick('fileName', 'file_name'),
            explanation=pick('explanation', default=''),
            indicators=[str(i) for i in pick('indicators', default=[]) or []],
            mitigation_steps=[str(m) for m in pick('mitigationSteps', 'mitigation_steps', default=[]) or []],
            affected_assets=[str(a) for a in pick('affectedAssets', 'affected_assets', default=[]) or []],
        )


def _as_confidence(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"confidence must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"confidence must be a number, got {value!r}") from None


@dataclass
class NetworkThreat:
    """Verdict for a single network flow record"""
    source_ip: str
    destination_ip: str
    prediction: Prediction
    confidence: float
    protocol: str
    attack_type: Optional[str] = None
    id: str = field(default_factory=new_id)
    timestamp: str = field(default_factory=utc_now_iso)

    @property
    def is_attack(self) -> bool:
        return Prediction(self.prediction) == Prediction.ATTACK

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'timestamp': self.timestamp,
            'sourceIP': self.source_ip,
            'destinationIP': self.destination_ip,
            'prediction': Prediction(self.prediction).value,
            'confidence': self.confidence,
            'protocol': self.protocol,
        }
        if self.attack_type is not None:
            data['attackType'] = self.attack_type
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NetworkThreat':
        return cls(
            id=data.get('id') or new_id(),
            timestamp=data.get('timestamp') or utc_now_iso(),
            source_ip=data.get('sourceIP', ''),
            destination_ip=data.get('destinationIP', ''),
            prediction=Prediction(data.get('prediction', Prediction.BENIGN.value)),
            confidence=float(data.get('confidence', 0.0)),
            protocol=data.get('protocol', ''),
            attack_type=data.get('attackType'),
        )


@dataclass
class KeyFeature:
    """A feature that drove an explanation"""
    feature: str
    importance: float
    value: Any
    explanation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'feature': self.feature,
            'importance': self.importance,
            'value': self.value,
            'explanation': self.explanation,
        }


@dataclass
class AIExplanation:
    """Human-readable explanation attached to a detection result"""
    decision: Decision
    confidence: float
    key_features: List[KeyFeature] = field(default_factory=list)
    reasoning: str = ""
    similar_cases: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'decision': Decision(self.decision).value,
            'confidence': self.confidence,
            'keyFeatures': [f.to_dict() for f in self.key_features],
            'reasoning': self.reasoning,
            'similarCases': list(self.similar_cases),
        }
