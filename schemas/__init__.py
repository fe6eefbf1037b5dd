"""CYAI Threat Platform Schemas"""

from .threat_schema import (
    Severity, Prediction, Decision, SEVERITY_ORDER,
    ThreatCategory, DetectionResult, NetworkThreat, KeyFeature, AIExplanation,
    severity_from_confidence
)

__all__ = [
    'Severity', 'Prediction', 'Decision', 'SEVERITY_ORDER',
    'ThreatCategory', 'DetectionResult', 'NetworkThreat', 'KeyFeature', 'AIExplanation',
    'severity_from_confidence'
]
