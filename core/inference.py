"""
CYAI Mock Inference

Stand-in for model inference: verdicts are random draws, lightly nudged by a
couple of packet features. Model files are never loaded.
"""

from __future__ import annotations

import random
from typing import Any, Dict, Optional

from schemas.threat_schema import Prediction, severity_from_confidence
from . import threat_catalog
from .mock_detection import random_ip

BASE_ATTACK_PROBABILITY = 0.15
SUSPICIOUS_PORTS = (22, 3389)
SUSPICIOUS_PORT_BONUS = 0.2
LARGE_PACKET_SIZE = 1000
LARGE_PACKET_BONUS = 0.1


def model_version(model: Any) -> Optional[str]:
    if model is None:
        return None
    if isinstance(model, dict):
        return model.get('version')
    return getattr(model, 'version', None)


def attack_probability(features: Dict[str, Any]) -> float:
    """Attack probability for a feature vector"""
    probability = BASE_ATTACK_PROBABILITY
    if features.get('destinationPort') in SUSPICIOUS_PORTS:
        probability += SUSPICIOUS_PORT_BONUS
    try:
        if float(features.get('packetSize') or 0) > LARGE_PACKET_SIZE:
            probability += LARGE_PACKET_BONUS
    except (TypeError, ValueError):
        pass
    return probability


def run_network_inference(
    model: Any,
    features: Dict[str, Any],
    rng: Optional[random.Random] = None
) -> Dict[str, Any]:
    """Label a network feature vector as attack or benign"""
    rng = rng or random
    is_attack = rng.random() < attack_probability(features)
    return {
        'label': (Prediction.ATTACK if is_attack else Prediction.BENIGN).value,
        'confidence': 0.7 + rng.random() * 0.3,
        'modelVersion': model_version(model),
        'features': features,
    }


def advanced_explanation(category: str, threat_type: str, confidence: float) -> str:
    return (
        f"AI model detected {threat_type} in {category.replace('_', ' ', 1)} category "
        f"with {threat_catalog.format_percent(confidence)}% confidence based on "
        f"behavioral analysis and pattern recognition."
    )


def run_advanced_inference(
    model: Any,
    features: Dict[str, Any],
    category: str,
    rng: Optional[random.Random] = None
) -> Dict[str, Any]:
    """Category-specific verdict for a simulation payload"""
    rng = rng or random
    confidence = 0.6 + rng.random() * 0.4
    category_data = threat_catalog.advanced_category_data(category)
    threat_type = rng.choice(category_data['threats'])

    return {
        'threatType': threat_type,
        'confidence': confidence,
        'severity': severity_from_confidence(confidence).value,
        'sourceIP': random_ip('10', rng),
        'explanation': advanced_explanation(category, threat_type, confidence),
        'indicators': category_data['indicators'],
        'mitigationSteps': category_data['mitigation_steps'],
        'modelVersion': model_version(model),
    }
