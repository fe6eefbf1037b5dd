"""
CYAI Advanced Threat Detection

Handler behind the ``ai-advanced-detection`` function: one category-specific
verdict per simulation payload, always recorded as a threat detection.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Dict, Optional

from schemas.threat_schema import DetectionResult, Severity, severity_from_confidence
from database.db_manager import DatabaseManager
from .exceptions import ValidationError
from . import threat_catalog
from .feature_extraction import extract_advanced_features
from .inference import run_advanced_inference, advanced_explanation
from .mock_detection import random_ip

logger = logging.getLogger(__name__)

FALLBACK_MODEL_NAME = 'Fallback Detection'


def is_blank(value: Any) -> bool:
    """Absent payload: None, empty string, zero or False. Empty dicts and lists are present."""
    if value is None or isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    return value == ''


def fallback_advanced_detection(category: str, rng: Optional[random.Random] = None) -> DetectionResult:
    """Canned category verdict with confidence in [0.5, 0.9)"""
    rng = rng or random
    data = threat_catalog.advanced_category_data(category)
    confidence = 0.5 + rng.random() * 0.4
    threat_type = rng.choice(data['threats'])
    return DetectionResult(
        category=category,
        threat_type=threat_type,
        confidence=confidence,
        severity=severity_from_confidence(confidence),
        source_ip=random_ip('10', rng),
        explanation=advanced_explanation(category, threat_type, confidence),
        indicators=data['indicators'],
        mitigation_steps=data['mitigation_steps'],
    )


class AdvancedThreatDetector:
    """Run a simulation payload through the active model of its category"""

    def __init__(self, db: DatabaseManager, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()

    def detect(self, simulation_data: Any, category: str) -> Dict[str, Any]:
        if is_blank(simulation_data) or not category:
            raise ValidationError('Missing simulation data or category')

        start = time.monotonic()
        model = self.db.get_active_model(category)

        if model is None:
            logger.info(f"[AdvancedDetection] No active AI model found for category: {category}, using fallback")
            result = fallback_advanced_detection(category, self.rng)
            prediction_id = None
        else:
            result, prediction_id = self._run_model(model, simulation_data, category)

        self.db.create_threat_detection({
            'prediction_id': prediction_id,
            'threat_type': result.threat_type,
            'category': category,
            'severity': Severity(result.severity).value,
            'confidence': result.confidence,
            'source_ip': result.source_ip,
            'attack_type': result.threat_type,
            'indicators': result.indicators,
            'mitigation_steps': result.mitigation_steps,
            'explanation': result.explanation,
        })

        return {
            'result': result.to_dict(),
            'processingTime': int((time.monotonic() - start) * 1000),
            'modelUsed': model.name if model is not None else FALLBACK_MODEL_NAME,
        }

    def _run_model(self, model, simulation_data: Any, category: str):
        features = extract_advanced_features(simulation_data, category, self.rng)
        prediction = run_advanced_inference(model, features, category, self.rng)

        stored = self.db.create_prediction({
            'model_id': model.id,
            'input_data': {'simulationData': simulation_data, 'features': features},
            'prediction_result': prediction,
            'confidence_score': prediction['confidence'],
            'prediction_type': 'advanced_detection',
            'source_ip': prediction['sourceIP'],
            'processing_time_ms': self.rng.randrange(200) + 50,
        })

        result = DetectionResult(
            category=category,
            threat_type=prediction['threatType'],
            confidence=prediction['confidence'],
            severity=Severity(prediction['severity']),
            source_ip=prediction['sourceIP'],
            explanation=prediction['explanation'],
            indicators=prediction['indicators'],
            mitigation_steps=prediction['mitigationSteps'],
        )
        logger.info(
            f"[AdvancedDetection] {model.name} flagged {result.threat_type} "
            f"({threat_catalog.format_percent(result.confidence)}%)"
        )
        return result, stored.id
