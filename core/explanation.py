"""
CYAI AI Explanation

Builds the explanation panel shown next to a detection result.
"""

from __future__ import annotations

from typing import Any

from schemas.threat_schema import AIExplanation, Decision, DetectionResult
from . import threat_catalog

THREAT_DECISION_THRESHOLD = 0.5


def generate_ai_explanation(result: DetectionResult, data: Any = None) -> AIExplanation:
    """Explain a detection result using the category's key features and reasoning"""
    decision = Decision.THREAT if result.confidence > THREAT_DECISION_THRESHOLD else Decision.BENIGN
    return AIExplanation(
        decision=decision,
        confidence=result.confidence,
        key_features=threat_catalog.key_features(result.category),
        reasoning=threat_catalog.reasoning(result.category, result.confidence),
        similar_cases=threat_catalog.similar_cases(),
    )
