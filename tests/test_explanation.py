from core.explanation import generate_ai_explanation
from schemas.threat_schema import Decision, DetectionResult, Severity


def _result(category, confidence):
    return DetectionResult(
        category=category,
        threat_type='Port scanning',
        confidence=confidence,
        severity=Severity.HIGH,
    )


def test_threat_decision_above_half():
    explanation = generate_ai_explanation(_result('network_intrusion', 0.91))
    assert explanation.decision == Decision.THREAT
    assert explanation.confidence == 0.91
    assert explanation.key_features
    assert "91.0%" in explanation.reasoning
    assert len(explanation.similar_cases) == 3


def test_benign_decision_at_half():
    explanation = generate_ai_explanation(_result('network_intrusion', 0.5))
    assert explanation.decision == Decision.BENIGN


def test_unknown_category_uses_defaults():
    explanation = generate_ai_explanation(_result('mystery', 0.8))
    assert [f.feature for f in explanation.key_features] == ['Anomaly Score']
    assert explanation.reasoning.startswith("AI analysis completed with 80.0% confidence")


def test_wire_format():
    data = generate_ai_explanation(_result('deepfake_ai', 0.7)).to_dict()
    assert data['decision'] == 'threat'
    assert set(data) == {'decision', 'confidence', 'keyFeatures', 'reasoning', 'similarCases'}
    assert data['keyFeatures'][0]['feature'] == 'Compression Artifacts'
    assert data['similarCases'][1] == "Pattern matches APT-29 techniques"
