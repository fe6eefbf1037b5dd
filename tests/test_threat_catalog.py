from core import threat_catalog
from schemas.threat_schema import Severity

EXPECTED_IDS = [
    "network_intrusion",
    "malware_ransomware",
    "phishing_social",
    "insider_threats",
    "zero_day_apt",
    "data_exfiltration",
    "ddos_attacks",
    "deepfake_ai",
]


def test_eight_categories_in_catalog_order():
    assert threat_catalog.category_ids() == EXPECTED_IDS
    assert len(threat_catalog.list_categories()) == 8


def test_get_category_fields():
    category = threat_catalog.get_category("malware_ransomware")
    assert category.name == "Malware & Ransomware"
    assert category.severity == Severity.CRITICAL
    assert "File encryption" in category.examples
    assert category.to_dict()["severity"] == "critical"


def test_unknown_category_defaults():
    assert threat_catalog.get_category("nope") is None
    assert threat_catalog.threat_examples("nope") == ["Unknown threat"]
    assert threat_catalog.mock_indicators("nope") == ["Unknown indicators"]
    assert threat_catalog.mock_mitigations("nope") == ["General security measures"]
    assert threat_catalog.affected_assets("nope") == ["Unknown assets"]
    assert threat_catalog.mock_explanation("nope", "x") == (
        "AI-powered analysis detected suspicious activity requiring investigation."
    )


def test_unknown_network_attack_defaults():
    assert threat_catalog.network_indicators(None) == ["Suspicious network activity"]
    assert threat_catalog.network_mitigations("Teardrop") == ["Investigate further", "Monitor system activity"]
    assert threat_catalog.network_indicators("DDoS")[0] == "High volume of requests"


def test_mock_explanation_substitutes_threat_type():
    text = threat_catalog.mock_explanation("network_intrusion", "Port scanning")
    assert text.startswith("AI detected Port scanning through anomalous network traffic")


def test_reasoning_formats_one_decimal():
    text = threat_catalog.reasoning("ddos_attacks", 0.8734)
    assert "87.3% confidence" in text
    assert threat_catalog.reasoning("unknown", 0.5) == (
        "AI analysis completed with 50.0% confidence based on anomaly detection and behavioral analysis."
    )


def test_key_features_default_to_anomaly_score():
    features = threat_catalog.key_features("unknown")
    assert len(features) == 1
    assert features[0].feature == "Anomaly Score"
    assert [f.feature for f in threat_catalog.key_features("deepfake_ai")] == [
        "Compression Artifacts", "Temporal Consistency", "Biometric Markers"
    ]


def test_lookups_return_copies():
    indicators = threat_catalog.mock_indicators("phishing_social")
    indicators.append("mutated")
    assert "mutated" not in threat_catalog.mock_indicators("phishing_social")


def test_describe_category_sheet():
    sheet = threat_catalog.describe_category("insider_threats")
    assert sheet.startswith("Threat Category: Insider Threats")
    assert "Severity Level: HIGH" in sheet
    assert "• After-hours access" in sheet
    assert "AI Detection Capabilities:" in sheet
    assert threat_catalog.describe_category("nope") is None
