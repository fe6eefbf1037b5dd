"""
CYAI Threat Catalog

Lookup helpers over the static category tables. Unknown categories and
attack types resolve to generic defaults rather than raising.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from schemas.threat_schema import ThreatCategory, Severity, KeyFeature
from .threat_catalog_data import (
    THREAT_CATEGORIES, MOCK_INDICATORS, MOCK_MITIGATIONS, AFFECTED_ASSETS,
    EXPLANATION_TEMPLATES, DEFAULT_EXPLANATION, ADVANCED_CATEGORY_DATA,
    DEFAULT_ADVANCED_DATA, NETWORK_ATTACK_TYPES, NETWORK_ATTACK_INDICATORS,
    NETWORK_ATTACK_MITIGATIONS, KEY_FEATURES, DEFAULT_KEY_FEATURES,
    REASONING_TEMPLATES, DEFAULT_REASONING, SIMILAR_CASES, DETECTION_CAPABILITIES,
    SIMULATION_PARAMETERS
)

_CATEGORIES: Dict[str, ThreatCategory] = {
    entry["id"]: ThreatCategory(
        id=entry["id"],
        name=entry["name"],
        description=entry["description"],
        icon=entry["icon"],
        severity=Severity(entry["severity"]),
        color=entry["color"],
        examples=list(entry["examples"]),
    )
    for entry in THREAT_CATEGORIES
}


def list_categories() -> List[ThreatCategory]:
    """All eight categories in catalog order"""
    return list(_CATEGORIES.values())


def category_ids() -> List[str]:
    return list(_CATEGORIES)


def get_category(category_id: str) -> Optional[ThreatCategory]:
    return _CATEGORIES.get(category_id)


def is_known_category(category_id: str) -> bool:
    return category_id in _CATEGORIES


def threat_examples(category_id: str) -> List[str]:
    category = get_category(category_id)
    return list(category.examples) if category else ['Unknown threat']


# ==================== Mock detection lookups ====================

def mock_indicators(category_id: str) -> List[str]:
    return list(MOCK_INDICATORS.get(category_id, ['Unknown indicators']))


def mock_mitigations(category_id: str) -> List[str]:
    return list(MOCK_MITIGATIONS.get(category_id, ['General security measures']))


def affected_assets(category_id: str) -> List[str]:
    return list(AFFECTED_ASSETS.get(category_id, ['Unknown assets']))


def mock_explanation(category_id: str, threat_type: str) -> str:
    template = EXPLANATION_TEMPLATES.get(category_id)
    if template is None:
        return DEFAULT_EXPLANATION
    return template.format(threat_type=threat_type)


# ==================== Advanced detection lookups ====================

def advanced_category_data(category_id: str) -> Dict[str, List[str]]:
    data = ADVANCED_CATEGORY_DATA.get(category_id, DEFAULT_ADVANCED_DATA)
    return {key: list(values) for key, values in data.items()}


# ==================== Network attack lookups ====================

def network_attack_types() -> List[str]:
    return list(NETWORK_ATTACK_TYPES)


def network_indicators(attack_type: Optional[str]) -> List[str]:
    return list(NETWORK_ATTACK_INDICATORS.get(attack_type, ['Suspicious network activity']))


def network_mitigations(attack_type: Optional[str]) -> List[str]:
    return list(NETWORK_ATTACK_MITIGATIONS.get(attack_type, ['Investigate further', 'Monitor system activity']))


# ==================== Explanation lookups ====================

def format_percent(confidence: float) -> str:
    """Confidence as a percentage with one decimal, e.g. 0.873 -> '87.3'"""
    return f"{confidence * 100:.1f}"


def key_features(category_id: str) -> List[KeyFeature]:
    return [KeyFeature(**entry) for entry in KEY_FEATURES.get(category_id, DEFAULT_KEY_FEATURES)]


def reasoning(category_id: str, confidence: float) -> str:
    template = REASONING_TEMPLATES.get(category_id, DEFAULT_REASONING)
    return template.format(confidence_pct=format_percent(confidence))


def similar_cases() -> List[str]:
    return list(SIMILAR_CASES)


def describe_category(category_id: str) -> Optional[str]:
    """Plain-text details sheet for a category"""
    category = get_category(category_id)
    if category is None:
        return None

    lines: List[str] = [
        f"Threat Category: {category.name}",
        "",
        f"Description: {category.description}",
        "",
        f"Severity Level: {category.severity.value.upper()}",
        "",
        "Detection Examples:",
        *[f"• {example}" for example in category.examples],
        "",
        "AI Detection Capabilities:",
        *[f"• {item}" for item in DETECTION_CAPABILITIES],
        "",
        "Simulation Parameters:",
        *[f"• {item}" for item in SIMULATION_PARAMETERS],
    ]
    return "\n".join(lines)
