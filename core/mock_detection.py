"""
CYAI Mock Detection

Random fallback generator used whenever the remote detection function or an
active model is unavailable. Every generator takes an optional
``random.Random`` so callers can seed it.
"""

from __future__ import annotations

import random
import string
from typing import Any, Dict, List, Optional

from schemas.threat_schema import (
    DetectionResult, NetworkThreat, Prediction, SEVERITY_ORDER
)
from . import threat_catalog

PROTOCOLS = ['TCP', 'UDP', 'ICMP']
FALLBACK_ATTACK_PROBABILITY = 0.15
FALLBACK_RECORD_LIMIT = 10

_ID_ALPHABET = string.digits + string.ascii_lowercase


def short_id(length: int = 9, rng: Optional[random.Random] = None) -> str:
    """Random lowercase base36 identifier"""
    rng = rng or random
    return ''.join(rng.choice(_ID_ALPHABET) for _ in range(length))


def random_ip(prefix: str, rng: Optional[random.Random] = None) -> str:
    """Fill the octets missing from ``prefix`` (e.g. '192.168') with values 0..254"""
    rng = rng or random
    octets = [part for part in prefix.split('.') if part]
    while len(octets) < 4:
        octets.append(str(rng.randrange(255)))
    return '.'.join(octets)


def random_protocol(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(PROTOCOLS)


def generate_mock_detection(category: str, rng: Optional[random.Random] = None) -> DetectionResult:
    """Detection result made entirely of random values and canned category text"""
    rng = rng or random
    threat_type = rng.choice(threat_catalog.threat_examples(category))
    severity = rng.choice(SEVERITY_ORDER)

    return DetectionResult(
        id=short_id(9, rng),
        category=category,
        threat_type=threat_type,
        confidence=0.75 + rng.random() * 0.25,
        severity=severity,
        source_ip=random_ip('192.168', rng),
        target_ip=random_ip('10.0', rng),
        user_id=f"user_{rng.randrange(1000)}",
        file_name=f"suspicious_{short_id(5, rng)}.exe" if 'malware' in category else None,
        explanation=threat_catalog.mock_explanation(category, threat_type),
        indicators=threat_catalog.mock_indicators(category),
        mitigation_steps=threat_catalog.mock_mitigations(category),
        affected_assets=threat_catalog.affected_assets(category),
    )


def fallback_network_detection(
    records: List[Dict[str, Any]],
    rng: Optional[random.Random] = None
) -> List[NetworkThreat]:
    """Random verdicts for the first few flow records"""
    rng = rng or random
    attack_types = threat_catalog.network_attack_types()
    threats = []

    for record in records[:FALLBACK_RECORD_LIMIT]:
        record = record if isinstance(record, dict) else {}
        is_attack = rng.random() < FALLBACK_ATTACK_PROBABILITY
        threats.append(NetworkThreat(
            source_ip=record.get('sourceIP') or random_ip('192.168', rng),
            destination_ip=record.get('destinationIP') or random_ip('10.0', rng),
            prediction=Prediction.ATTACK if is_attack else Prediction.BENIGN,
            confidence=0.7 + rng.random() * 0.3,
            protocol=record.get('protocol') or random_protocol(rng),
            attack_type=rng.choice(attack_types) if is_attack else None,
        ))

    return threats
