"""
CYAI Feature Extraction

Turns flow records and simulation payloads into the feature dictionaries fed
to mock inference. Missing or falsy packet fields are replaced with random values.
"""

from __future__ import annotations

import json
import random
import time
from typing import Any, Dict, Optional

from .mock_detection import random_protocol


def now_ms() -> int:
    return int(time.time() * 1000)


def extract_features(packet: Dict[str, Any], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """Feature vector for a single network record"""
    rng = rng or random
    return {
        'packetSize': packet.get('size') or rng.randrange(1500) + 64,
        'protocol': packet.get('protocol') or random_protocol(rng),
        'sourcePort': packet.get('sourcePort') or rng.randrange(65535),
        'destinationPort': packet.get('destinationPort') or rng.randrange(65535),
        'timestamp': packet.get('timestamp') or now_ms(),
        'flags': packet.get('flags') or rng.randrange(255),
    }


def extract_advanced_features(
    simulation_data: Any,
    category: str,
    rng: Optional[random.Random] = None
) -> Dict[str, Any]:
    """Base features plus category-specific extras"""
    rng = rng or random
    features = {
        'timestamp': now_ms(),
        'category': category,
        'dataSize': len(json.dumps(simulation_data, default=str)),
    }

    if category == 'network_intrusion':
        features.update({
            'connectionCount': rng.randrange(1000) + 100,
            'portScanFrequency': rng.random() * 20,
            'protocolDistribution': {'TCP': 0.7, 'UDP': 0.2, 'ICMP': 0.1},
        })
    elif category == 'malware_ransomware':
        features.update({
            'fileEncryptionRate': rng.randrange(200) + 50,
            'processCount': rng.randrange(50) + 10,
            'registryChanges': rng.randrange(100) + 20,
        })
    elif category == 'phishing_social':
        features.update({
            'domainAge': rng.randrange(365) + 1,
            'similarityScore': rng.random(),
            'urgencyKeywords': rng.randrange(10) + 1,
        })

    return features
