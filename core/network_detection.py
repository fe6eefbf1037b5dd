"""
CYAI Network Threat Detection

Handler behind the ``ai-threat-detection`` function. Flow records are run
through the active ``network_intrusion`` model when one is registered,
otherwise through the random fallback generator.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Dict, List, Optional

from schemas.threat_schema import (
    NetworkThreat, Prediction, severity_from_confidence, utc_now_iso
)
from database.db_manager import DatabaseManager
from .exceptions import ValidationError
from . import threat_catalog
from .feature_extraction import extract_features
from .inference import run_network_inference
from .mock_detection import fallback_network_detection, random_ip, random_protocol

logger = logging.getLogger(__name__)

NETWORK_MODEL_TYPE = 'network_intrusion'
MODEL_RECORD_LIMIT = 20
STORED_SAMPLE_SIZE = 10


def summarize(threats: List[NetworkThreat], total_packets: int, analysis_type: str) -> Dict[str, Any]:
    """Analysis block of the response envelope"""
    attacks = sum(1 for t in threats if t.is_attack)
    return {
        'totalPackets': total_packets,
        'threatsDetected': attacks,
        'benignTraffic': len(threats) - attacks,
        'analysisType': analysis_type,
        'timestamp': utc_now_iso(),
    }


class NetworkThreatDetector:
    """
    Classify network flow records as attack or benign.

    Persists predictions, attack detections and an analysis summary when an
    active model is used. The fallback path writes nothing.
    """

    def __init__(self, db: DatabaseManager, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()

    def detect(self, network_data: Any, analysis_type: str = 'real_time') -> Dict[str, Any]:
        if not isinstance(network_data, list):
            raise ValidationError('Invalid network data provided')

        start = time.monotonic()
        model = self.db.get_active_model(NETWORK_MODEL_TYPE)

        if model is None:
            logger.info("[NetworkDetection] No active AI model found, using fallback detection")
            threats = fallback_network_detection(network_data, self.rng)
            return {
                'threats': [t.to_dict() for t in threats],
                'analysis': summarize(threats, len(network_data), analysis_type),
                'processingTime': self.rng.randrange(1000) + 500,
            }

        threats = [
            self._process_record(model, record)
            for record in network_data[:MODEL_RECORD_LIMIT]
        ]
        analysis = summarize(threats, len(network_data), analysis_type)

        self.db.create_network_analysis({
            'analysis_type': analysis_type,
            'input_data': {'networkData': network_data[:STORED_SAMPLE_SIZE]},
            'analysis_result': analysis,
            'metrics': {
                'processing_time_ms': int((time.monotonic() - start) * 1000),
                'model_version': model.version,
            },
        })

        logger.info(
            f"[NetworkDetection] {analysis['threatsDetected']} attacks in "
            f"{len(threats)} records using model {model.name}"
        )
        return {
            'threats': [t.to_dict() for t in threats],
            'analysis': analysis,
            'processingTime': int((time.monotonic() - start) * 1000),
        }

    def _process_record(self, model, record: Any) -> NetworkThreat:
        packet = record if isinstance(record, dict) else {}
        features = extract_features(packet, self.rng)
        prediction = run_network_inference(model, features, self.rng)
        is_attack = prediction['label'] == Prediction.ATTACK.value

        threat = NetworkThreat(
            source_ip=packet.get('sourceIP') or random_ip('192.168', self.rng),
            destination_ip=packet.get('destinationIP') or random_ip('192.168', self.rng),
            prediction=Prediction(prediction['label']),
            confidence=prediction['confidence'],
            protocol=packet.get('protocol') or random_protocol(self.rng),
            attack_type=self.rng.choice(threat_catalog.network_attack_types()) if is_attack else None,
        )

        stored = self.db.create_prediction({
            'model_id': model.id,
            'input_data': {'packet': packet, 'features': features},
            'prediction_result': prediction,
            'confidence_score': prediction['confidence'],
            'prediction_type': 'threat_detection',
            'source_ip': threat.source_ip,
            'destination_ip': threat.destination_ip,
            'processing_time_ms': self.rng.randrange(100) + 10,
        })

        if is_attack:
            self.db.create_threat_detection({
                'prediction_id': stored.id,
                'threat_type': threat.attack_type,
                'category': NETWORK_MODEL_TYPE,
                'severity': severity_from_confidence(threat.confidence).value,
                'confidence': threat.confidence,
                'source_ip': threat.source_ip,
                'destination_ip': threat.destination_ip,
                'protocol': threat.protocol,
                'attack_type': threat.attack_type,
                'indicators': threat_catalog.network_indicators(threat.attack_type),
                'mitigation_steps': threat_catalog.network_mitigations(threat.attack_type),
                'explanation': (
                    f"AI model detected {threat.attack_type} attack with "
                    f"{threat_catalog.format_percent(threat.confidence)}% confidence"
                ),
            })

        return threat
