"""
CYAI Alerting

Turns network verdicts into dashboard alerts and keeps the rolling alert
feed and detection history.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from schemas.threat_schema import DetectionResult, NetworkThreat

MAX_ALERTS = 10
MAX_HISTORY = 100
UNKNOWN_LOCATION = 'Unknown Location'


@dataclass
class Alert:
    """Dashboard alert raised for an attack verdict"""
    id: str
    type: str  # critical, warning, info
    title: str
    description: str
    timestamp: str
    source_ip: str
    attack_type: Optional[str]
    confidence: float
    location: str = UNKNOWN_LOCATION

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type,
            'title': self.title,
            'description': self.description,
            'timestamp': self.timestamp,
            'sourceIP': self.source_ip,
            'attackType': self.attack_type,
            'confidence': self.confidence,
            'location': self.location,
        }


def alert_type(confidence: float) -> str:
    if confidence > 0.9:
        return 'critical'
    if confidence > 0.8:
        return 'warning'
    return 'info'


def threats_to_alerts(threats: Iterable[Union[NetworkThreat, Dict[str, Any]]]) -> List[Alert]:
    """One alert per attack verdict, in input order"""
    alerts = []
    for threat in threats:
        if isinstance(threat, dict):
            threat = NetworkThreat.from_dict(threat)
        if not threat.is_attack:
            continue
        alerts.append(Alert(
            id=threat.id,
            type=alert_type(threat.confidence),
            title=f"{threat.attack_type} Attack Detected",
            description=f"Malicious traffic from {threat.source_ip} targeting {threat.destination_ip}",
            timestamp=threat.timestamp,
            source_ip=threat.source_ip,
            attack_type=threat.attack_type,
            confidence=threat.confidence,
        ))
    return alerts


def threat_level(attack_count: int) -> str:
    """Overall threat level shown in the header"""
    if attack_count == 0:
        return 'low'
    if attack_count <= 2:
        return 'medium'
    if attack_count <= 5:
        return 'high'
    return 'critical'


class AlertFeed:
    """Newest-first alert list capped at ``limit`` entries"""

    def __init__(self, limit: int = MAX_ALERTS):
        self.limit = limit
        self._alerts: List[Alert] = []
        self._lock = threading.Lock()

    def add_threats(self, threats) -> List[Alert]:
        new_alerts = threats_to_alerts(threats)
        with self._lock:
            self._alerts = (new_alerts + self._alerts)[:self.limit]
        return new_alerts

    def dismiss(self, alert_id: str) -> bool:
        with self._lock:
            before = len(self._alerts)
            self._alerts = [a for a in self._alerts if a.id != alert_id]
            return len(self._alerts) < before

    def clear(self):
        with self._lock:
            self._alerts = []

    @property
    def alerts(self) -> List[Alert]:
        with self._lock:
            return list(self._alerts)

    def __len__(self) -> int:
        return len(self._alerts)


class DetectionHistory:
    """Newest-first detection results, capped at ``limit`` entries"""

    def __init__(self, limit: int = MAX_HISTORY):
        self.limit = limit
        self._results: List[DetectionResult] = []
        self._lock = threading.Lock()

    def add(self, result: DetectionResult):
        with self._lock:
            self._results = [result] + self._results[:self.limit - 1]

    def clear(self):
        with self._lock:
            self._results = []

    @property
    def results(self) -> List[DetectionResult]:
        with self._lock:
            return list(self._results)

    def __len__(self) -> int:
        return len(self._results)
