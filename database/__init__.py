"""
CYAI Threat Platform - Database Module

Provides persistent storage with SQLite (dev) / PostgreSQL (prod)
"""

from .models import (
    Base, AIModel, AIPrediction, NetworkAnalysis, ThreatDetection,
    DETECTION_STATUSES
)
from .db_manager import DatabaseManager, get_db_manager, init_db

__all__ = [
    'Base', 'AIModel', 'AIPrediction', 'NetworkAnalysis', 'ThreatDetection',
    'DETECTION_STATUSES', 'DatabaseManager', 'get_db_manager', 'init_db'
]
