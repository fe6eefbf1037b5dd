"""
CYAI Analysis Pipeline

Staged detection analysis and network scans with progress reporting. The
remote detection call never fails a run: on any error the local random
generator is substituted.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from schemas.threat_schema import AIExplanation, DetectionResult, NetworkThreat
from config.app_config import PipelineConfig
from .alerting import threat_level
from .detection_client import DetectionServiceClient
from .exceptions import ValidationError
from .explanation import generate_ai_explanation
from .mock_detection import generate_mock_detection, fallback_network_detection

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]

ANALYSIS_STAGES = [
    'Preprocessing data inputs...',
    'Extracting behavioral features...',
    'Running anomaly detection models...',
    'Applying threat-specific algorithms...',
    'Correlating with threat intelligence...',
    'Generating AI explanations...',
    'Finalizing detection results...',
]

STAGE_PROGRESS_CEILING = 90
SCAN_PROGRESS_STEP = 10
SCAN_STAGE = 'Scanning network traffic...'
COMPLETE_STAGE = 'Complete'


@dataclass
class AnalysisOutcome:
    """Result of a staged detection analysis"""
    result: DetectionResult
    explanation: AIExplanation
    used_fallback: bool
    model_used: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'result': self.result.to_dict(),
            'explanation': self.explanation.to_dict(),
            'usedFallback': self.used_fallback,
            'modelUsed': self.model_used,
        }


@dataclass
class ScanOutcome:
    """Result of a network threat scan"""
    threats: List[NetworkThreat] = field(default_factory=list)
    total_scanned: int = 0
    attack_count: int = 0
    threat_level: str = 'low'
    used_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'threats': [t.to_dict() for t in self.threats],
            'totalScanned': self.total_scanned,
            'attackCount': self.attack_count,
            'benignCount': len(self.threats) - self.attack_count,
            'threatLevel': self.threat_level,
            'usedFallback': self.used_fallback,
        }


class AnalysisPipeline:
    """
    Runs detection work against the remote functions.

    Args:
        client: Detection service client
        config: Stage timing; zero delays make runs instantaneous
        rng: Random source for delays and fallback data
    """

    def __init__(
        self,
        client: DetectionServiceClient,
        config: Optional[PipelineConfig] = None,
        rng: Optional[random.Random] = None
    ):
        self.client = client
        self.config = config or PipelineConfig()
        self.rng = rng or random.Random()

    @staticmethod
    def _report(progress: Optional[ProgressCallback], value: float, stage: str):
        if progress is not None:
            progress(value, stage)

    async def run_detection_analysis(
        self,
        simulation_data: Any,
        category: str,
        progress: Optional[ProgressCallback] = None
    ) -> AnalysisOutcome:
        """Walk the analysis stages, then ask the remote function for a verdict"""
        total = len(ANALYSIS_STAGES)
        for index, stage in enumerate(ANALYSIS_STAGES):
            self._report(progress, index / total * STAGE_PROGRESS_CEILING, stage)
            await asyncio.sleep(self.config.stage_delay + self.rng.random() * self.config.stage_jitter)
            self._report(progress, (index + 1) / total * STAGE_PROGRESS_CEILING, stage)

        used_fallback = False
        model_used = None
        try:
            data = await self.client.detect_advanced(simulation_data, category)
            if not isinstance(data.get('result'), dict):
                raise ValueError('response has no result')
            result = DetectionResult.from_dict(data['result'])
            model_used = data.get('modelUsed')
        except Exception as e:
            logger.error(f"[Pipeline] Advanced AI detection failed: {e}")
            result = generate_mock_detection(category, self.rng)
            used_fallback = True

        explanation = generate_ai_explanation(result, simulation_data)
        self._report(progress, 100, COMPLETE_STAGE)
        logger.info(f"[Pipeline] {result.threat_type} detected with {result.confidence * 100:.1f}% confidence")

        return AnalysisOutcome(
            result=result,
            explanation=explanation,
            used_fallback=used_fallback,
            model_used=model_used,
        )

    async def run_threat_scan(
        self,
        network_data: List[Dict[str, Any]],
        analysis_type: str = 'network_intrusion',
        progress: Optional[ProgressCallback] = None
    ) -> ScanOutcome:
        """Scan flow records while a ticker advances progress up to 90"""
        if not network_data:
            raise ValidationError('No data available')

        state = {'progress': 0}
        self._report(progress, 0, SCAN_STAGE)

        async def tick():
            while state['progress'] < STAGE_PROGRESS_CEILING:
                await asyncio.sleep(self.config.scan_tick_interval)
                state['progress'] = min(state['progress'] + SCAN_PROGRESS_STEP, STAGE_PROGRESS_CEILING)
                self._report(progress, state['progress'], SCAN_STAGE)

        ticker = asyncio.ensure_future(tick())
        used_fallback = False
        try:
            data = await self.client.detect_threats(network_data, analysis_type)
            raw_threats = data.get('threats') or []
            threats = [NetworkThreat.from_dict(t) for t in raw_threats if isinstance(t, dict)]
        except Exception as e:
            logger.error(f"[Pipeline] AI threat detection failed: {e}")
            threats = fallback_network_detection(network_data, self.rng)
            used_fallback = True
        finally:
            ticker.cancel()
            try:
                await ticker
            except asyncio.CancelledError:
                pass

        attack_count = sum(1 for t in threats if t.is_attack)
        self._report(progress, 100, COMPLETE_STAGE)
        logger.info(f"[Pipeline] Analysis complete. Found {attack_count} potential threats.")

        return ScanOutcome(
            threats=threats,
            total_scanned=len(network_data),
            attack_count=attack_count,
            threat_level=threat_level(attack_count),
            used_fallback=used_fallback,
        )
