"""
CYAI Threat Report Generator

Generates threat detection reports as plain text, an HTML print preview
or JSON from filtered detection results.
"""

from __future__ import annotations

import html
import json
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Any, Iterable, Union

from schemas.threat_schema import DetectionResult, Severity
from database.db_manager import get_db_manager
from .exceptions import ValidationError
from . import threat_catalog
from .threat_analytics import as_results, parse_timestamp

logger = logging.getLogger(__name__)

TIMEFRAMES = {
    '1h': timedelta(hours=1),
    '24h': timedelta(hours=24),
    '7d': timedelta(days=7),
    '30d': timedelta(days=30),
    'all': None,
}

REPORT_TYPES = {
    'executive': 'Executive Summary',
    'technical': 'Technical Analysis',
    'detailed': 'Detailed Investigation',
    'compliance': 'Compliance Report',
}

TOP_THREAT_LIMIT = 5
DEFAULT_DETAIL_LIMIT = 20

RECOMMENDATION_CRITICAL = (
    'Immediate attention required for critical threats - implement emergency response procedures'
)
RECOMMENDATION_NETWORK = (
    'High network intrusion activity detected - review firewall rules and network segmentation'
)
RECOMMENDATION_MALWARE = (
    'Malware detected - ensure backup systems are isolated and consider endpoint protection updates'
)
RECOMMENDATION_INSIDER = (
    'Insider threat activity detected - review user access privileges and monitoring policies'
)
RECOMMENDATION_NONE = (
    'No immediate threats detected - maintain current security posture and monitoring'
)


@dataclass
class ReportFilters:
    """Report filter selections"""
    category: str = 'all'
    severity: str = 'all'
    timeframe: str = '24h'
    report_type: str = 'executive'

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ReportFilters':
        data = data or {}
        filters = cls(
            category=data.get('category') or 'all',
            severity=data.get('severity') or 'all',
            timeframe=data.get('timeframe') or '24h',
            report_type=data.get('reportType') or data.get('report_type') or 'executive',
        )
        filters.validate()
        return filters

    def validate(self):
        if self.category != 'all' and not threat_catalog.is_known_category(self.category):
            raise ValidationError(f"Unknown category: {self.category}")
        if self.severity != 'all' and self.severity not in {s.value for s in Severity}:
            raise ValidationError(f"Unknown severity: {self.severity}")
        if self.timeframe not in TIMEFRAMES:
            raise ValidationError(f"Unknown timeframe: {self.timeframe}")
        if self.report_type not in REPORT_TYPES:
            raise ValidationError(f"Unknown report type: {self.report_type}")


def _severity(result: DetectionResult) -> str:
    return Severity(result.severity).value


def _percent(value: float) -> str:
    return f"{value * 100:.1f}"


class ReportGenerator:
    """
    Threat detection report generator

    Reports include:
    - Executive Summary
    - Top Threats
    - Recommendations
    - Detailed Findings
    """

    def __init__(self, db_manager=None, config=None):
        self._db_manager = db_manager
        self.detail_limit = config.detail_limit if config is not None else DEFAULT_DETAIL_LIMIT
        self.output_dir = Path(config.output_dir) if config is not None else None

    @property
    def db_manager(self):
        if self._db_manager is None:
            self._db_manager = get_db_manager()
        return self._db_manager

    def load_results(self, limit: int = 100) -> List[DetectionResult]:
        """Stored detections as detection results"""
        return [
            DetectionResult.from_dict(detection.to_dict())
            for detection in self.db_manager.list_threat_detections(limit)
        ]

    # ==================== Filtering ====================

    def filter_results(
        self,
        results: Iterable[Union[DetectionResult, Dict[str, Any]]],
        filters: ReportFilters,
        now: Optional[datetime] = None,
        apply_timeframe: bool = True
    ) -> List[DetectionResult]:
        now = now or datetime.now(timezone.utc)
        window = TIMEFRAMES[filters.timeframe] if apply_timeframe else None
        filtered = []

        for result in as_results(results):
            if filters.category != 'all' and result.category != filters.category:
                continue
            if filters.severity != 'all' and _severity(result) != filters.severity:
                continue
            if window is not None:
                timestamp = parse_timestamp(result.timestamp)
                if timestamp is None or timestamp < now - window or timestamp > now:
                    continue
            filtered.append(result)

        return filtered

    # ==================== Summary ====================

    @staticmethod
    def top_threats(results: List[DetectionResult], limit: int = TOP_THREAT_LIMIT) -> List[Dict[str, Any]]:
        counts = Counter(r.threat_type for r in results)
        return [{'threat': threat, 'count': count} for threat, count in counts.most_common(limit)]

    @staticmethod
    def recommendations(results: List[DetectionResult]) -> List[str]:
        categories = Counter(r.category for r in results)
        recommendations = []

        if any(_severity(r) == 'critical' for r in results):
            recommendations.append(RECOMMENDATION_CRITICAL)
        if categories['network_intrusion'] > 3:
            recommendations.append(RECOMMENDATION_NETWORK)
        if categories['malware_ransomware'] > 0:
            recommendations.append(RECOMMENDATION_MALWARE)
        if categories['insider_threats'] > 0:
            recommendations.append(RECOMMENDATION_INSIDER)
        if not recommendations:
            recommendations.append(RECOMMENDATION_NONE)

        return recommendations

    def summarize(self, results: List[DetectionResult]) -> Dict[str, Any]:
        total = len(results)
        return {
            'totalThreats': total,
            'criticalThreats': sum(1 for r in results if _severity(r) == 'critical'),
            'highThreats': sum(1 for r in results if _severity(r) == 'high'),
            'averageConfidence': _percent(sum(r.confidence for r in results) / total) if total else '0',
            'topThreats': self.top_threats(results),
            'recommendations': self.recommendations(results),
        }

    def compile_report(
        self,
        results: Iterable[Union[DetectionResult, Dict[str, Any]]],
        filters: Optional[ReportFilters] = None,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Filtered report content"""
        filters = filters or ReportFilters()
        now = now or datetime.now(timezone.utc)
        filtered = self.filter_results(results, filters, now)

        return {
            'title': f"CYAI Threat Detection Report - {now.strftime('%Y-%m-%d')}",
            'timeframe': filters.timeframe,
            'summary': self.summarize(filtered),
            'detailedResults': [r.to_dict() for r in filtered[:self.detail_limit]],
            'metadata': {
                'generatedAt': now.isoformat(),
                'reportType': filters.report_type,
                'filters': {
                    'timeframe': filters.timeframe,
                    'category': filters.category,
                    'severity': filters.severity,
                },
            },
        }

    def filtered_stats(
        self,
        results: Iterable[Union[DetectionResult, Dict[str, Any]]],
        filters: Optional[ReportFilters] = None
    ) -> Dict[str, int]:
        """Severity counts for the category and severity selections"""
        filtered = self.filter_results(results, filters or ReportFilters(), apply_timeframe=False)
        counts = Counter(_severity(r) for r in filtered)
        return {
            'total': len(filtered),
            'critical': counts['critical'],
            'high': counts['high'],
            'medium': counts['medium'],
            'low': counts['low'],
        }

    # ==================== Rendering ====================

    def render_text(self, report: Dict[str, Any]) -> str:
        summary = report['summary']
        generated = parse_timestamp(report['metadata']['generatedAt'])
        report_type = report['metadata'].get('reportType') or 'executive'

        lines = [
            "CYAI THREAT DETECTION REPORT",
            f"Generated: {generated.strftime('%Y-%m-%d %H:%M:%S')} UTC",
            f"Report Type: {REPORT_TYPES.get(report_type, report_type)}",
            "",
            "EXECUTIVE SUMMARY",
            "================",
            f"Total Threats Detected: {summary['totalThreats']}",
            f"Critical Threats: {summary['criticalThreats']}",
            f"High Priority Threats: {summary['highThreats']}",
            f"Average Confidence: {summary['averageConfidence']}%",
            "",
            "TOP THREATS",
            "===========",
            *[f"• {t['threat']}: {t['count']} occurrences" for t in summary['topThreats']],
            "",
            "RECOMMENDATIONS",
            "===============",
            *[f"• {rec}" for rec in summary['recommendations']],
            "",
            "DETAILED FINDINGS",
            "=================",
        ]

        for result in report['detailedResults']:
            timestamp = parse_timestamp(result.get('timestamp'))
            lines.extend([
                "",
                f"Threat: {result.get('threatType')}",
                f"Category: {result.get('category')}",
                f"Severity: {result.get('severity')}",
                f"Confidence: {_percent(result.get('confidence', 0))}%",
                f"Source: {result.get('sourceIP') or 'N/A'}",
                f"Target: {result.get('targetIP') or 'N/A'}",
                f"Timestamp: {timestamp.strftime('%Y-%m-%d %H:%M:%S') if timestamp else 'N/A'}",
                f"Explanation: {result.get('explanation')}",
            ])

        lines.extend(["", "---", "Report generated by CYAI Threat Detection System"])
        return "\n".join(lines)

    def render_html(self, report: Dict[str, Any]) -> str:
        """Print preview with the summary statistics"""
        summary = report['summary']
        generated = parse_timestamp(report['metadata']['generatedAt'])
        return f"""<html>
  <head>
    <title>CYAI Threat Report</title>
    <style>
      body {{ font-family: Arial, sans-serif; margin: 20px; }}
      .header {{ border-bottom: 2px solid #333; padding-bottom: 10px; }}
      .summary {{ margin: 20px 0; }}
      .stat {{ display: inline-block; margin: 10px 20px 10px 0; }}
    </style>
  </head>
  <body>
    <div class="header">
      <h1>CYAI Threat Detection Report</h1>
      <p>Generated: {html.escape(generated.strftime('%Y-%m-%d %H:%M:%S'))} UTC</p>
    </div>
    <div class="summary">
      <h2>Executive Summary</h2>
      <div class="stat">Total Threats: {summary['totalThreats']}</div>
      <div class="stat">Critical: {summary['criticalThreats']}</div>
      <div class="stat">High Priority: {summary['highThreats']}</div>
      <div class="stat">Avg Confidence: {html.escape(str(summary['averageConfidence']))}%</div>
    </div>
  </body>
</html>
"""

    def render_json(self, report: Dict[str, Any]) -> str:
        return json.dumps(report, indent=2, ensure_ascii=False)

    @staticmethod
    def report_filename(now: Optional[datetime] = None, extension: str = 'txt') -> str:
        now = now or datetime.now(timezone.utc)
        return f"cyai-threat-report-{now.strftime('%Y-%m-%d')}.{extension}"

    def write_report(self, content: str, filename: str, output_dir: Optional[str] = None) -> Path:
        """Write a rendered report into the report directory"""
        directory = Path(output_dir) if output_dir else self.output_dir
        if directory is None:
            raise ValidationError("No report output directory configured")
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_text(content, encoding='utf-8')
        logger.info(f"[Reports] Wrote {path}")
        return path
