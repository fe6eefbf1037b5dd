"""
CYAI Threat Analytics

Aggregations over detection results for the analytics dashboard.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from schemas.threat_schema import DetectionResult, Severity
from .exceptions import ValidationError
from . import threat_catalog

CATEGORY_COLORS = {
    'network_intrusion': '#ef4444',
    'malware_ransomware': '#dc2626',
    'phishing_social': '#f59e0b',
    'insider_threats': '#f97316',
    'zero_day_apt': '#ef4444',
    'data_exfiltration': '#dc2626',
    'ddos_attacks': '#f59e0b',
    'deepfake_ai': '#8b5cf6',
}
DEFAULT_CATEGORY_COLOR = '#6b7280'

SEVERITY_COLORS = [
    (Severity.CRITICAL, 'Critical', '#ef4444'),
    (Severity.HIGH, 'High', '#f59e0b'),
    (Severity.MEDIUM, 'Medium', '#eab308'),
    (Severity.LOW, 'Low', '#22c55e'),
]

CONFIDENCE_BANDS = [
    ('90-100%', 0.9, None),
    ('80-89%', 0.8, 0.9),
    ('70-79%', 0.7, 0.8),
    ('60-69%', 0.6, 0.7),
    ('<60%', None, 0.6),
]

TOP_TARGET_LIMIT = 10


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO timestamp (``Z`` suffix allowed) as an aware UTC datetime"""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def as_results(items: Iterable[Union[DetectionResult, Dict[str, Any]]]) -> List[DetectionResult]:
    """Coerce wire dictionaries into results; malformed items raise ValidationError"""
    results = []
    for index, item in enumerate(items):
        if isinstance(item, DetectionResult):
            results.append(item)
            continue
        if not isinstance(item, dict):
            raise ValidationError(f"detectionResults[{index}] must be an object")
        try:
            results.append(DetectionResult.from_dict(item))
        except (TypeError, ValueError) as e:
            raise ValidationError(f"detectionResults[{index}]: {e}") from e
    return results


def hour_label(hour: int) -> str:
    """12-hour clock label, e.g. 0 -> '12 AM', 13 -> '1 PM'"""
    suffix = 'AM' if hour < 12 else 'PM'
    return f"{hour % 12 or 12} {suffix}"


def _severity(result: DetectionResult) -> str:
    return Severity(result.severity).value


def threat_trends(results: List[DetectionResult]) -> List[Dict[str, Any]]:
    """24 hourly buckets keyed by the UTC hour of each result"""
    buckets: Dict[int, List[DetectionResult]] = {hour: [] for hour in range(24)}
    for result in results:
        timestamp = parse_timestamp(result.timestamp)
        if timestamp is not None:
            buckets[timestamp.hour].append(result)

    return [
        {
            'hour': hour_label(hour),
            'threats': sum(1 for r in bucket if r.confidence > 0.7),
            'total': len(bucket),
            'critical': sum(1 for r in bucket if _severity(r) == 'critical'),
            'high': sum(1 for r in bucket if _severity(r) == 'high'),
        }
        for hour, bucket in buckets.items()
    ]


def category_distribution(results: List[DetectionResult]) -> List[Dict[str, Any]]:
    counts = Counter(r.category for r in results)
    return [
        {
            'name': category.name,
            'value': counts[category.id],
            'color': CATEGORY_COLORS.get(category.id, DEFAULT_CATEGORY_COLOR),
        }
        for category in threat_catalog.list_categories()
        if counts[category.id] > 0
    ]


def severity_breakdown(results: List[DetectionResult]) -> List[Dict[str, Any]]:
    counts = Counter(_severity(r) for r in results)
    return [
        {'name': name, 'value': counts[severity.value], 'color': color}
        for severity, name, color in SEVERITY_COLORS
        if counts[severity.value] > 0
    ]


def confidence_distribution(results: List[DetectionResult]) -> List[Dict[str, Any]]:
    distribution = []
    for label, lower, upper in CONFIDENCE_BANDS:
        count = sum(
            1 for r in results
            if (lower is None or r.confidence >= lower) and (upper is None or r.confidence < upper)
        )
        distribution.append({'range': label, 'count': count})
    return distribution


def capability_assessment(results: List[DetectionResult]) -> List[Dict[str, Any]]:
    """Detection / prevention / response scores per category with results"""
    assessment = []
    for category in threat_catalog.list_categories():
        confidences = [r.confidence for r in results if r.category == category.id]
        average = sum(confidences) / len(confidences) if confidences else 0
        if average <= 0:
            continue
        assessment.append({
            'category': category.name.split(' ')[0],
            'detection': average * 100,
            'prevention': average * 0.8 * 100,
            'response': average * 0.9 * 100,
            'fullMark': 100,
        })
    return assessment


def target_risk(count: int) -> str:
    if count > 5:
        return 'High'
    if count > 2:
        return 'Medium'
    return 'Low'


def top_targets(results: List[DetectionResult], limit: int = TOP_TARGET_LIMIT) -> List[Dict[str, Any]]:
    counts = Counter(r.target_ip for r in results if r.target_ip)
    return [
        {'ip': ip, 'count': count, 'risk': target_risk(count)}
        for ip, count in counts.most_common(limit)
    ]


def threat_stats(results: List[DetectionResult]) -> Dict[str, Any]:
    total = len(results)
    return {
        'total': total,
        'critical': sum(1 for r in results if _severity(r) == 'critical'),
        'highConfidence': sum(1 for r in results if r.confidence > 0.8),
        'avgConfidence': sum(r.confidence for r in results) / total if total else 0,
    }


def build_analytics(items: Iterable[Union[DetectionResult, Dict[str, Any]]]) -> Dict[str, Any]:
    """Every dashboard aggregate in one payload"""
    results = as_results(items)
    return {
        'stats': threat_stats(results),
        'threatTrends': threat_trends(results),
        'categoryDistribution': category_distribution(results),
        'severityBreakdown': severity_breakdown(results),
        'confidenceDistribution': confidence_distribution(results),
        'threatEvolution': capability_assessment(results),
        'topTargets': top_targets(results),
    }
