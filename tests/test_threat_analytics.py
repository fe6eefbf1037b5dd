from datetime import datetime, timezone

import pytest

from core.exceptions import ValidationError
from core.threat_analytics import (
    build_analytics, capability_assessment, category_distribution, confidence_distribution,
    hour_label, parse_timestamp, severity_breakdown, target_risk, threat_stats,
    threat_trends, top_targets, as_results
)


def _item(category='ddos_attacks', confidence=0.8, severity='high', hour=10, target=None):
    item = {
        'category': category,
        'threatType': 'x',
        'confidence': confidence,
        'severity': severity,
        'timestamp': f'2024-05-01T{hour:02d}:15:00Z',
    }
    if target:
        item['targetIP'] = target
    return item


@pytest.mark.parametrize("hour,label", [(0, '12 AM'), (1, '1 AM'), (11, '11 AM'), (12, '12 PM'), (13, '1 PM'), (23, '11 PM')])
def test_hour_label(hour, label):
    assert hour_label(hour) == label


def test_parse_timestamp_variants():
    expected = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert parse_timestamp('2024-05-01T10:00:00Z') == expected
    assert parse_timestamp('2024-05-01T12:00:00+02:00') == expected
    assert parse_timestamp('2024-05-01T10:00:00') == expected
    assert parse_timestamp(datetime(2024, 5, 1, 10, 0)) == expected
    assert parse_timestamp('soon') is None
    assert parse_timestamp(None) is None
    assert parse_timestamp('') is None


def test_threat_trends_buckets_by_utc_hour():
    results = as_results([
        _item(hour=10, confidence=0.9, severity='critical'),
        _item(hour=10, confidence=0.6, severity='low'),
        _item(hour=23, confidence=0.75, severity='high'),
    ])
    results[0].timestamp = '2024-05-01T12:15:00+02:00'
    trends = threat_trends(results)

    assert len(trends) == 24
    assert trends[0]['hour'] == '12 AM'
    assert trends[10] == {'hour': '10 AM', 'threats': 1, 'total': 2, 'critical': 1, 'high': 0}
    assert trends[23] == {'hour': '11 PM', 'threats': 1, 'total': 1, 'critical': 0, 'high': 1}
    assert sum(t['total'] for t in trends) == 3


def test_category_distribution_in_catalog_order_skips_empty():
    results = as_results([_item('deepfake_ai'), _item('network_intrusion'), _item('deepfake_ai'), _item('mystery')])
    assert category_distribution(results) == [
        {'name': 'Network Intrusions', 'value': 1, 'color': '#ef4444'},
        {'name': 'Deepfake & AI Attacks', 'value': 2, 'color': '#8b5cf6'},
    ]


def test_severity_breakdown_order():
    results = as_results([_item(severity='low'), _item(severity='critical'), _item(severity='low')])
    assert severity_breakdown(results) == [
        {'name': 'Critical', 'value': 1, 'color': '#ef4444'},
        {'name': 'Low', 'value': 2, 'color': '#22c55e'},
    ]


def test_confidence_distribution_band_edges():
    results = as_results([_item(confidence=c) for c in (0.95, 0.9, 0.89, 0.8, 0.7, 0.65, 0.2)])
    assert confidence_distribution(results) == [
        {'range': '90-100%', 'count': 2},
        {'range': '80-89%', 'count': 2},
        {'range': '70-79%', 'count': 1},
        {'range': '60-69%', 'count': 1},
        {'range': '<60%', 'count': 1},
    ]


def test_capability_assessment_uses_first_word():
    results = as_results([
        _item('zero_day_apt', confidence=0.8),
        _item('zero_day_apt', confidence=0.6),
        _item('ddos_attacks', confidence=0.5),
    ])
    assessment = capability_assessment(results)
    assert [a['category'] for a in assessment] == ['Zero-Day', 'DoS/DDoS']
    assert assessment[0]['detection'] == pytest.approx(70)
    assert assessment[0]['prevention'] == pytest.approx(56)
    assert assessment[0]['response'] == pytest.approx(63)
    assert assessment[0]['fullMark'] == 100


@pytest.mark.parametrize("count,risk", [(1, 'Low'), (2, 'Low'), (3, 'Medium'), (5, 'Medium'), (6, 'High')])
def test_target_risk(count, risk):
    assert target_risk(count) == risk


def test_top_targets_counts_and_limits():
    items = [_item(target='10.0.0.1')] * 6 + [_item(target='10.0.0.2')] * 3 + [_item()]
    targets = top_targets(as_results(items), limit=1)
    assert targets == [{'ip': '10.0.0.1', 'count': 6, 'risk': 'High'}]


def test_threat_stats():
    results = as_results([_item(confidence=0.9, severity='critical'), _item(confidence=0.7)])
    stats = threat_stats(results)
    assert stats['total'] == 2
    assert stats['critical'] == 1
    assert stats['highConfidence'] == 1
    assert stats['avgConfidence'] == pytest.approx(0.8)
    assert threat_stats([])['avgConfidence'] == 0


def test_build_analytics_empty():
    analytics = build_analytics([])
    assert analytics['stats']['total'] == 0
    assert len(analytics['threatTrends']) == 24
    assert analytics['categoryDistribution'] == []
    assert analytics['severityBreakdown'] == []
    assert analytics['threatEvolution'] == []
    assert analytics['topTargets'] == []
    assert [band['count'] for band in analytics['confidenceDistribution']] == [0] * 5


def test_as_results_passes_results_through_and_coerces_dicts():
    results = as_results([_item(confidence='0.75')])
    assert results[0].confidence == 0.75
    assert as_results(results)[0] is results[0]


@pytest.mark.parametrize("items,message", [
    (['x'], 'detectionResults[0] must be an object'),
    ([_item(), 42], 'detectionResults[1] must be an object'),
    ([_item(confidence='high')], "detectionResults[0]: confidence must be a number, got 'high'"),
    ([_item(confidence=[0.9])], 'detectionResults[0]: confidence must be a number'),
    ([_item(confidence=True)], 'detectionResults[0]: confidence must be a number'),
])
def test_as_results_rejects_malformed_items(items, message):
    with pytest.raises(ValidationError) as excinfo:
        as_results(items)
    assert str(excinfo.value).startswith(message)
