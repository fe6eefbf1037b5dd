import json
from datetime import datetime, timedelta, timezone

import pytest

from config.app_config import ReportConfig
from core.exceptions import ValidationError
from core.report_generator import (
    ReportFilters, ReportGenerator, RECOMMENDATION_CRITICAL, RECOMMENDATION_INSIDER,
    RECOMMENDATION_MALWARE, RECOMMENDATION_NETWORK, RECOMMENDATION_NONE
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _item(category='network_intrusion', severity='high', confidence=0.8, age=timedelta(minutes=10),
          threat_type='Port scanning', **extra):
    item = {
        'category': category,
        'threatType': threat_type,
        'severity': severity,
        'confidence': confidence,
        'timestamp': (NOW - age).isoformat(),
        'explanation': 'explained',
    }
    item.update(extra)
    return item


@pytest.fixture
def generator(tmp_path):
    return ReportGenerator(config=ReportConfig(output_dir=str(tmp_path / 'reports'), detail_limit=3))


def test_filters_from_dict_defaults_and_aliases():
    assert ReportFilters.from_dict(None) == ReportFilters()
    filters = ReportFilters.from_dict({'category': 'ddos_attacks', 'reportType': 'technical', 'timeframe': '7d'})
    assert filters.category == 'ddos_attacks'
    assert filters.report_type == 'technical'
    assert ReportFilters.from_dict({'report_type': 'detailed'}).report_type == 'detailed'


@pytest.mark.parametrize("data", [
    {'category': 'aliens'},
    {'severity': 'extreme'},
    {'timeframe': '2y'},
    {'reportType': 'poem'},
])
def test_filters_reject_unknown_values(data):
    with pytest.raises(ValidationError):
        ReportFilters.from_dict(data)


def test_filter_by_category_severity_and_timeframe(generator):
    items = [
        _item(),
        _item(category='ddos_attacks'),
        _item(severity='low'),
        _item(age=timedelta(hours=2)),
        _item(age=timedelta(days=3)),
        _item(age=-timedelta(hours=1)),
        _item(timestamp='garbage'),
    ]

    hourly = ReportFilters(category='network_intrusion', severity='high', timeframe='1h')
    assert len(generator.filter_results(items, hourly, NOW)) == 1

    daily = ReportFilters(category='network_intrusion', severity='high', timeframe='24h')
    assert len(generator.filter_results(items, daily, NOW)) == 2

    everything = ReportFilters(timeframe='all')
    assert len(generator.filter_results(items, everything, NOW)) == 7


def test_top_threats_limits_to_five():
    generator = ReportGenerator()
    items = [_item(threat_type=f't{i}') for i in range(7) for _ in range(i + 1)]
    top = generator.top_threats(generator.filter_results(items, ReportFilters(timeframe='all'), NOW))
    assert [t['threat'] for t in top] == ['t6', 't5', 't4', 't3', 't2']
    assert top[0]['count'] == 7


def test_recommendations():
    generator = ReportGenerator()

    def recs(items):
        return generator.recommendations(generator.filter_results(items, ReportFilters(timeframe='all'), NOW))

    assert recs([]) == [RECOMMENDATION_NONE]
    assert recs([_item(severity='low')] * 3) == [RECOMMENDATION_NONE]
    assert recs([_item(severity='low')] * 4) == [RECOMMENDATION_NETWORK]
    assert recs([
        _item(category='malware_ransomware', severity='critical'),
        _item(category='insider_threats'),
    ]) == [RECOMMENDATION_CRITICAL, RECOMMENDATION_MALWARE, RECOMMENDATION_INSIDER]


def test_compile_report(generator):
    items = [
        _item(severity='critical', confidence=0.9),
        _item(confidence=0.7),
        _item(severity='low', confidence=0.5),
        _item(confidence=0.6),
        _item(age=timedelta(days=2)),
    ]
    report = generator.compile_report(items, ReportFilters(report_type='compliance'), NOW)

    assert report['title'] == 'CYAI Threat Detection Report - 2024-06-01'
    assert report['timeframe'] == '24h'
    summary = report['summary']
    assert summary['totalThreats'] == 4
    assert summary['criticalThreats'] == 1
    assert summary['highThreats'] == 2
    assert summary['averageConfidence'] == '67.5'
    assert len(report['detailedResults']) == 3
    assert report['metadata']['reportType'] == 'compliance'
    assert report['metadata']['filters'] == {'timeframe': '24h', 'category': 'all', 'severity': 'all'}


def test_empty_report_average_is_zero(generator):
    report = generator.compile_report([], ReportFilters(), NOW)
    assert report['summary']['averageConfidence'] == '0'
    assert report['summary']['recommendations'] == [RECOMMENDATION_NONE]


def test_filtered_stats_ignores_timeframe(generator):
    items = [_item(severity='critical'), _item(age=timedelta(days=90)), _item(category='ddos_attacks', severity='low')]
    stats = generator.filtered_stats(items, ReportFilters(category='network_intrusion', timeframe='1h'))
    assert stats == {'total': 2, 'critical': 1, 'high': 1, 'medium': 0, 'low': 0}


def test_render_text(generator):
    items = [_item(sourceIP='192.168.1.4'), _item(threat_type='Lateral movement')]
    text = generator.render_text(generator.compile_report(items, ReportFilters(), NOW))

    assert text.startswith("CYAI THREAT DETECTION REPORT\nGenerated: 2024-06-01 12:00:00 UTC")
    assert "Report Type: Executive Summary" in text
    assert "Total Threats Detected: 2" in text
    assert "Average Confidence: 80.0%" in text
    assert "• Port scanning: 1 occurrences" in text
    assert "Source: 192.168.1.4" in text
    assert "Source: N/A" in text
    assert "Target: N/A" in text
    assert "Timestamp: 2024-06-01 11:50:00" in text
    assert text.endswith("---\nReport generated by CYAI Threat Detection System")


def test_render_html_and_json(generator):
    report = generator.compile_report([_item()], ReportFilters(), NOW)
    page = generator.render_html(report)
    assert "<title>CYAI Threat Report</title>" in page
    assert "Total Threats: 1" in page
    assert "Avg Confidence: 80.0%" in page
    assert json.loads(generator.render_json(report)) == report


def test_report_filename_and_write(generator, tmp_path):
    assert ReportGenerator.report_filename(NOW) == 'cyai-threat-report-2024-06-01.txt'
    assert ReportGenerator.report_filename(NOW, 'html') == 'cyai-threat-report-2024-06-01.html'

    path = generator.write_report("body", ReportGenerator.report_filename(NOW))
    assert path == tmp_path / 'reports' / 'cyai-threat-report-2024-06-01.txt'
    assert path.read_text(encoding='utf-8') == "body"

    with pytest.raises(ValidationError):
        ReportGenerator().write_report("body", "x.txt")


def test_load_results_from_database(db):
    db.create_threat_detection({
        'threat_type': 'DDoS', 'category': 'ddos_attacks', 'severity': 'critical',
        'confidence': 0.93, 'source_ip': '192.168.0.1', 'destination_ip': '10.0.0.9',
        'indicators': ['High volume of requests'],
    })
    results = ReportGenerator(db_manager=db).load_results()
    assert len(results) == 1
    result = results[0]
    assert result.threat_type == 'DDoS'
    assert result.category == 'ddos_attacks'
    assert result.severity.value == 'critical'
    assert result.target_ip == '10.0.0.9'
    assert result.indicators == ['High volume of requests']
