import json

import pytest

from api.cli import build_parser, main


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point the CLI at a throwaway data dir with instant pipeline stages"""
    monkeypatch.setenv("CYAI_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("PIPELINE_STAGE_DELAY", "0")
    monkeypatch.setenv("PIPELINE_STAGE_JITTER", "0")
    monkeypatch.setenv("SCAN_TICK_INTERVAL", "0.01")
    monkeypatch.setenv("DETECTION_SERVICE_URL", "http://127.0.0.1:9")
    monkeypatch.setenv("DETECTION_SERVICE_TIMEOUT", "2")
    monkeypatch.setattr("config.app_config._config", None)
    monkeypatch.setattr("database.db_manager._db_manager", None)
    return tmp_path


def test_parser_defaults():
    args = build_parser().parse_args(["report"])
    assert args.category == "all"
    assert args.timeframe == "24h"
    assert args.report_type == "executive"
    assert args.format == "text"


def test_parser_rejects_unknown_category():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["analyze", "toaster"])


def test_categories_lists_all(cli_env, capsys):
    assert main(["categories"]) == 0
    out = capsys.readouterr().out
    assert "network_intrusion" in out
    assert "deepfake_ai" in out


def test_category_details(cli_env, capsys):
    assert main(["categories", "zero_day_apt"]) == 0
    assert "Threat Category: Zero-Day & APTs" in capsys.readouterr().out
    assert main(["categories", "nope"]) == 1


def test_scan_file_falls_back_offline(cli_env, capsys):
    flows = cli_env / "flows.json"
    flows.write_text(json.dumps([{"sourceIP": "192.168.9.9", "protocol": "TCP"}]), encoding="utf-8")
    assert main(["scan", str(flows)]) == 0
    out = capsys.readouterr().out
    assert "Loaded 1 records" in out
    assert "local fallback" in out


def test_scan_missing_file(cli_env):
    assert main(["scan", str(cli_env / "absent.csv")]) == 1


def test_scan_unsupported_file(cli_env):
    capture = cli_env / "capture.pcap"
    capture.write_text("binary", encoding="utf-8")
    assert main(["scan", str(capture)]) == 1


def test_analyze_falls_back_offline(cli_env, capsys):
    assert main(["analyze", "ddos_attacks", "--data", '{"rps": 20000}']) == 0
    out = capsys.readouterr().out
    assert "Key Features" in out
    assert "local mock detection" in out


def test_analyze_invalid_json(cli_env):
    assert main(["analyze", "ddos_attacks", "--data", "{oops"]) == 1


def test_report_to_file(cli_env):
    output = cli_env / "out" / "report.txt"
    assert main(["report", "--timeframe", "all", "--output", str(output)]) == 0
    text = output.read_text(encoding="utf-8")
    assert text.startswith("CYAI THREAT DETECTION REPORT")
    assert "Total Threats Detected: 0" in text


def test_report_saved_as_json(cli_env):
    assert main(["report", "--format", "json", "--save"]) == 0
    saved = list((cli_env / "data" / "reports").glob("cyai-threat-report-*.json"))
    assert len(saved) == 1
    assert json.loads(saved[0].read_text(encoding="utf-8"))["summary"]["totalThreats"] == 0
