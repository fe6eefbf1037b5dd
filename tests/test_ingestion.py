import json

import pytest

from core.exceptions import IngestionError, UnsupportedFormatError
from core.ingestion import (
    coerce_value, parse_csv, parse_json, parse_upload, normalize_flow,
    sample_flows, render_sample
)


@pytest.mark.parametrize("raw,expected", [
    ("42", 42),
    ("-7", -7),
    ("3.5", 3.5),
    ("1e3", 1000.0),
    ("TCP", "TCP"),
    ("", ""),
    (None, None),
    ("10.0.0.1", "10.0.0.1"),
])
def test_coerce_value(raw, expected):
    assert coerce_value(raw) == expected


def test_parse_csv_coerces_and_pads():
    text = "Src IP,Dst Port,Protocol,Label\n192.168.1.5,22,TCP,DDoS\n\n10.0.0.1,80\n"
    records = parse_csv(text)
    assert records == [
        {'Src IP': '192.168.1.5', 'Dst Port': 22, 'Protocol': 'TCP', 'Label': 'DDoS'},
        {'Src IP': '10.0.0.1', 'Dst Port': 80, 'Protocol': None, 'Label': None},
    ]


def test_parse_csv_empty_text():
    assert parse_csv("") == []
    assert parse_csv("a,b\n") == []


def test_parse_json_wraps_single_object():
    assert parse_json('{"sourceIP": "1.2.3.4"}') == [{'sourceIP': '1.2.3.4'}]
    assert parse_json('[{"a": 1}, {"a": 2}]') == [{'a': 1}, {'a': 2}]


@pytest.mark.parametrize("text", ['{not json', '[1, 2]', '"text"'])
def test_parse_json_rejects_bad_payloads(text):
    with pytest.raises(IngestionError):
        parse_json(text)


def test_parse_upload_dispatches_on_extension():
    assert parse_upload("flows.JSON", '[{"a": 1}]') == [{'a': 1}]
    assert parse_upload("flows.csv", "a\n1\n") == [{'a': 1}]


def test_parse_upload_rejects_other_formats():
    with pytest.raises(UnsupportedFormatError) as excinfo:
        parse_upload("capture.pcap", "")
    assert str(excinfo.value) == 'Unsupported file format'
    assert excinfo.value.status_code == 400


def test_normalize_flow_adds_canonical_keys():
    record = {'Src IP': '192.168.1.9', 'Dst IP': '10.0.0.2', 'Dst Port': 3389, 'Protocol': 'TCP'}
    normalized = normalize_flow(record)
    assert normalized['sourceIP'] == '192.168.1.9'
    assert normalized['destinationIP'] == '10.0.0.2'
    assert normalized['destinationPort'] == 3389
    assert normalized['protocol'] == 'TCP'
    assert normalized['Src IP'] == '192.168.1.9'
    assert 'sourceIP' not in record


def test_normalize_flow_keeps_existing_canonical_values():
    normalized = normalize_flow({'sourceIP': '1.1.1.1', 'Src IP': '2.2.2.2'})
    assert normalized['sourceIP'] == '1.1.1.1'


def test_sample_flows_are_copies():
    flows = sample_flows()
    assert len(flows) == 3
    assert [f['Label'] for f in flows] == ['BENIGN', 'DDoS', 'BENIGN']
    flows[0]['Label'] = 'changed'
    assert sample_flows()[0]['Label'] == 'BENIGN'


def test_render_sample_json():
    assert json.loads(render_sample('json')) == sample_flows()


def test_render_sample_csv_parses_back():
    text = render_sample('CSV')
    assert text.splitlines()[0].startswith('Flow Duration,Total Fwd Packets')
    assert parse_csv(text) == sample_flows()


def test_render_sample_unknown_format():
    with pytest.raises(UnsupportedFormatError):
        render_sample('xml')
