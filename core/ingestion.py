"""
CYAI Data Ingestion

Parses uploaded CSV / JSON flow files into record lists and provides the
built-in three-flow sample dataset.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import IngestionError, UnsupportedFormatError

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ('csv', 'json')

_INT_RE = re.compile(r'^[+-]?\d+$')
_FLOAT_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')

# Canonical key -> accepted source column names (CIC-IDS style first)
FLOW_KEY_ALIASES = {
    'sourceIP': ('Src IP', 'Source IP', 'src_ip', 'source_ip'),
    'destinationIP': ('Dst IP', 'Destination IP', 'dst_ip', 'destination_ip'),
    'sourcePort': ('Src Port', 'Source Port', 'src_port', 'source_port'),
    'destinationPort': ('Dst Port', 'Destination Port', 'dst_port', 'destination_port'),
    'protocol': ('Protocol', 'proto'),
    'size': ('Packet Length Mean', 'Average Packet Size', 'Total Length of Fwd Packets', 'packet_size'),
    'label': ('Label', 'label'),
}

SAMPLE_FLOWS: List[Dict[str, Any]] = [
    {
        'Flow Duration': 120000,
        'Total Fwd Packets': 10,
        'Total Backward Packets': 8,
        'Flow Bytes/s': 1500,
        'Flow Packets/s': 12,
        'Protocol': 'TCP',
        'Src Port': 80,
        'Dst Port': 443,
        'Src IP': '192.168.1.100',
        'Dst IP': '10.0.0.50',
        'Flow IAT Mean': 1000,
        'Flow IAT Std': 500,
        'Flow IAT Max': 2000,
        'Flow IAT Min': 100,
        'Label': 'BENIGN',
    },
    {
        'Flow Duration': 5000,
        'Total Fwd Packets': 100,
        'Total Backward Packets': 2,
        'Flow Bytes/s': 50000,
        'Flow Packets/s': 200,
        'Protocol': 'TCP',
        'Src Port': 12345,
        'Dst Port': 22,
        'Src IP': '192.168.1.200',
        'Dst IP': '10.0.0.100',
        'Flow IAT Mean': 50,
        'Flow IAT Std': 25,
        'Flow IAT Max': 100,
        'Flow IAT Min': 10,
        'Label': 'DDoS',
    },
    {
        'Flow Duration': 300000,
        'Total Fwd Packets': 50,
        'Total Backward Packets': 45,
        'Flow Bytes/s': 800,
        'Flow Packets/s': 5,
        'Protocol': 'UDP',
        'Src Port': 53,
        'Dst Port': 8080,
        'Src IP': '192.168.1.150',
        'Dst IP': '10.0.0.75',
        'Flow IAT Mean': 6000,
        'Flow IAT Std': 2000,
        'Flow IAT Max': 10000,
        'Flow IAT Min': 2000,
        'Label': 'BENIGN',
    },
]


def coerce_value(value: Optional[str]) -> Any:
    """Numeric-looking strings become int / float; everything else is kept"""
    if value is None:
        return None
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        return float(value)
    return value


def parse_csv(text: str) -> List[Dict[str, Any]]:
    """Header row followed by data rows; short rows get None for missing cells"""
    rows = list(csv.reader(io.StringIO(text.strip())))
    if not rows:
        return []

    headers = [h.strip() for h in rows[0]]
    records = []
    for row in rows[1:]:
        if not any(cell.strip() for cell in row):
            continue
        values = [cell.strip() for cell in row]
        records.append({
            header: coerce_value(values[index]) if index < len(values) else None
            for index, header in enumerate(headers)
        })
    return records


def parse_json(text: str) -> List[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise IngestionError(f"Invalid JSON: {e.msg} (line {e.lineno})")

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise IngestionError("JSON upload must be an object or a list of objects")
    return data


def parse_upload(file_name: str, text: str) -> List[Dict[str, Any]]:
    """Parse an uploaded file by its extension"""
    suffix = Path(file_name or '').suffix.lower()
    if suffix == '.json':
        records = parse_json(text)
    elif suffix == '.csv':
        try:
            records = parse_csv(text)
        except csv.Error as e:
            raise IngestionError(f"Invalid CSV: {e}")
    else:
        raise UnsupportedFormatError('Unsupported file format')

    logger.info(f"[Ingestion] Parsed {len(records)} records from {file_name}")
    return records


def normalize_flow(record: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``record`` with canonical flow keys added; original keys kept"""
    normalized = dict(record)
    for key, aliases in FLOW_KEY_ALIASES.items():
        if normalized.get(key) is not None:
            continue
        for alias in aliases:
            if record.get(alias) is not None:
                normalized[key] = record[alias]
                break
    return normalized


def sample_flows() -> List[Dict[str, Any]]:
    return [dict(row) for row in SAMPLE_FLOWS]


def render_sample(fmt: str = 'json') -> str:
    """Sample dataset as CSV or JSON text"""
    fmt = (fmt or 'json').lower()
    if fmt not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError('Unsupported file format')

    if fmt == 'json':
        return json.dumps(SAMPLE_FLOWS, indent=2)

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(SAMPLE_FLOWS[0]), lineterminator='\n')
    writer.writeheader()
    writer.writerows(SAMPLE_FLOWS)
    return buffer.getvalue()
