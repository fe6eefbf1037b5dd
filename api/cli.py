"""
CYAI Threat Platform - Command Line Interface

    cyai serve [--port N]
    cyai scan FILE
    cyai analyze CATEGORY [--data JSON]
    cyai report [--category C] [--severity S] [--timeframe T] [--output PATH]
    cyai categories [ID]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn
from rich.table import Table

from config.app_config import get_config, reload_config
from config.logging_config import configure_logging
from core import threat_catalog
from core.analysis_pipeline import AnalysisPipeline
from core.detection_client import DetectionServiceClient
from core.exceptions import CyaiError
from core.ingestion import parse_upload, normalize_flow
from core.report_generator import ReportGenerator, ReportFilters, REPORT_TYPES, TIMEFRAMES
from database.db_manager import get_db_manager

console = Console()

SEVERITY_STYLES = {
    'critical': 'bold red',
    'high': 'red',
    'medium': 'yellow',
    'low': 'green',
}


def _pipeline(config) -> AnalysisPipeline:
    client = DetectionServiceClient.from_config(config.detection_service)
    return AnalysisPipeline(client, config.pipeline)


def _run_with_progress(description: str, make_coro):
    """Run a pipeline coroutine while rendering its progress callback"""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console,
    ) as progress:
        task = progress.add_task(description, total=100)

        def report(value: float, stage: str):
            progress.update(task, completed=value, description=stage)

        return asyncio.run(make_coro(report))


def cmd_serve(args, config) -> int:
    from api.server import main as serve_main
    serve_main(config, port=args.port)
    return 0


def cmd_scan(args, config) -> int:
    path = Path(args.file)
    if not path.exists():
        console.print(f"[red]✗ File not found: {path}[/red]")
        return 1

    records = [normalize_flow(r) for r in parse_upload(path.name, path.read_text(encoding='utf-8-sig'))]
    console.print(f"[green]✓ Loaded {len(records)} records from {path.name}[/green]")

    pipeline = _pipeline(config)
    outcome = _run_with_progress(
        "Scanning network traffic...",
        lambda report: pipeline.run_threat_scan(records, args.analysis_type, report)
    )

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Source")
    table.add_column("Destination")
    table.add_column("Protocol")
    table.add_column("Verdict")
    table.add_column("Attack Type")
    table.add_column("Confidence", justify="right")
    for threat in outcome.threats:
        verdict = "[red]attack[/red]" if threat.is_attack else "[green]benign[/green]"
        table.add_row(
            threat.source_ip, threat.destination_ip, threat.protocol, verdict,
            threat.attack_type or "-", f"{threat.confidence * 100:.1f}%"
        )
    console.print(table)

    level_style = SEVERITY_STYLES.get(outcome.threat_level, 'white')
    console.print(
        f"Scanned {outcome.total_scanned} records, "
        f"{outcome.attack_count} potential threats. "
        f"Threat level: [{level_style}]{outcome.threat_level.upper()}[/{level_style}]"
    )
    if outcome.used_fallback:
        console.print("[yellow]⚠ Detection service unavailable, used local fallback detection[/yellow]")
    return 0


def cmd_analyze(args, config) -> int:
    if not threat_catalog.is_known_category(args.category):
        console.print(f"[red]✗ Unknown category: {args.category}[/red]")
        return 1

    if args.data:
        simulation_data = json.loads(args.data)
    else:
        simulation_data = {'category': args.category, 'source': 'cli'}

    pipeline = _pipeline(config)
    outcome = _run_with_progress(
        "Analyzing...",
        lambda report: pipeline.run_detection_analysis(simulation_data, args.category, report)
    )

    result = outcome.result
    severity = result.severity.value
    style = SEVERITY_STYLES.get(severity, 'white')
    body = "\n".join([
        f"[bold]{result.threat_type}[/bold]",
        f"Severity: [{style}]{severity.upper()}[/{style}]",
        f"Confidence: {result.confidence * 100:.1f}%",
        f"Source: {result.source_ip or 'N/A'}",
        "",
        result.explanation,
        "",
        "[bold]Indicators[/bold]",
        *[f"• {i}" for i in result.indicators],
        "",
        "[bold]Mitigation[/bold]",
        *[f"• {m}" for m in result.mitigation_steps],
    ])
    console.print(Panel(body, title=f"Detection - {args.category}", border_style=style))

    explanation = outcome.explanation
    table = Table(title="Key Features", show_header=True, header_style="bold magenta")
    table.add_column("Feature")
    table.add_column("Importance", justify="right")
    table.add_column("Value")
    for feature in explanation.key_features:
        table.add_row(feature.feature, f"{feature.importance:.2f}", str(feature.value))
    console.print(table)
    console.print(explanation.reasoning)

    if outcome.used_fallback:
        console.print("[yellow]⚠ Detection service unavailable, used local mock detection[/yellow]")
    elif outcome.model_used:
        console.print(f"Model: {outcome.model_used}")
    return 0


def cmd_report(args, config) -> int:
    db = get_db_manager(config.database.url, config.storage.model_dir)
    generator = ReportGenerator(db_manager=db, config=config.report)
    filters = ReportFilters(
        category=args.category,
        severity=args.severity,
        timeframe=args.timeframe,
        report_type=args.report_type,
    )
    filters.validate()

    report = generator.compile_report(generator.load_results(), filters)
    if args.format == 'json':
        content, extension = generator.render_json(report), 'json'
    elif args.format == 'html':
        content, extension = generator.render_html(report), 'html'
    else:
        content, extension = generator.render_text(report), 'txt'

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding='utf-8')
        console.print(f"[green]✓ Report written to {output}[/green]")
    elif args.save:
        path = generator.write_report(content, generator.report_filename(extension=extension))
        console.print(f"[green]✓ Report written to {path}[/green]")
    else:
        console.print(content, markup=False, highlight=False)
    return 0


def cmd_categories(args, config) -> int:
    if args.id:
        details = threat_catalog.describe_category(args.id)
        if details is None:
            console.print(f"[red]✗ Unknown category: {args.id}[/red]")
            return 1
        console.print(Panel(details, title=args.id))
        return 0

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", no_wrap=True)
    table.add_column("Name")
    table.add_column("Severity")
    table.add_column("Examples")
    for category in threat_catalog.list_categories():
        severity = category.severity.value
        style = SEVERITY_STYLES.get(severity, 'white')
        table.add_row(
            category.id, category.name, f"[{style}]{severity}[/{style}]",
            ", ".join(category.examples)
        )
    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='cyai', description='CYAI Threat Detection System')
    parser.add_argument('--config', help='YAML configuration override file')
    subparsers = parser.add_subparsers(dest='command', required=True)

    serve = subparsers.add_parser('serve', help='Run the API server')
    serve.add_argument('--port', type=int, default=None)
    serve.set_defaults(func=cmd_serve)

    scan = subparsers.add_parser('scan', help='Scan a CSV / JSON flow file')
    scan.add_argument('file')
    scan.add_argument('--analysis-type', default='network_intrusion')
    scan.set_defaults(func=cmd_scan)

    analyze = subparsers.add_parser('analyze', help='Run a staged detection analysis')
    analyze.add_argument('category', choices=threat_catalog.category_ids())
    analyze.add_argument('--data', help='Simulation data as a JSON string')
    analyze.set_defaults(func=cmd_analyze)

    report = subparsers.add_parser('report', help='Generate a report from stored detections')
    report.add_argument('--category', default='all')
    report.add_argument('--severity', default='all', choices=['all', 'critical', 'high', 'medium', 'low'])
    report.add_argument('--timeframe', default='24h', choices=list(TIMEFRAMES))
    report.add_argument('--type', dest='report_type', default='executive', choices=list(REPORT_TYPES))
    report.add_argument('--format', default='text', choices=['text', 'json', 'html'])
    report.add_argument('--output', help='Write the report to this file')
    report.add_argument('--save', action='store_true', help='Write into the report directory')
    report.set_defaults(func=cmd_report)

    categories = subparsers.add_parser('categories', help='List threat categories')
    categories.add_argument('id', nargs='?')
    categories.set_defaults(func=cmd_categories)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = reload_config(args.config) if args.config else get_config()
    configure_logging(config.logging)

    try:
        return args.func(args, config)
    except (CyaiError, json.JSONDecodeError) as e:
        console.print(f"[red]✗ {e}[/red]")
        return 1


if __name__ == '__main__':
    sys.exit(main())
