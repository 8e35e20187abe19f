"""
sifter/cli.py: Command-line interface for the Sifter risk engine.

Usage:
    python -m sifter catalog                          # metric table and weights
    python -m sifter score project.json               # score one project
    python -m sifter score project.json --format all --output-dir out/
    python -m sifter batch projects.json --format csv --output-dir out/
    python -m sifter batch projects.json --webhook https://hooks.slack.com/... --platform slack

The webhook URL may also come from SIFTER_WEBHOOK_URL, read from a .env
file in the working directory (or any parent) before the environment.

Exit codes: 0 success, 1 unreadable input, 2 invalid observations or batch
over capacity, 3 an export or webhook failed.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from sifter.exceptions import SifterError


# ── .env loader (stdlib only) ────────────────────────────────────────────────

def _find_env_file(start: Path) -> Path | None:
    """Nearest .env at or above start."""
    for directory in (start, *start.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def _load_dotenv(env_file: str | None = None) -> dict[str, str]:
    """Copy KEY=VALUE settings from a .env file into os.environ.

    Variables already set in the process environment win over the file.
    Returns only the variables this call added.

    Args:
        env_file: Path to the file; by default the nearest .env at or above
                  the working directory.
    """
    path = Path(env_file) if env_file else _find_env_file(Path.cwd())
    if path is None or not path.is_file():
        return {}

    loaded: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.strip().partition("=")
        key = key.strip()
        if not sep or not key or key.startswith("#") or key in os.environ:
            continue
        value = value.strip()
        if value[:1] in ('"', "'") and len(value) >= 2 and value[-1] == value[0]:
            value = value[1:-1]
        os.environ[key] = value
        loaded[key] = value

    logger.debug("Loaded %d variable(s) from %s.", len(loaded), path)
    return loaded


# ── Logging setup ─────────────────────────────────────────────────────────────

def _setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with timestamps and padded level names."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    fmt = "%(asctime)s  %(levelname)-8s  %(name)s | %(message)s"
    datefmt = "%H:%M:%S"
    logging.basicConfig(level=numeric, format=fmt, datefmt=datefmt, stream=sys.stderr)
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("urllib.request").setLevel(logging.WARNING)


logger = logging.getLogger("sifter.cli")


def _webhook_url(args: argparse.Namespace) -> str | None:
    return args.webhook or os.environ.get("SIFTER_WEBHOOK_URL") or None


def _formats(requested: str, choices: tuple) -> list[str]:
    return list(choices) if requested == "all" else [requested]


# ── Subcommand: catalog ───────────────────────────────────────────────────────

def cmd_catalog(args: argparse.Namespace) -> int:
    """Print the metric catalog with weights."""
    _load_dotenv(args.env_file)
    _setup_logging(args.log_level)

    from sifter.metrics.catalog import DEFAULT_CATALOG

    print("\nSifter metric catalog")
    print("=" * 64)
    for d in DEFAULT_CATALOG.all():
        print(f"  {d.order + 1:>2}. {d.key:<24} {d.weight:>3}%  {d.description}")
    print("-" * 64)
    print(f"  Total weight: {DEFAULT_CATALOG.total_weight()}%\n")
    return 0


# ── Subcommand: score ─────────────────────────────────────────────────────────

SCORE_FORMATS = ("json", "csv", "html", "text")


def cmd_score(args: argparse.Namespace) -> int:
    """Score one project file and write the requested exports."""
    _load_dotenv(args.env_file)
    _setup_logging(args.log_level)

    from sifter.export.formats import export_filename, to_csv, to_json, to_text, write_export
    from sifter.export.html_report import export_report_document
    from sifter.export.webhook import post_to_webhook
    from sifter.pipeline import analyze_project, load_projects
    from sifter.storage.stores import JsonFileHistory

    try:
        projects = load_projects(args.input)
    except (OSError, ValueError, KeyError) as e:
        logger.error("Could not read %s: %s", args.input, e)
        return 1
    if not projects:
        logger.error("No projects found in %s", args.input)
        return 1

    history = JsonFileHistory(args.history) if args.history else None
    item = projects[0]
    try:
        report = analyze_project(item.identity, item.observations, scanned_at=item.scanned_at, history=history)
    except SifterError as e:
        logger.error("Invalid observations for %s: %s", item.name, e)
        return 2

    print(f"\n{report.name}: {report.score}/100  {report.verdict.upper()}  "
          f"{report.tier}  (confidence {report.confidence}%)")
    for line in report.recommendations:
        print(f"  - {line}")

    failures = 0
    if args.output_dir:
        for fmt in _formats(args.format, SCORE_FORMATS):
            if fmt == "html":
                chart = None
                if args.chart:
                    from sifter.viz.figures import contribution_chart
                    chart = contribution_chart(report)
                result = export_report_document(report, args.output_dir, chart_png=chart)
            elif fmt == "json":
                result = write_export(to_json(report), args.output_dir,
                                      export_filename("analysis_json", report.name))
            elif fmt == "csv":
                result = write_export(to_csv(report), args.output_dir,
                                      export_filename("metrics_csv", report.name))
            else:
                result = write_export(to_text(report), args.output_dir,
                                      export_filename("report_txt", report.name))
            if result.ok:
                print(f"  wrote {result.path}")
            else:
                failures += 1
    elif args.format == "json":
        print(to_json(report))

    url = _webhook_url(args)
    if url and not post_to_webhook(url, report, args.platform):
        failures += 1

    return 3 if failures else 0


# ── Subcommand: batch ─────────────────────────────────────────────────────────

BATCH_FORMATS = ("csv", "json", "packet")


def cmd_batch(args: argparse.Namespace) -> int:
    """Score every project in a file as one batch."""
    _load_dotenv(args.env_file)
    _setup_logging(args.log_level)

    from sifter.batch.aggregator import run_batch
    from sifter.export.formats import (
        batch_to_csv,
        build_partner_packet,
        export_filename,
        partner_packet_to_json,
        reports_to_json,
        write_export,
    )
    from sifter.export.webhook import post_to_webhook
    from sifter.pipeline import load_projects

    try:
        projects = load_projects(args.input)
    except (OSError, ValueError, KeyError) as e:
        logger.error("Could not read %s: %s", args.input, e)
        return 1

    try:
        result = run_batch(projects, max_workers=args.workers)
    except SifterError as e:
        logger.error("%s", e)
        return 2

    s = result.summary
    print(f"\nBatch: {s.total} scored, {s.passed} pass / {s.flagged} flag / {s.rejected} reject, "
          f"average risk {s.average_risk_score}, {len(s.errors)} errors")
    for err in s.errors:
        print(f"  ! {err['project']}: {err['error']}")
    for entity in result.flagged_entities:
        print(f"  entity {entity.name}: {entity.co_occurrence} high-risk projects "
              f"({', '.join(entity.projects)})")

    packet = build_partner_packet(s, [p for p in result.projects if p.status == "completed"])

    failures = 0
    if args.output_dir:
        for fmt in _formats(args.format, BATCH_FORMATS):
            if fmt == "csv":
                out = write_export(batch_to_csv(result), args.output_dir, export_filename("batch_csv"))
            elif fmt == "json":
                reports = [p.report for p in result.projects if p.report is not None]
                out = write_export(reports_to_json(reports), args.output_dir,
                                   export_filename("combined_json"))
            else:
                out = write_export(partner_packet_to_json(packet), args.output_dir,
                                   export_filename("partner_packet"))
            if out.ok:
                print(f"  wrote {out.path}")
            else:
                failures += 1
        if args.chart:
            from sifter.viz.figures import risk_distribution_chart
            png = risk_distribution_chart(result.projects)
            if png is not None:
                out = write_export(png, args.output_dir, "batch_risk_distribution.png")
                failures += 0 if out.ok else 1
    elif args.format == "packet":
        print(json.dumps(packet, indent=2, default=str))

    url = _webhook_url(args)
    if url and not post_to_webhook(url, packet, args.platform):
        failures += 1

    return 3 if failures else 0


# ── Parser ────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sifter",
        description="Sifter: composite risk scoring and reports for crypto projects.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the metric catalog
  python -m sifter catalog

  # Score a single project and write every export
  python -m sifter score project.json --format all --output-dir out/

  # Screen a batch and post the partner packet to Slack
  python -m sifter batch projects.json --webhook https://hooks.slack.com/... --platform slack
        """,
    )

    parser.add_argument(
        "--env-file",
        default=None,
        metavar="PATH",
        help="Path to .env file (default: auto-detect .env from the working directory up)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    def add_output_flags(p: argparse.ArgumentParser, formats: tuple, default: str) -> None:
        p.add_argument("input", metavar="FILE", help="JSON observation file")
        p.add_argument(
            "--format",
            default=default,
            choices=[*formats, "all"],
            help=f"Export format (default: {default})",
        )
        p.add_argument("--output-dir", default=None, metavar="DIR",
                       help="Directory for export files (default: print summary only)")
        p.add_argument("--webhook", default=None, metavar="URL",
                       help="Webhook URL (default: SIFTER_WEBHOOK_URL from .env/environment)")
        p.add_argument("--platform", default="generic", choices=["slack", "teams", "generic"],
                       help="Webhook payload format (default: generic)")
        p.add_argument("--chart", action="store_true", help="Render matplotlib figures")

    p_catalog = subparsers.add_parser("catalog", help="Print the metric catalog")
    p_catalog.set_defaults(func=cmd_catalog)

    p_score = subparsers.add_parser("score", help="Score a single project")
    add_output_flags(p_score, SCORE_FORMATS, "json")
    p_score.add_argument("--history", default=None, metavar="PATH",
                         help="Record the scan in a JSON history file")
    p_score.set_defaults(func=cmd_score)

    p_batch = subparsers.add_parser("batch", help="Score a batch of projects")
    add_output_flags(p_batch, BATCH_FORMATS, "csv")
    p_batch.add_argument("--workers", type=int, default=None, metavar="N",
                         help="Worker threads (default: 8)")
    p_batch.set_defaults(func=cmd_batch)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
