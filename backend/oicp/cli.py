"""
OICP command line.

Evaluates releases that were already downloaded to a JSON file; fetching
from SERCOP is not done here.

Usage:
    python -m oicp evaluate releases.json [--year 2024] [--no-context] [--workers 8]
    python -m oicp thresholds 2025-10-07
"""
import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from .context import build_context, build_contexts_by_year
from .engine import evaluate_batch, summarize
from .logging_config import configure as configure_logging
from .normalizer import latest_release, normalize
from .thresholds import resolve_threshold

logger = structlog.get_logger("oicp.cli")


def load_releases(path: Path) -> List[dict]:
    """
    Releases from a JSON file: a list of releases, a release package
    ({"releases": [...]}) or a record package ({"records": [...]}).
    """
    with open(path, encoding='utf-8') as fh:
        data = json.load(fh)

    if isinstance(data, list):
        return [r for r in data if isinstance(r, dict)]
    if not isinstance(data, dict):
        return []
    if isinstance(data.get('records'), list):
        releases = []
        for record in data['records']:
            if not isinstance(record, dict):
                continue
            latest = latest_release(record)
            if latest is not None:
                releases.append({**latest, 'ocid': latest.get('ocid') or record.get('ocid')})
        return releases
    if isinstance(data.get('releases'), list):
        return [r for r in data['releases'] if isinstance(r, dict)]
    return [data]


def cmd_evaluate(args) -> int:
    path = Path(args.file)
    if not path.exists():
        logger.error("input_not_found", path=str(path))
        return 1
    try:
        releases = load_releases(path)
    except json.JSONDecodeError as exc:
        logger.error("input_not_json", path=str(path), error=str(exc))
        return 1

    procs = [normalize(r) for r in releases]
    if args.year is not None:
        procs_to_score = [p for p in procs if p.fiscal_year == args.year]
    else:
        procs_to_score = procs

    if args.no_context:
        contexts = None
    elif args.year is not None:
        contexts = {args.year: build_context(procs, args.year)}
    else:
        contexts = build_contexts_by_year(procs)

    results = evaluate_batch(procs_to_score, contexts, max_workers=args.workers)
    for result in results:
        print(result.model_dump_json())

    summary = summarize(results)
    logger.info("evaluation_complete", file=str(path), **summary)
    return 0


def cmd_thresholds(args) -> int:
    thresholds = resolve_threshold(args.date)
    print(thresholds.model_dump_json())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='oicp', description='OICP red-flag engine')
    parser.add_argument('--log-level', default=None, help='Log level (default: $OICP_LOG_LEVEL or INFO)')
    sub = parser.add_subparsers(dest='command', required=True)

    # --log-level is also accepted after the subcommand
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--log-level', default=argparse.SUPPRESS, help=argparse.SUPPRESS)

    ev = sub.add_parser('evaluate', parents=[common], help='Evaluate releases from a JSON file')
    ev.add_argument('file', help='JSON file with releases, a release package or a record package')
    ev.add_argument('--year', type=int, default=None, help='Only evaluate this fiscal year')
    ev.add_argument('--no-context', action='store_true', help='Skip concentration flags')
    ev.add_argument('--workers', type=int, default=None, help='Worker threads')
    ev.set_defaults(func=cmd_evaluate)

    th = sub.add_parser('thresholds', parents=[common], help='Show the regime and ínfima ceiling for a date')
    th.add_argument('date', nargs='?', default=None, help='ISO date (default: newest regime)')
    th.set_defaults(func=cmd_thresholds)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
