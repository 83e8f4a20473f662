"""
app/cli.py

Command line entry point: ``order-ingest process|analyse|jobs``.
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError

from app.config import get_analysis_settings
from app.domain.errors import IngestionError, IngestionValidationError
from app.logging_utils import configure_logging
from app.services.analysis_service import AnalysisService
from app.services.csv_ingestion_service import get_csv_ingestion_service
from app.storage.memory_storage import InMemoryIngestionStore
from app.storage.sqlalchemy_storage import SQLAlchemyIngestionStore
from db.session import dispose_engine, session_scope

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="order-ingest",
        description="Ingest delivery-platform CSV exports and report on orders.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser("process", help="Process a CSV file.")
    process.add_argument("file", help="Path of the CSV export.")
    process.add_argument(
        "integration",
        nargs="?",
        default=None,
        help="Optional integration key; detected from the header row when omitted.",
    )
    process.add_argument(
        "--dry-run",
        action="store_true",
        help="Run against an in-memory store seeded with the bundled integrations.",
    )

    subparsers.add_parser("analyse", help="Print the order analysis report.")

    jobs = subparsers.add_parser("jobs", help="List recent ingestion jobs.")
    jobs.add_argument("--limit", type=int, default=20, help="Number of jobs to list.")
    jobs.add_argument("--status", default=None, help="Filter by job status.")

    return parser


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _process(args: argparse.Namespace) -> int:
    service = get_csv_ingestion_service()

    if args.dry_run:
        store = InMemoryIngestionStore.from_seed_data()
        summary = service.process_file(args.file, args.integration, store=store)
        _print_json({**summary.to_dict(), "dry_run": True})
        return 0

    with session_scope() as db:
        store = SQLAlchemyIngestionStore(session=db)
        summary = service.process_file(args.file, args.integration, store=store)
    _print_json(summary.to_dict())
    return 0


def _analyse(args: argparse.Namespace) -> int:
    with session_scope() as db:
        report = AnalysisService(db, get_analysis_settings()).build_report()
    _print_json(report.to_dict())
    return 0


def _jobs(args: argparse.Namespace) -> int:
    with session_scope() as db:
        store = SQLAlchemyIngestionStore(session=db)
        jobs = store.list_jobs(limit=args.limit, status=args.status)
    _print_json([asdict(job) for job in jobs])
    return 0


_COMMANDS = {
    "process": _process,
    "analyse": _analyse,
    "jobs": _jobs,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging()

    try:
        return _COMMANDS[args.command](args)
    except IngestionValidationError as exc:
        logger.error("Validation failed: %s", json.dumps(exc.to_dict(), sort_keys=True))
        return 1
    except IngestionError as exc:
        logger.error("%s failed: %s", args.command, json.dumps(exc.to_dict(), sort_keys=True))
        return 1
    except SQLAlchemyError as exc:
        logger.error("%s failed: database error: %s", args.command, exc)
        return 1
    finally:
        dispose_engine()


if __name__ == "__main__":
    raise SystemExit(main())
