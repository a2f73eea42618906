"""Command-line entry point: record a workout session from a JSON file."""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from lifehub.config import SETTINGS
from lifehub.db import close_db
from lifehub.engine import LifeHubEngine
from lifehub.logging_setup import setup_logging
from lifehub.models import WorkoutSession
from lifehub.replication import HttpReplicator

logger = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="lifehub", description="LifeHub progression engine")
    sub = p.add_subparsers(dest="command", required=True)

    log = sub.add_parser("log", help="Score and commit a workout session")
    log.add_argument("session", type=Path, help="Path to a session JSON file")
    log.add_argument("--luteal", action="store_true", help="Apply the luteal bonus")
    log.add_argument("--partial", action="store_true", help="Record as a partial workout")

    sub.add_parser("grace", help="Spend one weekly grace use")
    sub.add_parser("status", help="Show fitness level and streak")
    return p


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    setup_logging()
    logger.info("Running command: %s", args.command)
    engine = LifeHubEngine.from_settings()
    try:
        if args.command == "log":
            try:
                session = WorkoutSession.model_validate(
                    json.loads(args.session.read_text(encoding="utf-8"))
                )
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                logger.error("Cannot read session file %s: %s", args.session, e)
                print(f"Invalid session file: {args.session}")
                return 1
            report = engine.process_session(session, args.luteal, not args.partial)
            for entry in report.generated_logs:
                print(entry.text)
        elif args.command == "grace":
            if not engine.activate_grace():
                print("Grace cap reached for this week.")
                return 1
            print("Grace used; streak preserved.")
        else:
            status = engine.fitness_status()
            capped = " (capped)" if status.is_capped else ""
            print(
                f"Fitness level {status.level} ({status.pct}%{capped}), "
                f"{engine.profile.fitness_points} FP, streak {engine.profile.streak}"
            )
    finally:
        if isinstance(engine.replicator, HttpReplicator):
            # Give the background upload a chance before the process exits.
            engine.replicator.join(SETTINGS.REPLICATION_TIMEOUT)
        close_db()
    return 0


if __name__ == "__main__":
    sys.exit(main())
