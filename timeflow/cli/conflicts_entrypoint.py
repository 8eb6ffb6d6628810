from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from timeflow.core.conflicts.conflict_config import ConflictConfig
from timeflow.core.conflicts.conflict_detector import ConflictDetector
from timeflow.core.conflicts.solution_applicator import SolutionApplicator
from timeflow.core.domain.activity_repository import ActivityRepository
from timeflow.core.events.event_bus import EventBus
from timeflow.core.events.sinks.file_recorder import FileRecorderSink
from timeflow.core.events.sinks.sink_logging import LoggingEventSink
from timeflow.storage.json_file_storage import JsonFileActivityStorage

LOGGER = logging.getLogger(__name__)


def _load_config(path: Path | None) -> ConflictConfig:
    if path is None:
        return ConflictConfig()
    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")
    if path.suffix == ".toml":
        return ConflictConfig.from_toml_path(path)
    return ConflictConfig.from_json_obj(json.loads(path.read_text(encoding="utf-8")))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        "timeflow-conflicts",
        description="Detect schedule conflicts (optionally apply one recommendation).",
    )
    parser.add_argument(
        "--activities",
        type=Path,
        required=True,
        help="Path to the JSON activity storage file.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional conflict config (.toml or .json).",
    )
    parser.add_argument(
        "--apply",
        metavar="CONFLICT_ID",
        default=None,
        help="Apply the recommendation of this conflict, then re-detect.",
    )
    parser.add_argument(
        "--record-events",
        type=Path,
        default=None,
        help="Append every domain event as a JSON line to this file.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def run(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    config = _load_config(args.config)

    event_bus = EventBus(sinks=[LoggingEventSink(logging.getLogger("timeflow.events"), logging.DEBUG)])
    if args.record_events is not None:
        event_bus.register(FileRecorderSink(args.record_events))
    repository = ActivityRepository(
        event_bus=event_bus,
        storage=JsonFileActivityStorage(args.activities),
    )
    try:
        return _detect_and_apply(args, config, repository, event_bus)
    finally:
        event_bus.close()


def _detect_and_apply(
    args: argparse.Namespace,
    config: ConflictConfig,
    repository: ActivityRepository,
    event_bus: EventBus,
) -> int:
    asyncio.run(repository.load())

    detector = ConflictDetector(config)
    conflicts = detector.detect(repository.list_activities())

    if args.apply is not None:
        target = next((c for c in conflicts if c.id == args.apply), None)
        if target is None:
            print(f"Error: unknown conflict id {args.apply!r}", file=sys.stderr)
            return 2
        if target.recommendation is None:
            print(f"Error: conflict {args.apply!r} has no recommendation", file=sys.stderr)
            return 2

        applicator = SolutionApplicator(repository=repository, detector=detector, event_bus=event_bus)
        result = applicator.apply(target.recommendation)
        LOGGER.info(
            "applied %s (%d changes, %d conflicts remain)",
            result.solution_id,
            result.applied_changes,
            len(result.conflicts),
        )
        conflicts = result.conflicts

    print(json.dumps([c.model_dump(mode="json") for c in conflicts], indent=2))
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
