"""
Semantic test: command-line detection and application.

Invariant:
The CLI prints the detected conflicts as JSON; --apply persists the
recommendation through the activity file and prints the re-detection.
"""

from __future__ import annotations

import asyncio
import json

import pytest

from timeflow.cli.conflicts_entrypoint import run
from timeflow.storage.json_file_storage import JsonFileActivityStorage


@pytest.fixture
def activity_file(tmp_path, make_activity):
    path = tmp_path / "activities.json"
    storage = JsonFileActivityStorage(path)

    async def seed() -> None:
        await storage.save(make_activity("A", "09:00", "10:00", flexibility_score=80))
        await storage.save(make_activity("B", "09:30", "10:30", priority="urgent", is_market_protected=True, category="trading"))

    asyncio.run(seed())
    return path


def test_detect_prints_conflicts(activity_file, capsys) -> None:
    assert run(["--activities", str(activity_file)]) == 0

    printed = json.loads(capsys.readouterr().out)
    assert [(c["type"], c["severity"]) for c in printed] == [
        ("time_overlap", "critical"),
        ("market_conflict", "medium"),
    ]
    assert printed[0]["recommendation"]["id"] == "reschedule_A"


def test_apply_persists_and_redetects(activity_file, capsys, at) -> None:
    assert run(["--activities", str(activity_file), "--apply", "time_overlap:A|B"]) == 0

    assert json.loads(capsys.readouterr().out) == []

    stored = {a.id: a for a in asyncio.run(JsonFileActivityStorage(activity_file).load_all())}
    assert (stored["A"].start, stored["A"].end) == (at("10:45"), at("11:45"))


def test_unknown_conflict_id_exits_2(activity_file, capsys) -> None:
    assert run(["--activities", str(activity_file), "--apply", "nope"]) == 2
    assert "unknown conflict id" in capsys.readouterr().err


def test_json_config_is_loaded(activity_file, tmp_path, capsys) -> None:
    config = tmp_path / "conflicts.json"
    config.write_text(json.dumps({"reschedule_buffer_minutes": 0}), encoding="utf-8")

    assert run(["--activities", str(activity_file), "--config", str(config)]) == 0

    printed = json.loads(capsys.readouterr().out)
    changes = {c["field"]: c["new_value"] for c in printed[0]["recommendation"]["changes"]}
    assert changes["start"] == "2025-01-06T10:30:00"


def test_record_events_captures_the_apply_flow(activity_file, tmp_path, capsys) -> None:
    log = tmp_path / "events.jsonl"

    assert run(["--activities", str(activity_file), "--apply", "time_overlap:A|B", "--record-events", str(log)]) == 0
    capsys.readouterr()

    types = [json.loads(line)["event_type"] for line in log.read_text(encoding="utf-8").splitlines()]
    assert types == [
        "ConflictFlagsChangedEvent",
        "ActivityUpdatedEvent",
        "ActivityUpdatedEvent",
        "ConflictFlagsChangedEvent",
        "SolutionAppliedEvent",
    ]
