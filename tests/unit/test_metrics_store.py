"""Tests for the append-only metrics store and its JSONL journal."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone

from espresso_sim.engine.models import ExtractionParameters
from espresso_sim.engine.simulator import simulate
from espresso_sim.storage.metrics_store import JsonlMetricsJournal, MetricsStore


def _append(store: MetricsStore, temperature: float = 93.0):
    params = ExtractionParameters(temperature=temperature, pressure=9.0, time_seconds=25.0)
    return store.append(params, simulate(params))


def test_empty_store_returns_empty_history() -> None:
    store = MetricsStore()

    assert store.all() == ()
    assert len(store) == 0
    assert store.latest(5) == ()


def test_append_assigns_sequential_ids_in_insertion_order() -> None:
    store = MetricsStore()

    records = [_append(store, temperature) for temperature in (91.0, 93.0, 95.0)]

    assert [record.id for record in records] == [1, 2, 3]
    assert [record.parameters.temperature for record in store.all()] == [91.0, 93.0, 95.0]
    assert store.all() == tuple(records)


def test_snapshot_is_not_affected_by_later_appends() -> None:
    store = MetricsStore()
    _append(store)

    snapshot = store.all()
    _append(store)

    assert len(snapshot) == 1
    assert len(store.all()) == 2


def test_latest_returns_tail() -> None:
    store = MetricsStore()
    for _ in range(5):
        _append(store)

    assert [record.id for record in store.latest(2)] == [4, 5]
    assert [record.id for record in store.latest(10)] == [1, 2, 3, 4, 5]
    assert store.latest(0) == ()


def test_clock_is_used_for_timestamps() -> None:
    fixed = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)
    store = MetricsStore(clock=lambda: fixed)

    record = _append(store)

    assert record.timestamp == fixed


def test_concurrent_appends_are_gap_free() -> None:
    store = MetricsStore()
    per_thread = 25
    threads = [
        threading.Thread(target=lambda: [_append(store) for _ in range(per_thread)])
        for _ in range(8)
    ]

    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    ids = [record.id for record in store.all()]
    assert ids == list(range(1, 8 * per_thread + 1))


def test_journal_writes_one_line_per_record(tmp_path) -> None:
    journal_path = tmp_path / "var" / "metrics.jsonl"
    store = MetricsStore(journal=JsonlMetricsJournal(journal_path))

    _append(store, 92.0)
    _append(store, 94.0)
    store.close()

    lines = journal_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first, second = (json.loads(line) for line in lines)
    assert first["id"] == 1
    assert first["parameters"] == {"temperature": 92.0, "pressure": 9.0, "timeSeconds": 25.0}
    assert second["id"] == 2
    assert "qualityScore" in second["outcome"]


def test_journal_appends_to_existing_file(tmp_path) -> None:
    journal_path = tmp_path / "metrics.jsonl"
    journal_path.write_text('{"id": 1}\n', encoding="utf-8")

    store = MetricsStore(journal=JsonlMetricsJournal(journal_path))
    _append(store)
    store.close()

    lines = journal_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    # The store never replays the journal, so numbering restarts.
    assert json.loads(lines[1])["id"] == 1
