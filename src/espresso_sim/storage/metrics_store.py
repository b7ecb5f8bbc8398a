"""Append-only history of extraction records with an optional JSONL journal."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

from ..engine.models import ExtractionOutcome, ExtractionParameters, ExtractionRecord
from ..logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JsonlMetricsJournal:
    """Append-only JSON Lines writer; one record per line, flushed per write."""

    def __init__(self, path: Path | str) -> None:
        target = Path(path).expanduser()
        if not target.is_absolute():
            target = (Path.cwd() / target).resolve()
        target.parent.mkdir(parents=True, exist_ok=True)
        self._path = target
        self._file: Optional[Any] = target.open("a", encoding="utf-8")
        logger.info("metrics.journal.opened", path=str(target))

    @property
    def path(self) -> Path:
        return self._path

    def write(self, record: ExtractionRecord) -> None:
        if self._file is None:
            raise RuntimeError(f"Journal {self._path} is closed")
        line = json.dumps(record.to_json_dict(), ensure_ascii=False, separators=(",", ":"))
        self._file.write(line + "\n")
        self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


class MetricsStore:
    """Ordered, append-only collection of extraction records.

    Identifiers start at 1 and increase by one per append. A single lock
    covers id assignment, insertion and the journal write so ids stay
    gap-free and the journal matches in-memory order. Readers get tuple
    snapshots that later appends cannot change.
    """

    def __init__(
        self,
        *,
        journal: Optional[JsonlMetricsJournal] = None,
        clock: Clock = _utcnow,
    ) -> None:
        self._records: list[ExtractionRecord] = []
        self._lock = threading.Lock()
        self._journal = journal
        self._clock = clock

    @property
    def journal(self) -> Optional[JsonlMetricsJournal]:
        return self._journal

    def append(
        self, parameters: ExtractionParameters, outcome: ExtractionOutcome
    ) -> ExtractionRecord:
        """Store a new record and return it; ``record.id`` is the assigned identifier."""
        with self._lock:
            record = ExtractionRecord(
                id=len(self._records) + 1,
                timestamp=self._clock(),
                parameters=parameters,
                outcome=outcome,
            )
            if self._journal is not None:
                self._journal.write(record)
            self._records.append(record)
        return record

    def all(self) -> Tuple[ExtractionRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def latest(self, count: int) -> Tuple[ExtractionRecord, ...]:
        if count <= 0:
            return ()
        with self._lock:
            return tuple(self._records[-count:])

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def close(self) -> None:
        if self._journal is not None:
            with self._lock:
                self._journal.close()


__all__ = ["JsonlMetricsJournal", "MetricsStore"]
