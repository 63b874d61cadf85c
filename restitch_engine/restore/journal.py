"""
Restore execution journal.

One JSON object per line, appended as a restore moves and copies entries. The
journal for a run is ``journals/<backup label>.jsonl``; it records where every
moved destination went, so a failed restore can be finished or undone by hand.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from restitch_engine.clock import Clock


class RestoreExecutionJournal:
    """
    Append-only JSONL journal for one restore run.

    Each record has the shape ``{"ts": <iso time>, "event": <id>, "data": {...}}``.
    The file and its parent directory are created on the first append, so a
    run that never mutates anything leaves no journal behind.
    """

    def __init__(self, journal_path: Path, *, clock: Clock) -> None:
        self._journal_path = journal_path
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._journal_path

    def append(self, event: str, data: Mapping[str, Any]) -> None:
        """
        Append one event record.

        Raises
        ------
        OSError
            If the journal cannot be written.
        TypeError
            If `data` contains non-JSON-serializable values.
        """
        line = json.dumps(
            {"ts": self._clock.now().isoformat(), "event": event, "data": dict(data)},
            ensure_ascii=False,
            sort_keys=True,
            separators=(",", ":"),
        )
        self._journal_path.parent.mkdir(parents=True, exist_ok=True)
        with self._journal_path.open("a", encoding="utf-8", newline="\n") as handle:
            handle.write(line + "\n")
