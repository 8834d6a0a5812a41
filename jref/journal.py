"""Append-only SQLite journal of processed references, replayed by the refresh sweep."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from jref.models import ProcessedReference

_SCHEMA = """
CREATE TABLE IF NOT EXISTS processed_references (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    identifier TEXT NOT NULL,
    keys TEXT NOT NULL,
    use_second_org INTEGER NOT NULL,
    timestamp INTEGER NOT NULL
)
"""


class Journal:
    def __init__(self, path: Path | str) -> None:
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(path))
        self._conn.execute(_SCHEMA)
        self._conn.commit()

    def __enter__(self) -> "Journal":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def append(self, entry: ProcessedReference) -> None:
        with self.recording(entry):
            pass

    @contextmanager
    def recording(self, entry: ProcessedReference) -> Iterator[None]:
        """Insert ``entry`` and commit it only if the body of the ``with`` block succeeds."""
        with self._conn:
            self._conn.execute(
                "INSERT INTO processed_references (identifier, keys, use_second_org, timestamp) VALUES (?, ?, ?, ?)",
                (entry.identifier, entry.keys, int(entry.use_second_org), entry.timestamp),
            )
            yield

    def __iter__(self) -> Iterator[ProcessedReference]:
        rows = self._conn.execute(
            "SELECT identifier, keys, use_second_org, timestamp FROM processed_references ORDER BY id"
        )
        for identifier, keys, use_second_org, timestamp in rows:
            yield ProcessedReference(
                identifier=identifier,
                keys=keys,
                use_second_org=bool(use_second_org),
                timestamp=timestamp,
            )

    def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM processed_references").fetchone()[0]

    def latest_by_identifier(self) -> list[ProcessedReference]:
        """Most recent entry per identifier, in order of first processing."""
        latest: dict[str, ProcessedReference] = {}
        for entry in self:
            latest[entry.identifier] = entry
        return list(latest.values())
