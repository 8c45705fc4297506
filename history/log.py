"""Append-only record log backed by a text file."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from history.ndb import Record, format_record, parse_records


class RecordLog:
    """
    Ordered sequence of immutable records stored in one file.
    Records are only ever appended; reading is a sequential scan in file order.
    The file is created on first append and never rewritten.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"RecordLog({str(self.path)!r})"

    def __iter__(self) -> Iterator[Record]:
        with self.path.open(encoding="utf-8") as f:
            yield from parse_records(f)

    def append(self, *records: Record) -> None:
        """Write records at the end of the file in a single write call."""
        data = "".join(format_record(r) for r in records)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(data)
