"""Filesystem NDJSON event sink with concurrency-safe appends.

Events are appended as one JSON line per event.  Two log destinations:

- ``<log_dir>/events.ndjson``  -- global event log
- ``<log_dir>/extractions/<extraction_id>.ndjson``  -- per-extraction log

Writes use ``json.dumps(sort_keys=True)`` for deterministic output.

Concurrency safety:

- Each append acquires an exclusive ``fcntl.flock`` on the target file.
- Reads acquire a shared lock.
- On platforms without ``fcntl`` (Windows), locking is skipped.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import IO, Any

from mathextract.logging.events import ExtractEvent

try:
    import fcntl
except ImportError:  # Windows: no advisory locking
    fcntl = None

# Path-component validation: reject anything that could escape the log dir
_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9_\-]+$")

# Default tail-read size (2 MB)
_DEFAULT_TAIL_BYTES = 2 * 1024 * 1024


class EventSink:
    """Append-only NDJSON log writer with file locking."""

    def __init__(self, log_dir: Path, *, fsync: bool = False, tail_bytes: int | None = None) -> None:
        self.logs_dir = log_dir
        self._fsync = fsync
        self._tail_bytes = tail_bytes if tail_bytes is not None else _DEFAULT_TAIL_BYTES

        self.logs_dir.mkdir(parents=True, exist_ok=True)
        (self.logs_dir / "extractions").mkdir(exist_ok=True)

    def write(self, event: ExtractEvent, *, extraction_id: str | None = None) -> None:
        """Append *event* to the global log and optionally the per-extraction log."""
        line = json.dumps(event.model_dump(mode="json"), sort_keys=True, default=str) + "\n"

        self._append(self.logs_dir / "events.ndjson", line)

        if extraction_id and _SAFE_ID_RE.match(extraction_id):
            self._append(self.logs_dir / "extractions" / f"{extraction_id}.ndjson", line)

    # ------------------------------------------------------------------
    # Query helpers (used by the CLI)
    # ------------------------------------------------------------------

    def read_global(
        self,
        *,
        level: str | None = None,
        limit: int = 200,
    ) -> list[dict[str, Any]]:
        """Read events from the global log, most-recent-first, optionally by level."""
        limit = min(limit, 2000)
        events = self._read_ndjson(self.logs_dir / "events.ndjson")

        if level:
            events = [e for e in events if e.get("level") == level]
        events.reverse()
        return events[:limit]

    def read_extraction_log(self, extraction_id: str) -> list[dict[str, Any]]:
        """Read all events for one extraction run, oldest first."""
        if not _SAFE_ID_RE.match(extraction_id):
            return []
        return self._read_ndjson(self.logs_dir / "extractions" / f"{extraction_id}.ndjson")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _append(self, path: Path, line: str) -> None:
        """Append one line to *path* while holding an exclusive lock."""
        with open(path, "ab") as f:
            _lock(f, exclusive=True)
            f.write(line.encode("utf-8"))
            f.flush()
            if self._fsync:
                os.fsync(f.fileno())

    def _read_ndjson(self, path: Path) -> list[dict[str, Any]]:
        """Parse the tail of an NDJSON file; lines that are not JSON are skipped."""
        if not path.exists():
            return []

        with open(path, "rb") as f:
            _lock(f, exclusive=False)
            size = os.fstat(f.fileno()).st_size
            if size > self._tail_bytes:
                f.seek(size - self._tail_bytes)
                f.readline()  # partial line
            data = f.read()

        events: list[dict[str, Any]] = []
        for raw in data.decode("utf-8", errors="replace").splitlines():
            if not raw.strip():
                continue
            try:
                events.append(json.loads(raw))
            except json.JSONDecodeError:
                continue
        return events


def _lock(f: IO[bytes], *, exclusive: bool) -> None:
    """Take an advisory lock on *f*, released when the file is closed."""
    if fcntl is not None:
        fcntl.flock(f.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
