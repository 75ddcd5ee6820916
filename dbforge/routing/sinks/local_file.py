"""JSON-lines file sink — the transport the desktop UI tails for progress.

Each event is appended as one JSON object per line.  Writes are serialized
with a lock because events arrive from several tasks and worker threads.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from dbforge.models.events import ProgressEvent
from dbforge.routing.sinks._formatting import stream_key

logger = logging.getLogger(__name__)


class JsonLinesProgressSink:
    """Appends progress events to a JSON-lines file.

    Parameters
    ----------
    path:
        Target file.  Parent directories are created on construction.
    min_interval_bytes:
        Byte-progress events for the same stream (resource, kind, artifact)
        are written only when at least this many bytes have passed since the
        last write, when the transfer completes, or when the stream restarts
        from a lower count.  Status events are always written.  0 writes
        every event.
    """

    def __init__(self, path: Path | str, *, min_interval_bytes: int = 0) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._min_interval = min_interval_bytes
        self._last_written: dict[tuple[str, str, str], int] = {}
        self._lock = threading.Lock()

    @property
    def sink_name(self) -> str:
        return "jsonl"

    @property
    def path(self) -> Path:
        return self._path

    def on_progress(self, event: ProgressEvent) -> None:
        key = stream_key(event)
        with self._lock:
            if not self._should_write(key, event):
                return
            line = json.dumps(event.model_dump(mode="json"), sort_keys=True)
            with open(self._path, "a", encoding="utf-8") as handle:
                handle.write(line + "\n")
            self._last_written[key] = event.completed

    def _should_write(self, key: tuple[str, str, str], event: ProgressEvent) -> bool:
        if self._min_interval <= 0 or (event.total == 0 and event.completed == 0):
            return True
        if event.total and event.completed >= event.total:
            return True
        last = self._last_written.get(key)
        if last is None or event.completed < last:
            return True
        return event.completed - last >= self._min_interval

    def read_events(self) -> list[dict]:
        """Parse every event written so far."""
        if not self._path.exists():
            return []
        with open(self._path, encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]
