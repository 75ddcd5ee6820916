"""Live Rich progress bars fed by progress events.

``RichProgressSink`` is a ``ProgressSink``: it keeps one bar per
(resource, event kind) and updates it from whichever task or worker thread
delivers the event.  ``rich.progress.Progress`` serializes updates
internally; the sink's own task table is guarded by a lock.
"""

from __future__ import annotations

import threading

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from dbforge.models.events import ProgressEvent, StatusEvent

_LABELS = {
    "download": "downloading",
    "hash": "verifying",
    "decompress": "decompressing",
}


class RichProgressSink:
    """Renders progress events as Rich progress bars.

    Use as a context manager around the run::

        with RichProgressSink(console) as sink:
            await Orchestrator(catalog, sink=sink).run()
    """

    def __init__(self, console: Console | None = None) -> None:
        self.progress = Progress(
            TextColumn("[bold cyan]{task.fields[resource]}"),
            TextColumn("{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=console,
            transient=False,
        )
        self._tasks: dict[tuple[str, str], TaskID] = {}
        self._lock = threading.Lock()

    @property
    def sink_name(self) -> str:
        return "rich"

    def __enter__(self) -> RichProgressSink:
        self.progress.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.progress.stop()

    def on_progress(self, event: ProgressEvent) -> None:
        if isinstance(event, StatusEvent):
            if event.status in ("discarded", "failed"):
                self.progress.console.log(
                    f"[yellow]{escape(event.name)}[/yellow] ({event.artifact.value}) "
                    f"{event.status}: {escape(event.message)}"
                )
            return

        kind = event.event_kind.value
        key = (event.name, kind)
        total = event.total or None
        with self._lock:
            task_id = self._tasks.get(key)
            if task_id is None:
                task_id = self.progress.add_task(
                    _LABELS.get(kind, kind), total=total, resource=event.name
                )
                self._tasks[key] = task_id
        self.progress.update(task_id, completed=event.completed, total=total)
