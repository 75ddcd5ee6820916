"""Sink protocol for progress events.

All sinks implement the ``ProgressSink`` protocol: a ``sink_name`` property
and an ``on_progress(event)`` method.  Sinks are called from the event loop
and from worker threads alike, so they must tolerate concurrent, unordered
delivery.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from dbforge.models.events import ProgressEvent


@runtime_checkable
class ProgressSink(Protocol):
    """Protocol that every progress sink must implement.

    Attributes
    ----------
    sink_name : str
        A unique human-readable identifier for this sink instance
        (e.g. ``"jsonl"``, ``"logging"``).
    """

    @property
    def sink_name(self) -> str:
        """Return the unique name of this sink."""
        ...

    def on_progress(self, event: ProgressEvent) -> None:
        """Accept one progress event.

        Delivery is best-effort.  The dispatcher logs and drops any
        exception a sink raises.
        """
        ...


class NullProgressSink:
    """Discards every event."""

    @property
    def sink_name(self) -> str:
        return "null"

    def on_progress(self, event: ProgressEvent) -> None:
        return None
