"""ProgressDispatcher — fans progress events out to every registered sink.

Progress is advisory.  A failing sink is logged and skipped; it never
interrupts a download, a hash or a decompression.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from dbforge.models.events import ProgressEvent

if TYPE_CHECKING:
    from dbforge.routing.sinks import ProgressSink

logger = logging.getLogger(__name__)


class ProgressDispatcher:
    """Routes progress events to ALL configured sinks.

    The dispatcher itself satisfies ``ProgressSink``, so it can be injected
    anywhere a single sink is expected.

    Usage
    -----
    >>> dispatcher = ProgressDispatcher()
    >>> dispatcher.register_sink(jsonl_sink)
    >>> dispatcher.register_sink(rich_sink)
    >>> dispatcher.on_progress(event)
    """

    def __init__(self, sinks: list[ProgressSink] | None = None) -> None:
        self._lock = threading.Lock()
        self._sinks: list[ProgressSink] = []
        self._failures = 0
        for sink in sinks or []:
            self.register_sink(sink)

    @property
    def sink_name(self) -> str:
        return "dispatcher"

    # ------------------------------------------------------------------
    # Sink management
    # ------------------------------------------------------------------

    def register_sink(self, sink: ProgressSink) -> None:
        """Register a sink.  Registering the same instance twice is ignored."""
        with self._lock:
            if sink not in self._sinks:
                self._sinks.append(sink)
                logger.debug("Registered progress sink: %s", sink.sink_name)

    def unregister_sink(self, sink: ProgressSink) -> None:
        with self._lock:
            try:
                self._sinks.remove(sink)
            except ValueError:
                pass

    @property
    def registered_sinks(self) -> list[ProgressSink]:
        with self._lock:
            return list(self._sinks)

    @property
    def failure_count(self) -> int:
        """Number of sink deliveries that raised since construction."""
        return self._failures

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def on_progress(self, event: ProgressEvent) -> None:
        """Deliver *event* to every sink; sink failures are logged, not raised."""
        for sink in self.registered_sinks:
            try:
                sink.on_progress(event)
            except Exception as exc:  # noqa: BLE001
                with self._lock:
                    self._failures += 1
                logger.warning(
                    "Progress sink %s failed for %s event of %s: %s",
                    sink.sink_name,
                    event.event_kind.value,
                    event.name,
                    exc,
                )
