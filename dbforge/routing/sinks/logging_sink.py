"""Logging sink — reports progress through the standard logging tree.

Byte-level events are throttled to one record per ``step`` fraction per
(resource, kind); status events are always logged at INFO.
"""

from __future__ import annotations

import logging
import threading

from dbforge.models.events import ProgressEvent, StatusEvent
from dbforge.routing.sinks._formatting import format_event, stream_key

logger = logging.getLogger(__name__)


class LoggingProgressSink:
    """Emits throttled log records for progress events.

    Parameters
    ----------
    step:
        Minimum change in completed fraction between two records for the
        same transfer.  Events with an unknown total are logged at DEBUG.
    level:
        Level used for byte-progress records.
    """

    def __init__(self, step: float = 0.1, level: int = logging.INFO) -> None:
        self._step = step
        self._level = level
        self._last_fraction: dict[tuple[str, str, str], float] = {}
        self._lock = threading.Lock()

    @property
    def sink_name(self) -> str:
        return "logging"

    def on_progress(self, event: ProgressEvent) -> None:
        if isinstance(event, StatusEvent):
            logger.info("%s", format_event(event))
            return

        fraction = event.fraction
        if fraction is None:
            logger.debug("%s", format_event(event))
            return

        key = stream_key(event)
        with self._lock:
            last = self._last_fraction.get(key)
            # A smaller fraction means the stream restarted.
            if (
                last is not None
                and last <= fraction < 1.0
                and fraction - last < self._step
            ):
                return
            self._last_fraction[key] = fraction
        logger.log(self._level, "%s", format_event(event))
