"""dbforge progress routing — delivers progress events to all configured sinks.

Sinks are pluggable targets: the JSON-lines file the desktop UI tails, the
logging tree, the CLI's live Rich display, or any custom object implementing
the ``ProgressSink`` protocol.  The ``ProgressDispatcher`` fans each event
out to every registered sink; delivery is best-effort.
"""

from dbforge.routing.dispatcher import ProgressDispatcher
from dbforge.routing.sinks import NullProgressSink, ProgressSink
from dbforge.routing.sinks.local_file import JsonLinesProgressSink
from dbforge.routing.sinks.logging_sink import LoggingProgressSink

__all__ = [
    "ProgressDispatcher",
    "ProgressSink",
    "NullProgressSink",
    "JsonLinesProgressSink",
    "LoggingProgressSink",
]
