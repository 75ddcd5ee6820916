"""Shared formatting helpers for progress sinks."""

from __future__ import annotations

from dbforge.models.events import ProgressEvent, StatusEvent


def format_bytes(count: int) -> str:
    """Render a byte count with a binary unit.

    >>> format_bytes(1536)
    '1.5 KiB'
    """
    value = float(count)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if value < 1024 or unit == "GiB":
            return f"{int(value)} B" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GiB"


def format_event(event: ProgressEvent) -> str:
    """One-line human summary of an event."""
    if isinstance(event, StatusEvent):
        line = f"{event.name} [{event.artifact.value}] {event.status}"
        return f"{line}: {event.message}" if event.message else line

    label = event.event_kind.value
    done = format_bytes(event.completed)
    fraction = event.fraction
    if fraction is None:
        return f"{event.name} {label}: {done}"
    return f"{event.name} {label}: {done} / {format_bytes(event.total)} ({fraction:.0%})"


def stream_key(event: ProgressEvent) -> tuple[str, str, str]:
    """Identify the byte stream an event reports on: (resource, kind, artifact)."""
    artifact = getattr(event, "artifact", None)
    return (event.name, event.event_kind.value, artifact.value if artifact else "")
