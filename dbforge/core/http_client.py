"""HTTP client construction.

One ``httpx.AsyncClient`` is built per run and passed explicitly into every
resource task; nothing in the pipeline reaches for a process-wide client.
"""

from __future__ import annotations

from typing import Any

import httpx

GZIP_CONTENT_TYPE = "application/x-gzip"


def build_http_client(config: Any, **overrides: Any) -> httpx.AsyncClient:
    """Create the shared async client for a run.

    ``overrides`` are passed straight to :class:`httpx.AsyncClient`; tests use
    ``transport=httpx.MockTransport(...)``.
    """
    options: dict[str, Any] = {
        "timeout": httpx.Timeout(config.http_timeout_seconds),
        "follow_redirects": config.follow_redirects,
        "headers": {"User-Agent": config.user_agent},
    }
    options.update(overrides)
    return httpx.AsyncClient(**options)
