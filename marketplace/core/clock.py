from __future__ import annotations

from datetime import UTC, datetime


def now_ms() -> int:
    """Current time as integer milliseconds since the Unix epoch."""
    return int(datetime.now(UTC).timestamp() * 1000)
