"""Small helpers for mappings, timestamps, event streams and authorization headers."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(\.\d+)?(Z|[+-]\d{2}:\d{2})"
)


def get_string_from_map(data: dict[str, Any], key: str) -> str | None:
    """Return the value under ``key`` if it is a string, else None."""
    value = data.get(key)
    return value if isinstance(value, str) else None


def parse_rfc3339nano_to_unix_time(value: str) -> int:
    """Parse an RFC 3339 timestamp (fraction up to nanoseconds) into Unix seconds."""
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f"cannot parse {value!r} as RFC 3339")
    year, month, day, hour, minute, second = (int(match.group(i)) for i in range(1, 7))
    zone = match.group(8)
    if zone == "Z":
        offset = timedelta(0)
    else:
        zone_hours, zone_minutes = int(zone[1:3]), int(zone[4:6])
        if zone_hours >= 24 or zone_minutes >= 60:
            raise ValueError(f"time zone offset out of range in {value!r}")
        offset = timedelta(hours=zone_hours, minutes=zone_minutes)
        if zone[0] == "-":
            offset = -offset
    moment = datetime(year, month, day, hour, minute, second, tzinfo=timezone(offset))
    return (moment - _EPOCH) // timedelta(seconds=1)


def event_stream_headers() -> dict[str, str]:
    """Headers for a server-sent event response."""
    return {
        "Content-Type": "text/event-stream",
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "Transfer-Encoding": "chunked",
        "X-Accel-Buffering": "no",
    }


def sse_done_frame() -> str:
    """The frame that ends an OpenAI-style event stream."""
    return "data: [DONE]\n\n"


def get_api_key_from_header(auth_header: str | None) -> str:
    """Extract the key from a ``Bearer <key>`` Authorization value."""
    if not auth_header:
        raise ValueError("invalid authorization header format")
    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise ValueError("authorization header not found")
    return parts[1]