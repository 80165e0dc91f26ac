"""Reading rate-limit settings from credentials and limit records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple


class LimitType(str, Enum):
    QPS = "qps"
    QPM = "qpm"
    RPM = "rpm"
    CONCURRENCY = "concurrency"


@dataclass
class Limit:
    """Limit settings of a service; the first positive one takes effect."""

    qps: float = 0.0
    qpm: float = 0.0
    rpm: float = 0.0
    concurrency: float = 0.0
    timeout: int = 0


class LimitDetails(NamedTuple):
    limit_type: LimitType | None
    value: float
    timeout: int


_NO_LIMIT = LimitDetails(None, 0.0, 0)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def get_credential_limit(credentials: dict[str, Any]) -> LimitDetails:
    """Read the limit stored under ``"limit"`` in a credentials mapping.

    Keys are looked up in the order qps, qpm, rpm, concurrency; rpm is
    reported as qpm.
    """
    limit_data = credentials.get("limit")
    if not isinstance(limit_data, dict):
        return _NO_LIMIT

    timeout_value = limit_data.get("timeout")
    timeout = timeout_value if isinstance(timeout_value, int) and not isinstance(timeout_value, bool) else 0

    for key, reported in (
        (LimitType.QPS, LimitType.QPS),
        (LimitType.QPM, LimitType.QPM),
        (LimitType.RPM, LimitType.QPM),
        (LimitType.CONCURRENCY, LimitType.CONCURRENCY),
    ):
        value = limit_data.get(key.value)
        if _is_number(value):
            return LimitDetails(reported, float(value), timeout)
    return _NO_LIMIT


def get_limit_details(limit: Limit) -> LimitDetails:
    """Pick the effective limit out of a Limit record; rpm is reported as qpm."""
    if limit.qps > 0:
        return LimitDetails(LimitType.QPS, limit.qps, limit.timeout)
    if limit.qpm > 0:
        return LimitDetails(LimitType.QPM, limit.qpm, limit.timeout)
    if limit.rpm > 0:
        return LimitDetails(LimitType.QPM, limit.rpm, limit.timeout)
    if limit.concurrency > 0:
        return LimitDetails(LimitType.CONCURRENCY, limit.concurrency, limit.timeout)
    return _NO_LIMIT