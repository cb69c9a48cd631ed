"""serialization.py — DynamoDB serialization/deserialization, timestamps, structured logging."""
from __future__ import annotations

import datetime as dt
import json
import logging
import re
from decimal import Decimal
from typing import Any, Dict, Optional

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

__all__ = [
    "_deserialize",
    "_emit_structured_observability",
    "_format_ts",
    "_parse_ts",
    "_serialize",
    "_utc_now",
]

logger = logging.getLogger(__name__)

_SER = TypeSerializer()
_DESER = TypeDeserializer()

# ISO-8601 with an optional fraction of any precision (.NET "O" writes seven digits).
_TS_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(?P<frac>\d+))?(?P<tz>Z|[+-]\d{2}:?\d{2})?$"
)


# ---------------------------------------------------------------------------
# DynamoDB attribute values
# ---------------------------------------------------------------------------


def _serialize(value: Any) -> Dict[str, Any]:
    """Serialize a Python value for DynamoDB."""
    if isinstance(value, float):
        value = Decimal(str(value))
    return _SER.serialize(value)


def _deserialize(item: Dict[str, Any]) -> Dict[str, Any]:
    """Deserialize a DynamoDB item to a plain Python dict."""
    return {k: _DESER.deserialize(v) for k, v in item.items()}


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _format_ts(value: dt.datetime) -> str:
    """Render a timestamp as UTC ISO-8601 with microseconds and a Z suffix.

    Fixed width, so the string form sorts the same way the instants do; the
    status index relies on that.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_ts(raw: str) -> dt.datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Raises ValueError for anything that is not a timestamp.
    """
    m = _TS_RE.match(str(raw).strip())
    if not m:
        raise ValueError(f"Invalid timestamp: {raw!r}")
    text = m.group("base")
    frac = m.group("frac")
    if frac:
        text += "." + frac[:6].ljust(6, "0")
    tz = m.group("tz") or "Z"
    if tz == "Z":
        tz = "+00:00"
    elif ":" not in tz:
        tz = f"{tz[:3]}:{tz[3:]}"
    return dt.datetime.fromisoformat(text + tz).astimezone(dt.timezone.utc)


# ---------------------------------------------------------------------------
# Structured observability
# ---------------------------------------------------------------------------


def _emit_structured_observability(
    *,
    component: str,
    event: str,
    request_id: Optional[str] = None,
    status_code: Optional[int] = None,
    error_code: Optional[str] = None,
    latency_ms: Optional[int] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    payload: Dict[str, Any] = {
        "timestamp": _format_ts(_utc_now()),
        "component": component,
        "event": event,
        "request_id": str(request_id or ""),
        "status_code": int(status_code or 0),
        "error_code": str(error_code or ""),
        "latency_ms": int(max(0, latency_ms or 0)),
    }
    if extra:
        payload.update(extra)
    logger.info("[OBSERVABILITY] %s", json.dumps(payload, sort_keys=True, default=str))
