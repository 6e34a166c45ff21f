"""Monitor configuration model.

A monitor is stored as one flat record, but only some of its fields are live
for a given ``type``. ``TYPE_FIELDS`` is the single table that says which
type-specific fields belong to which type; validation and the probe work list
(``probe_config``) both read from it, so neither re-derives relevance.

Fields that belong to another type are never rejected and never erased: a
client may send stale fields, and a type change keeps the previous type's
fields around. They are simply inert.
"""
import json
import re
from typing import Any, Dict, Optional

from ..errors import ValidationError

HTTP_FAMILY = ("http", "http_keyword", "http_json")

MONITOR_TYPES = HTTP_FAMILY + ("tcp", "ws", "steam", "docker", "ping", "dns", "push")

HTTP_FIELDS = ("expected_status", "method", "headers", "body")

# Type-specific fields live for each monitor type
TYPE_FIELDS: Dict[str, tuple] = {
    "http": HTTP_FIELDS,
    "http_keyword": HTTP_FIELDS + ("keyword",),
    "http_json": HTTP_FIELDS + ("json_path", "json_value"),
    "tcp": (),
    "ws": (),
    "steam": (),
    "docker": (),
    "ping": (),
    "dns": (),
    "push": ("push_token",),
}

TYPE_SPECIFIC_FIELDS = tuple(sorted({f for fields in TYPE_FIELDS.values() for f in fields}))

COMMON_FIELDS = ("name", "type", "target", "interval", "timeout", "max_retries", "enabled", "group_id")

# Fields a client may author; push_token is issued by the server only
EDITABLE_FIELDS = COMMON_FIELDS + tuple(f for f in TYPE_SPECIFIC_FIELDS if f != "push_token")

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

MIN_INTERVAL = 10
MIN_TIMEOUT = 1

# "200", "2xx", "200,301,3xx"
EXPECTED_STATUS_PATTERN = re.compile(r"^[1-5](\d\d|xx)(\s*,\s*[1-5](\d\d|xx))*$")

TARGET_SCHEMES = {
    "http": ("http://", "https://"),
    "http_keyword": ("http://", "https://"),
    "http_json": ("http://", "https://"),
    "ws": ("ws://", "wss://"),
}


def relevant_fields(monitor_type: str) -> tuple:
    """Type-specific fields that are live for ``monitor_type``."""
    return TYPE_FIELDS.get(monitor_type, ())


def is_actively_probed(monitor_type: str) -> bool:
    """Push monitors are fed by heartbeats, everything else by the probe engine."""
    return monitor_type != "push"


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _require_int(draft: dict, field: str, minimum: int) -> int:
    value = draft.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    if value < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    return value


def _validate_http_fields(monitor: dict):
    expected = monitor.get("expected_status")
    if not _blank(expected):
        if not EXPECTED_STATUS_PATTERN.match(expected.strip()):
            raise ValidationError(
                "expected_status must be a status code or class, e.g. '200', '2xx' or '200,3xx'"
            )
        monitor["expected_status"] = expected.strip()

    method = monitor.get("method")
    if not _blank(method):
        method = method.strip().upper()
        if method not in HTTP_METHODS:
            raise ValidationError(f"method must be one of {', '.join(HTTP_METHODS)}")
        monitor["method"] = method

    headers = monitor.get("headers")
    if not _blank(headers):
        try:
            parsed = json.loads(headers)
        except (TypeError, ValueError):
            raise ValidationError("headers must be a JSON object string")
        if not isinstance(parsed, dict):
            raise ValidationError("headers must be a JSON object string")


def validate_monitor(draft: dict) -> dict:
    """Validate a complete monitor draft and return its normalized form.

    ``draft`` holds the common fields plus any type-specific fields. The
    returned dict carries every field of the draft; fields irrelevant to the
    active type pass through untouched.

    Raises:
        ValidationError: on the first violated rule
    """
    monitor = dict(draft)

    name = monitor.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name must not be empty")
    monitor["name"] = name.strip()

    monitor_type = monitor.get("type")
    if monitor_type not in MONITOR_TYPES:
        raise ValidationError(f"type must be one of {', '.join(MONITOR_TYPES)}")

    monitor["interval"] = _require_int(monitor, "interval", MIN_INTERVAL)
    monitor["timeout"] = _require_int(monitor, "timeout", MIN_TIMEOUT)
    monitor["max_retries"] = _require_int(monitor, "max_retries", 0)

    target = monitor.get("target")
    if monitor_type != "push":
        if _blank(target):
            raise ValidationError(f"target is required for {monitor_type} monitors")
        target = target.strip()
        schemes = TARGET_SCHEMES.get(monitor_type)
        if schemes and not target.lower().startswith(schemes):
            raise ValidationError(
                f"target for {monitor_type} monitors must start with {' or '.join(schemes)}"
            )
        monitor["target"] = target

    if monitor_type in HTTP_FAMILY:
        _validate_http_fields(monitor)

    if monitor_type == "http_keyword" and _blank(monitor.get("keyword")):
        raise ValidationError("keyword is required for http_keyword monitors")

    if monitor_type == "http_json":
        has_path = not _blank(monitor.get("json_path"))
        has_value = not _blank(monitor.get("json_value"))
        if has_path != has_value:
            raise ValidationError("json_path and json_value must be set together")

    if "enabled" in monitor and monitor["enabled"] is None:
        monitor["enabled"] = True

    return monitor


def _field(monitor: Any, name: str) -> Optional[Any]:
    if isinstance(monitor, dict):
        return monitor.get(name)
    return getattr(monitor, name, None)


def probe_config(monitor: Any) -> dict:
    """What the probing engine may act on: common probe settings plus the
    active type's fields only. Inert fields never leak into this view."""
    monitor_type = _field(monitor, "type")
    config = {
        "id": _field(monitor, "id"),
        "type": monitor_type,
        "target": _field(monitor, "target"),
        "interval": _field(monitor, "interval"),
        "timeout": _field(monitor, "timeout"),
        "max_retries": _field(monitor, "max_retries"),
    }
    for name in relevant_fields(monitor_type):
        if name == "push_token":
            continue
        config[name] = _field(monitor, name)
    if monitor_type in HTTP_FAMILY:
        config["method"] = config.get("method") or "GET"
        headers = config.get("headers")
        config["headers"] = json.loads(headers) if not _blank(headers) else {}
    return config
