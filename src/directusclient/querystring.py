"""Bracket-notation query strings as understood by Directus.

Directus decodes query parameters the way PHP does, so arrays and nested
objects are flattened with ``[]`` and ``[key]`` suffixes::

    >>> stringify({"filter": {"status": ["published", "draft"]}, "limit": 10})
    'filter%5Bstatus%5D%5B%5D=published&filter%5Bstatus%5D%5B%5D=draft&limit=10'

Encoding follows RFC 3986: only ``A-Z a-z 0-9 - _ . ~`` are left as-is, so the
brackets themselves are percent-encoded, the same as ``qs`` with ``arrayFormat: "brackets"``.
"""

import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote, unquote_plus

_KEY_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


def stringify(params: Optional[Mapping[str, Any]]) -> str:
    """Serialize ``params`` into a bracket-notation query string.

    Args:
        params (Mapping[str, Any] | None): Query parameters; values may be scalars,
            lists/tuples or nested mappings.

    Returns:
        str: The encoded query string without a leading ``?``. Empty lists and
            empty mappings produce nothing; None produces ``key=``; datetimes are
            written as UTC ISO 8601 with milliseconds and a ``Z`` suffix.
    """
    if not params:
        return ""
    parts: List[str] = []
    for key, value in params.items():
        _flatten(str(key), value, parts)
    return "&".join(parts)


def _flatten(prefix: str, value: Any, parts: List[str]) -> None:
    if value is None:
        parts.append(f"{_encode(prefix)}=")
    elif isinstance(value, Mapping):
        for key, item in value.items():
            _flatten(f"{prefix}[{key}]", item, parts)
    elif _is_sequence(value):
        for item in value:
            _flatten(f"{prefix}[]", item, parts)
    else:
        parts.append(f"{_encode(prefix)}={_encode(_format_scalar(value))}")


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return _format_datetime(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _format_datetime(value: datetime) -> str:
    # UTC with millisecond precision and a Z suffix; naive values are taken as UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def _encode(text: str) -> str:
    return quote(text, safe="-_.~", encoding="utf-8")


def parse(query: str) -> Dict[str, Any]:
    """Decode a bracket-notation query string into nested dicts and lists.

    All leaf values are returned as strings.

    Example:
        >>> parse("filter%5Bstatus%5D%5B%5D=published&filter%5Bstatus%5D%5B%5D=draft")
        {'filter': {'status': ['published', 'draft']}}
    """
    result: Dict[str, Any] = {}
    for pair in query.lstrip("?").split("&"):
        if not pair:
            continue
        raw_key, _, raw_value = pair.partition("=")
        segments = _split_key(unquote_plus(raw_key))
        _assign(result, segments, unquote_plus(raw_value))
    return result


def _split_key(key: str) -> List[str]:
    head, bracket, rest = key.partition("[")
    if not bracket or not head:
        return [key]
    segments = [head]
    segments.extend(match.group(1) for match in _KEY_SEGMENT.finditer(bracket + rest))
    return segments


def _assign(node: Any, segments: List[str], value: str) -> None:
    segment, rest = segments[0], segments[1:]
    if not rest:
        if isinstance(node, list):
            node.append(value)
        else:
            node[segment] = value
        return

    def new_child() -> Any:
        return [] if rest[0] == "" else {}

    if isinstance(node, list):
        # a[][b]=1&a[][c]=2 builds a single object until a key repeats
        if node and isinstance(node[-1], dict) and rest[0] and rest[0] not in node[-1]:
            child = node[-1]
        else:
            child = new_child()
            node.append(child)
    else:
        child = node.get(segment)
        if not isinstance(child, (dict, list)):
            child = new_child()
            node[segment] = child
    _assign(child, rest, value)
