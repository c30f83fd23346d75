"""
Result Comparator
=================

Canonical text form of query results, compared by plain string equality
against the recorded ground truth result.

Row order is kept as returned by the database; queries without ORDER BY
are only as stable as SQLite's default ordering.
"""

import json
from typing import Any, Sequence

EMPTY_RESULT = "[]"


def _normalize_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    # 300.0 and 300 must serialize identically
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def serialize_rows(rows: Sequence[dict[str, Any]]) -> str:
    """
    Serialize rows to compact JSON with sorted keys.

    The same rows always produce the same string, and an empty result is ``"[]"``.
    """
    normalized = [
        {column: _normalize_value(value) for column, value in row.items()}
        for row in rows
    ]
    return json.dumps(normalized, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def canonicalize_result(text: str) -> str:
    """
    Bring a recorded result string into the same form as ``serialize_rows``.

    Strings that are not a JSON list of objects are only stripped.
    """
    text = text.strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return text
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        return text
    return serialize_rows(data)


def results_match(rows: Sequence[dict[str, Any]], expected: str) -> bool:
    """True if ``rows`` serialize to the recorded ground truth result."""
    return serialize_rows(rows) == canonicalize_result(expected)
