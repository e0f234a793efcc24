"""Shape normalization and value coercion for loosely-typed JSON records."""

import math
from typing import Any, Dict, List, Optional


def unwrap_records(doc: Any) -> Optional[List[Any]]:
    """Normalize a loaded JSON document to a list of records.

    Accepted shapes, tried in order:
        - a bare list
        - a dict wrapping a list under any key (``items``, ``data``,
          ``rows``, ``parts`` ...); the first list-valued property wins
        - a dict of objects keyed by id, returned as its values

    Returns:
        The list of records, or None when the document has none of
        these shapes.
    """
    if isinstance(doc, list):
        return doc

    if not isinstance(doc, dict):
        return None

    for value in doc.values():
        if isinstance(value, list):
            return value

    if doc and all(isinstance(value, dict) for value in doc.values()):
        return list(doc.values())

    return None


def as_records(doc: Any) -> List[Dict[str, Any]]:
    """Like unwrap_records, but always a list and only dict entries."""
    records = unwrap_records(doc)
    if records is None:
        return []
    return [r for r in records if isinstance(r, dict)]


def as_mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def to_text(value: Any) -> str:
    """Coerce a JSON value to a trimmed string; None and empty lists become ''."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value).strip()
    return str(value).strip()


def to_number(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Parse a finite number from an int, float or numeric string.

    Booleans, containers, blanks and non-finite values return ``default``.
    """
    if isinstance(value, bool) or value is None:
        return default

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return default
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            number = float(text)
        except ValueError:
            return default
    else:
        return default

    return number if math.isfinite(number) else default


def format_number(value: Any) -> str:
    """Render numbers without a trailing '.0' so 1.0 reads as '1'."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)
