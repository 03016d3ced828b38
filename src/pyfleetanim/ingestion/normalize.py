"""Normalization helpers.

Centralizes defensive parsing and placeholder handling.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def first_float(data: dict[str, Any], *keys: str) -> float | None:
    """Return the first parseable float among *keys* of *data*."""
    for key in keys:
        parsed = safe_float(data.get(key))
        if parsed is not None:
            return parsed
    return None
