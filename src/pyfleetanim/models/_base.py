"""Base model and timestamp helpers for realtime service payloads.

Every wire-facing model inherits from :class:`FleetBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase payload keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that strips sentinel values
  (``""``, ``"--"``, NaN) so the field default is used.

Timestamps travel as ISO-8601 strings or epoch numbers; both are
coerced to timezone-aware UTC datetimes by :data:`FleetTimestamp`.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

# Sentinel strings the realtime service uses for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan"})

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1e11


def _from_epoch(value: float) -> datetime | None:
    if math.isnan(value) or value <= 0:
        return None
    if value >= _MS_THRESHOLD:
        value /= 1000.0
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def parse_timestamp(value: Any) -> datetime | None:
    """Convert an ISO-8601 string or epoch number (seconds **or** milliseconds) to a UTC datetime.

    Naive values are assumed to be UTC. Returns ``None`` when the value
    is missing or cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        return _from_epoch(float(value))
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text in _SENTINELS:
        return None
    try:
        return _from_epoch(float(text))
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_iso8601(value: datetime) -> str:
    """Serialize *value* as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    utc = value.astimezone(UTC)
    return f"{utc.strftime('%Y-%m-%dT%H:%M:%S')}.{utc.microsecond // 1000:03d}Z"


FleetTimestamp = Annotated[datetime, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces ISO strings and epoch numbers to UTC datetimes."""


class FleetBaseModel(BaseModel):
    """Base for realtime service payload models.

    Handles:
    * camelCase → snake_case via ``alias_generator=to_camel``
    * sentinel values (``""``, ``"--"``, NaN) → dropped so the field
      default is used instead
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        """Strip sentinel values from *values*."""
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_sentinel_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return FleetBaseModel._clean_dict(values)
