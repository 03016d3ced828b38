"""Credential context for authenticated update requests."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class Credentials(BaseModel):
    """Credentials supplied by the surrounding user session.

    Parameters
    ----------
    api_key : str
        API key of the authenticated user.
    fleet_key : str
        Fleet whose vehicle updates are requested.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    api_key: str
    fleet_key: str

    @field_validator("api_key", "fleet_key")
    @classmethod
    def _require_non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("credential values must be non-empty")
        return value
