"""Custom exception hierarchy for pyfleetanim."""

from __future__ import annotations


class FleetError(Exception):
    """Base exception for all pyfleetanim errors."""


class FleetConfigError(FleetError):
    """Invalid or missing configuration."""


class FleetTransportError(FleetError):
    """Connection-level failure (socket closed, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str = "",
    ) -> None:
        self.endpoint = endpoint
        super().__init__(message)


class FleetApiError(FleetError):
    """Realtime service replied with a non-zero code (application-level error)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class FleetAuthenticationError(FleetApiError):
    """API key or fleet key rejected by the realtime service."""
