"""Client configuration for pyfleetanim."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyfleetanim.exceptions import FleetConfigError
from pyfleetanim.session import Credentials

DEFAULT_REALTIME_URL = "wss://realtime.fleet.example/ws"


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise FleetConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class FleetConfig:
    """Client configuration.

    Parameters
    ----------
    api_key : str
        API key issued to the user account.
    fleet_key : str
        Identifier of the fleet whose vehicles are animated.
    realtime_url : str
        Websocket URL of the realtime vehicle update service.
    request_timeout : float
        Seconds to wait for a reply to a single update request before the
        transport gives up.  The animation loop never waits on it.
    frame_rate : float
        Frames per second delivered by the default asyncio frame clock.
    """

    api_key: str
    fleet_key: str
    realtime_url: str = DEFAULT_REALTIME_URL
    request_timeout: float = 15.0
    frame_rate: float = 60.0

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise FleetConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.frame_rate <= 0:
            raise FleetConfigError(f"frame_rate must be positive, got {self.frame_rate}")

    def credentials(self) -> Credentials:
        """Credentials sent with every update request."""
        return Credentials(api_key=self.api_key, fleet_key=self.fleet_key)

    @classmethod
    def from_env(cls, **overrides: Any) -> FleetConfig:
        """Create configuration from environment variables.

        Reads ``FLEET_API_KEY``, ``FLEET_KEY`` and the optional
        ``FLEET_REALTIME_URL``, ``FLEET_REQUEST_TIMEOUT`` and
        ``FLEET_FRAME_RATE`` variables. Explicit keyword arguments override
        environment values.

        Raises
        ------
        FleetConfigError
            If a required value is missing or a numeric value is invalid.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "FLEET_API_KEY": "api_key",
            "FLEET_KEY": "fleet_key",
            "FLEET_REALTIME_URL": "realtime_url",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Numeric fields, handle separately
        timeout_env = env.get("FLEET_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_float("FLEET_REQUEST_TIMEOUT", timeout_env)

        rate_env = env.get("FLEET_FRAME_RATE")
        if rate_env is not None and "frame_rate" not in overrides:
            config_kwargs["frame_rate"] = _env_float("FLEET_FRAME_RATE", rate_env)

        config_kwargs.update(overrides)

        for required in ("api_key", "fleet_key"):
            if not config_kwargs.get(required):
                raise FleetConfigError(f"Missing required setting: {required}")

        return cls(**config_kwargs)
