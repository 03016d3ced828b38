"""pyfleetanim - Buffered animation of live and historical fleet vehicle updates."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyfleetanim")
except PackageNotFoundError:
    __version__ = "0+local"
from pyfleetanim.animation import VehicleAnimation
from pyfleetanim.client import FleetClient
from pyfleetanim.clock import AnimationClock, AsyncioFrameClock, ClockSource
from pyfleetanim.config import FleetConfig
from pyfleetanim.exceptions import (
    FleetApiError,
    FleetAuthenticationError,
    FleetConfigError,
    FleetError,
    FleetTransportError,
)
from pyfleetanim.models import (
    AnimationOptions,
    BoundingBox,
    VehicleFrameState,
    VehicleRecord,
    VehicleUpdate,
    format_iso8601,
    parse_timestamp,
)
from pyfleetanim.projection import Viewport, project_frame, select_current_updates
from pyfleetanim.session import Credentials
from pyfleetanim.state.events import AnimationMode, DriverState
from pyfleetanim.state.store import Buffer, merge_batch
from pyfleetanim.state.window import BufferWindow

__all__ = [
    "__version__",
    "AnimationClock",
    "AnimationMode",
    "AnimationOptions",
    "AsyncioFrameClock",
    "BoundingBox",
    "Buffer",
    "BufferWindow",
    "ClockSource",
    "Credentials",
    "DriverState",
    "FleetApiError",
    "FleetAuthenticationError",
    "FleetClient",
    "FleetConfig",
    "FleetConfigError",
    "FleetError",
    "FleetTransportError",
    "VehicleAnimation",
    "VehicleFrameState",
    "VehicleRecord",
    "VehicleUpdate",
    "Viewport",
    "format_iso8601",
    "merge_batch",
    "parse_timestamp",
    "project_frame",
    "select_current_updates",
]
