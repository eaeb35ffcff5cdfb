"""pyuavsim - Async in-process simulator for an uncrewed aerial vehicle."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyuavsim")
except PackageNotFoundError:
    __version__ = "0+local"
from pyuavsim.config import SimulatorConfig
from pyuavsim.exceptions import (
    InvalidParameterError,
    SimulatorStateError,
    UavSimConfigError,
    UavSimError,
)
from pyuavsim.executor import CommandExecutor
from pyuavsim.models import (
    CommandRequest,
    CommandType,
    FlightMode,
    HomePosition,
    VehicleState,
)
from pyuavsim.simulator import UavSimulator
from pyuavsim.state.events import MutationSource, StateUpdate
from pyuavsim.state.observers import ObserverRegistry, Subscription
from pyuavsim.state.policy import ProgressionPolicy
from pyuavsim.state.rtl import RtlPhase
from pyuavsim.state.store import VehicleStateStore
from pyuavsim.track import TrackPoint, TrackRecorder

__all__ = [
    "__version__",
    "CommandExecutor",
    "CommandRequest",
    "CommandType",
    "FlightMode",
    "HomePosition",
    "InvalidParameterError",
    "MutationSource",
    "ObserverRegistry",
    "ProgressionPolicy",
    "RtlPhase",
    "SimulatorConfig",
    "SimulatorStateError",
    "StateUpdate",
    "Subscription",
    "TrackPoint",
    "TrackRecorder",
    "UavSimConfigError",
    "UavSimError",
    "UavSimulator",
    "VehicleState",
    "VehicleStateStore",
]
