"""Serial speed reconfiguration for WB-MIO Modbus gateways."""

from importlib import metadata as _metadata

try:
    __version__ = _metadata.version("wb-mio-speed")
except _metadata.PackageNotFoundError:  # pragma: no cover - package not installed
    __version__ = "0.0.0"

from .client import RegisterClient
from .codec import decode_speed, encode_speed
from .config import Config
from .models import ExitCode, SessionState
from .session import SpeedSession
__all__ = [
    "RegisterClient",
    "Config",
    "SpeedSession",
    "ExitCode",
    "SessionState",
    "encode_speed",
    "decode_speed",
    "__version__",
]
