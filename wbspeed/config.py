"""Configuration handling for wbspeed."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import ConfigError

PARITIES = ("none", "even", "odd")
TRANSPORTS = ("pymodbus", "modbus_client")


def _get_env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


@dataclass(frozen=True)
class Config:
    """Connection and session parameters for one speed change session."""

    # TCP side of the bridge
    host: str = "10.10.100.7"
    tcp_port: int = 20108
    # Virtual serial port created by the bridge
    port: str = "/dev/ttyRS485-6"
    # Settings the device currently talks at
    baudrate: int = 9600
    parity: str = "none"
    stopbits: int = 1
    bytesize: int = 8
    slave_id: int = 139
    timeout: float = 1.0

    service: str = "wb-mqtt-serial"
    transport: str = "pymodbus"
    bridge_grace: float = 2.0
    socat: str = "socat"
    modbus_client: str = "modbus_client"
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.parity not in PARITIES:
            raise ConfigError(f"parity must be one of {PARITIES}, got {self.parity!r}")
        if self.stopbits not in (1, 2):
            raise ConfigError(f"stop bits must be 1 or 2, got {self.stopbits}")
        if not 1 <= self.slave_id <= 247:
            raise ConfigError(f"device address must be 1..247, got {self.slave_id}")
        if self.transport not in TRANSPORTS:
            raise ConfigError(f"transport must be one of {TRANSPORTS}, got {self.transport!r}")
        if self.bridge_grace < 0:
            raise ConfigError("bridge grace period must not be negative")

    @property
    def parity_code(self) -> str:
        """Single letter parity as used by pyserial/pymodbus."""
        return self.parity[0].upper()

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from ``WBSPEED_*`` environment variables."""
        defaults = cls()
        return cls(
            host=os.getenv("WBSPEED_HOST", defaults.host),
            tcp_port=_get_env_int("WBSPEED_TCP_PORT", defaults.tcp_port),
            port=os.getenv("WBSPEED_PORT", defaults.port),
            baudrate=_get_env_int("WBSPEED_BAUD", defaults.baudrate),
            parity=os.getenv("WBSPEED_PARITY", defaults.parity).lower(),
            stopbits=_get_env_int("WBSPEED_STOPBITS", defaults.stopbits),
            slave_id=_get_env_int("WBSPEED_SLAVE_ID", defaults.slave_id),
            timeout=_get_env_float("WBSPEED_TIMEOUT", defaults.timeout),
            service=os.getenv("WBSPEED_SERVICE", defaults.service),
            transport=os.getenv("WBSPEED_TRANSPORT", defaults.transport),
            bridge_grace=_get_env_float("WBSPEED_BRIDGE_GRACE", defaults.bridge_grace),
        )
