"""Register level client for WB-MIO devices."""

from __future__ import annotations

import logging
import os
from typing import Optional

from . import registers as REG
from .codec import decode_speed, encode_speed
from .config import Config
from .errors import WbSpeedError
from .transport import FakeTransport, ModbusClientTransport, RTUTransport, Transport

logger = logging.getLogger(__name__)


def make_transport(cfg: Config) -> Transport:
    """Build the transport selected by ``cfg.transport``."""
    if os.getenv("WBSPEED_FAKE"):
        return FakeTransport(cfg)
    if cfg.transport == "modbus_client":
        return ModbusClientTransport(cfg)
    return RTUTransport(cfg)


class RegisterClient:
    """Single register reads and writes against one device."""

    def __init__(self, cfg: Optional[Config] = None, transport: Optional[Transport] = None) -> None:
        self.cfg = cfg or Config.from_env()
        self.transport = transport

    def connect(self) -> None:
        """Initialise the transport lazily."""
        if self.transport is not None:
            return
        self.transport = make_transport(self.cfg)

    def _ensure_transport(self) -> Transport:
        if self.transport is None:
            raise WbSpeedError("not connected")
        return self.transport

    # ---- Low level ----
    def read_register(self, address: int) -> int:
        """Read one holding register (function 0x03)."""
        regs = self._ensure_transport().read_holding_registers(address, 1)
        logger.debug("read register %s -> %s", address, regs[0])
        return int(regs[0])

    def write_register(self, address: int, value: int) -> None:
        """Write one holding register (function 0x06)."""
        logger.debug("write register %s <- %s", address, value)
        self._ensure_transport().write_register(address, int(value))

    # ---- High level ----
    def read_address(self) -> int:
        return self.read_register(REG.ADDRESS)

    def read_speed(self) -> int:
        """Return the configured baud rate of the device."""
        return decode_speed(self.read_register(REG.SPEED))

    def set_speed(self, baudrate: int) -> int:
        """Write ``baudrate`` to the speed register and return the code sent."""
        code = encode_speed(baudrate)
        self.write_register(REG.SPEED, code)
        return code

    def reboot(self) -> None:
        self.write_register(REG.REBOOT, 1)

    def close(self) -> None:
        """Close the underlying transport."""
        if self.transport is not None:
            self.transport.close()
