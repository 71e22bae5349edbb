"""Data models for a speed change session."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


class ExitCode(IntEnum):
    """Process exit status of a session."""

    OK = 0
    FAILURE = 1
    INVALID_SPEED = 2
    USAGE = 64
    INTERRUPTED = 130


class SessionState(Enum):
    """Steps of the session, in the order they are reached."""

    IDLE = "idle"
    BRIDGE_UP = "bridge_up"
    ADDRESS_VERIFIED = "address_verified"
    SPEED_READ = "speed_read"
    SPEED_CHANGE_REQUESTED = "speed_change_requested"
    SPEED_WRITTEN = "speed_written"
    REBOOT_REQUESTED = "reboot_requested"
    REBOOT_SENT = "reboot_sent"
    BRIDGE_DOWN = "bridge_down"


@dataclass
class DeviceStatus:
    """Values read from the device during a session."""

    expected_address: int
    address: Optional[int] = None
    speed: Optional[int] = None

    @property
    def address_matches(self) -> bool:
        return self.address == self.expected_address
