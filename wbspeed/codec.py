"""Conversion between baud rates and WB-MIO register values."""

from __future__ import annotations

import re

from .errors import MalformedRegisterValue, UnsupportedBaudRate
from .registers import SPEED_TABLE

_NUMBER = re.compile(r"(?<![-\w])(?:0[xX][0-9a-fA-F]+|\d+)")


def encode_speed(baudrate: int) -> int:
    """Return the speed register code for ``baudrate``.

    Only allow-listed rates are accepted. The firmware takes any code but an
    undocumented one leaves the port at a rate nothing else can talk to.
    """
    try:
        return SPEED_TABLE[baudrate]
    except KeyError:
        raise UnsupportedBaudRate(
            f"unsupported baud rate {baudrate}; choose one of {supported_speeds()}"
        ) from None


def decode_speed(code: int) -> int:
    """Return the baud rate encoded in a speed register value."""
    return int(code) * 100


def supported_speeds() -> list[int]:
    return sorted(SPEED_TABLE)


def parse_baud_rate(text: str) -> int:
    """Parse operator input into an allow-listed baud rate."""
    value = text.strip()
    if not value.isdigit():
        raise UnsupportedBaudRate(f"invalid speed: {text!r}")
    baudrate = int(value)
    encode_speed(baudrate)
    return baudrate


def parse_register_value(text: str) -> int:
    """Extract a register value from decorated tool output.

    Accepts ``"0x0060"``, ``"96"`` or labelled forms such as
    ``"Data: 0x0060"``. Hex needs the ``0x`` prefix.
    """
    match = _NUMBER.search(text or "")
    if match is None:
        raise MalformedRegisterValue(f"no numeric payload in {text!r}")
    token = match.group(0)
    value = int(token, 16) if token[:2].lower() == "0x" else int(token, 10)
    if value > 0xFFFF:
        raise MalformedRegisterValue(f"register value out of range: {token}")
    return value
