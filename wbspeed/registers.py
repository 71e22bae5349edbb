"""WB-MIO register definitions.

Addresses are protocol (0-based) addresses as listed in the Wiren Board
register tables, so they go on the wire unchanged.
"""

from types import MappingProxyType

SPEED = 110  # u16, baud / 100
REBOOT = 120  # write 1 to restart
ADDRESS = 128  # u16, modbus address 1..247

REGISTER_MAP = MappingProxyType(
    {
        "Speed": SPEED,
        "Address": ADDRESS,
        "Reboot": REBOOT,
    }
)

# baud -> register code
SPEED_TABLE = MappingProxyType(
    {
        1200: 12,
        2400: 24,
        4800: 48,
        9600: 96,
        19200: 192,
        38400: 384,
        57600: 576,
        115200: 1152,
    }
)
