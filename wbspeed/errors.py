"""Custom exceptions for the wbspeed package."""


class WbSpeedError(Exception):
    """Base class for all wbspeed related errors."""


class ConfigError(WbSpeedError, ValueError):
    """Invalid connection or session parameter."""


class TransportError(WbSpeedError):
    """Communication error in the transport layer."""


# The device did not answer, or answered with garbage.
CommunicationFailure = TransportError


class TimeoutError(TransportError):
    """Raised when a transport operation times out."""


class MalformedRegisterValue(WbSpeedError):
    """A register payload could not be parsed as a number."""


class UnsupportedBaudRate(WbSpeedError, ValueError):
    """Baud rate is not in the device's allow-list."""


class BridgeStartupFailure(WbSpeedError):
    """The TCP-to-serial bridge died or never came up."""


class ServiceControlFailure(WbSpeedError):
    """The conflicting service did not stop or start as expected."""
