"""Device session: verify, read, optionally change the speed."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from .client import RegisterClient, make_transport
from .codec import parse_baud_rate, supported_speeds
from .config import Config
from .errors import (
    BridgeStartupFailure,
    CommunicationFailure,
    MalformedRegisterValue,
    ServiceControlFailure,
    UnsupportedBaudRate,
)
from .models import DeviceStatus, ExitCode, SessionState
from .prompt import ConsolePrompt

logger = logging.getLogger(__name__)

RULE = "=" * 59


class Bridge(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...


class Service(Protocol):
    name: str

    def stop(self) -> None: ...

    def start(self) -> None: ...


class Prompt(Protocol):
    def ask(self, question: str) -> str: ...

    def confirm(self, question: str) -> bool: ...


def _default_client(cfg: Config) -> RegisterClient:
    return RegisterClient(cfg, transport=make_transport(cfg))


class SpeedSession:
    """Runs one speed change session and returns the process exit code.

    The displaced service is stopped before the bridge starts and restarted
    after the bridge stops, whatever happens in between.
    """

    def __init__(
        self,
        cfg: Config,
        *,
        service: Service,
        bridge: Bridge,
        prompt: Optional[Prompt] = None,
        client_factory: Callable[[Config], RegisterClient] = _default_client,
    ) -> None:
        self.cfg = cfg
        self.service = service
        self.bridge = bridge
        self.prompt = prompt or ConsolePrompt()
        self.client_factory = client_factory
        self.state = SessionState.IDLE
        self.status = DeviceStatus(expected_address=cfg.slave_id)

    def _enter(self, state: SessionState) -> None:
        logger.debug("session state %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self) -> int:
        self._stop_service()
        logger.info(RULE)
        try:
            try:
                self.bridge.start()
            except BridgeStartupFailure as exc:
                logger.error("Failed to start socat: %s. Exiting.", exc)
                logger.info(RULE)
                return ExitCode.FAILURE
            self._enter(SessionState.BRIDGE_UP)
            logger.info(RULE)
            try:
                return self._talk()
            finally:
                logger.info(RULE)
                logger.info("Finishing up: stopping socat and restarting %s...", self.service.name)
                self.bridge.stop()
                self._enter(SessionState.BRIDGE_DOWN)
        finally:
            self._start_service()
            self._enter(SessionState.IDLE)

    def _stop_service(self) -> None:
        try:
            self.service.stop()
        except ServiceControlFailure as exc:
            logger.warning("%s", exc)

    def _start_service(self) -> None:
        try:
            self.service.start()
        except ServiceControlFailure as exc:
            logger.error("%s", exc)

    def _talk(self) -> int:
        try:
            client = self.client_factory(self.cfg)
        except CommunicationFailure as exc:
            logger.error("Cannot open %s: %s. Exiting.", self.cfg.port, exc)
            return ExitCode.FAILURE
        try:
            return self._converse(client)
        finally:
            client.close()

    def _converse(self, client: RegisterClient) -> int:
        cfg = self.cfg
        try:
            self.status.address = client.read_address()
        except (CommunicationFailure, MalformedRegisterValue) as exc:
            logger.error("Failed to read the device address register: %s. Exiting.", exc)
            return ExitCode.FAILURE
        logger.info("Current device address (from the address register): %s", self.status.address)
        if self.status.address_matches:
            logger.info("The WB-MIO address is confirmed.")
        else:
            logger.warning(
                "The address register (%s) does NOT match the expected (%s)!",
                self.status.address,
                cfg.slave_id,
            )
        self._enter(SessionState.ADDRESS_VERIFIED)
        logger.info(RULE)

        try:
            self.status.speed = client.read_speed()
        except (CommunicationFailure, MalformedRegisterValue) as exc:
            logger.error("Failed to read the current speed: %s. Exiting.", exc)
            return ExitCode.FAILURE
        self._enter(SessionState.SPEED_READ)
        logger.info("The current device speed is: %s baud.", self.status.speed)
        logger.info(RULE)

        if not self.prompt.confirm("Do you want to change the speed?"):
            logger.info("Keeping the current device speed: %s baud.", self.status.speed)
            return ExitCode.OK
        self._enter(SessionState.SPEED_CHANGE_REQUESTED)

        logger.info("Available speeds: %s", " ".join(str(s) for s in supported_speeds()))
        answer = self.prompt.ask("Enter the desired speed (from the list above): ")
        try:
            baudrate = parse_baud_rate(answer)
        except UnsupportedBaudRate:
            logger.error("Invalid speed: %s", answer)
            return ExitCode.INVALID_SPEED

        try:
            code = client.set_speed(baudrate)
        except CommunicationFailure as exc:
            logger.error("Failed to write the speed register: %s", exc)
            return ExitCode.FAILURE
        logger.info("Selected speed: %s baud (code %s) written.", baudrate, code)
        self._enter(SessionState.SPEED_WRITTEN)

        if self.prompt.confirm("Reboot the device (to apply settings)?"):
            self._enter(SessionState.REBOOT_REQUESTED)
            try:
                client.reboot()
            except CommunicationFailure as exc:
                logger.error("Failed to send the reboot command: %s", exc)
                return ExitCode.FAILURE
            self._enter(SessionState.REBOOT_SENT)
            logger.info("Reboot command sent. The device will restart and switch to the new speed.")
        else:
            logger.info("Reboot not performed. The device may have already applied the new speed.")

        logger.info("After changing the speed, the old settings may no longer work.")
        logger.info("To continue at the new speed, rerun with --baud %s.", baudrate)
        return ExitCode.OK
