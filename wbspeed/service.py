"""Control of the systemd service that normally owns the serial port."""

from __future__ import annotations

import logging
import subprocess
from typing import Callable

from .errors import ServiceControlFailure

logger = logging.getLogger(__name__)


class SystemdService:
    """Thin wrapper around ``systemctl`` for a single unit."""

    timeout = 30

    def __init__(
        self,
        name: str,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.name = name
        self._run = run

    def _systemctl(self, *args: str) -> subprocess.CompletedProcess:
        try:
            return self._run(
                ["systemctl", *args],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise ServiceControlFailure(f"timeout running systemctl {' '.join(args)}") from exc
        except OSError as exc:
            raise ServiceControlFailure(f"cannot run systemctl: {exc}") from exc

    def is_active(self) -> bool:
        return self._systemctl("is-active", "--quiet", self.name).returncode == 0

    def stop(self) -> None:
        logger.info("Stopping the %s service...", self.name)
        self._systemctl("stop", self.name)
        if self.is_active():
            raise ServiceControlFailure(f"The {self.name} service is still active!")
        logger.info("The %s service has been stopped.", self.name)

    def start(self) -> None:
        logger.info("Starting the %s service...", self.name)
        self._systemctl("start", self.name)
        if not self.is_active():
            raise ServiceControlFailure(f"Failed to start the {self.name} service!")
        logger.info("The %s service started successfully.", self.name)


class NullService:
    """Service stand-in for simulations."""

    def __init__(self, name: str = "") -> None:
        self.name = name

    def is_active(self) -> bool:
        return False

    def stop(self) -> None:
        pass

    def start(self) -> None:
        pass
