"""TCP to virtual serial port bridge based on socat."""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Callable, List, Optional

from .config import Config
from .errors import BridgeStartupFailure

logger = logging.getLogger(__name__)

_PARITY_OPTS = {
    "none": "parenb=0",
    "even": "parenb=1,parodd=0",
    "odd": "parenb=1,parodd=1",
}


def socat_command(cfg: Config) -> List[str]:
    """Build the socat command line linking a PTY at ``cfg.port`` to TCP."""
    pty = ",".join(
        [
            "PTY",
            "raw",
            f"b{cfg.baudrate}",
            _PARITY_OPTS[cfg.parity],
            f"cstopb={1 if cfg.stopbits == 2 else 0}",
            f"cs{cfg.bytesize}",
            f"link={cfg.port}",
        ]
    )
    cmd = [cfg.socat, "-d", "-d"]
    if cfg.verbose:
        cmd.append("-x")
    return cmd + [pty, f"tcp:{cfg.host}:{cfg.tcp_port}"]


class SocatBridge:
    """Owns one socat process for the lifetime of a session."""

    poll_interval = 0.1
    stop_timeout = 5.0

    def __init__(
        self,
        cfg: Config,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cfg = cfg
        self._popen = popen
        self._sleep = sleep
        self._clock = clock
        self._proc: Optional[subprocess.Popen] = None

    @property
    def pid(self) -> Optional[int]:
        return self._proc.pid if self._proc is not None else None

    def is_alive(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def start(self) -> None:
        """Spawn socat, wait the grace period, then check it is still running."""
        cfg = self.cfg
        logger.info("Launching socat: TCP=%s:%s -> %s", cfg.host, cfg.tcp_port, cfg.port)
        try:
            self._proc = self._popen(socat_command(cfg))
        except OSError as exc:
            raise BridgeStartupFailure(f"cannot launch {cfg.socat}: {exc}") from exc

        deadline = self._clock() + cfg.bridge_grace
        try:
            while self._proc.poll() is None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    break
                self._sleep(min(self.poll_interval, remaining))
        except BaseException:
            self.stop()
            raise

        status = self._proc.poll()
        if status is not None:
            self._proc = None
            raise BridgeStartupFailure(f"socat exited with status {status}")
        logger.info("Socat started (PID %s).", self._proc.pid)

    def stop(self) -> None:
        """Terminate socat and reap it. Safe to call when not running."""
        proc, self._proc = self._proc, None
        if proc is None:
            return
        logger.info("Stopping socat (PID=%s)...", proc.pid)
        if proc.poll() is None:
            proc.terminate()
            try:
                proc.wait(timeout=self.stop_timeout)
            except subprocess.TimeoutExpired:
                logger.warning("socat ignored SIGTERM, killing it")
                proc.kill()
                proc.wait()
        logger.info("Socat has been stopped.")

    def __enter__(self) -> "SocatBridge":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


class NullBridge:
    """Bridge stand-in for simulations with no port to link."""

    def __init__(self, cfg: Optional[Config] = None) -> None:
        self._alive = False

    def is_alive(self) -> bool:
        return self._alive

    def start(self) -> None:
        self._alive = True

    def stop(self) -> None:
        self._alive = False
