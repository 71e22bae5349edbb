"""Transport abstraction for Modbus communication."""

from __future__ import annotations

import logging
import subprocess
from typing import Callable, List, Optional

from pymodbus.client import ModbusSerialClient
from pymodbus.exceptions import ModbusException, ModbusIOException

from . import registers as REG
from .codec import parse_register_value
from .config import Config
from .errors import TimeoutError, TransportError

logger = logging.getLogger(__name__)


class Transport:
    """Abstract base class for transport implementations."""

    def read_holding_registers(self, address: int, count: int) -> List[int]:
        raise NotImplementedError

    def write_register(self, address: int, value: int) -> None:
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover - default
        """Close transport resources."""


class RTUTransport(Transport):
    """Serial RTU transport based on pymodbus.

    Each request is sent exactly once; the caller decides what to do next.
    """

    def __init__(self, cfg: Config) -> None:
        self._client = ModbusSerialClient(
            port=cfg.port,
            baudrate=cfg.baudrate,
            parity=cfg.parity_code,
            stopbits=cfg.stopbits,
            bytesize=cfg.bytesize,
            timeout=cfg.timeout,
            retries=0,
        )
        self._device_id = cfg.slave_id
        if not self._client.connect():
            raise TransportError(f"Serial connection failed on {cfg.port}")

    def _call(self, func, *args, **kwargs):
        try:
            result = func(*args, **kwargs, device_id=self._device_id)
        except ModbusIOException as exc:
            logger.debug("transport timeout: %s", exc)
            raise TimeoutError("modbus timeout") from exc
        except ModbusException as exc:
            logger.debug("transport error: %s", exc)
            raise TransportError(str(exc)) from exc
        if result is None:
            raise TimeoutError("modbus timeout")
        if result.isError():
            raise TransportError(str(result))
        return result

    def read_holding_registers(self, address: int, count: int) -> List[int]:
        rr = self._call(self._client.read_holding_registers, address, count=count)
        if len(rr.registers) < count:
            raise TransportError(f"short response: {len(rr.registers)} of {count} registers")
        return list(rr.registers)

    def write_register(self, address: int, value: int) -> None:
        self._call(self._client.write_register, address, int(value))

    def close(self) -> None:
        self._client.close()


class ModbusClientTransport(Transport):
    """Transport shelling out to the ``modbus_client`` command line tool."""

    def __init__(
        self,
        cfg: Config,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self._cfg = cfg
        self._run = run

    def _command(self, *args: str) -> List[str]:
        cfg = self._cfg
        return [
            cfg.modbus_client,
            "-m", "rtu",
            "-b", str(cfg.baudrate),
            "-p", cfg.parity,
            "-s", str(cfg.stopbits),
            cfg.port,
            "-a", str(cfg.slave_id),
            *args,
        ]

    def _exec(self, *args: str) -> str:
        cmd = self._command(*args)
        logger.debug("running %s", " ".join(cmd))
        try:
            result = self._run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._cfg.timeout + 5,
            )
        except FileNotFoundError as exc:
            raise TransportError(f"{self._cfg.modbus_client} not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise TimeoutError("modbus_client did not finish") from exc
        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise TransportError(detail or f"modbus_client exited with status {result.returncode}")
        return result.stdout or ""

    def read_holding_registers(self, address: int, count: int) -> List[int]:
        out = self._exec("-t", "0x03", "-r", str(address), "-c", str(count))
        payload: Optional[str] = None
        for line in out.splitlines():
            if "Data:" in line:
                payload = line.split("Data:", 1)[1]
                break
        if payload is None:
            raise TransportError(f"no data in response from register {address}")
        tokens = payload.split()
        if len(tokens) < count:
            raise TransportError(f"short response: {len(tokens)} of {count} registers")
        return [parse_register_value(token) for token in tokens[:count]]

    def write_register(self, address: int, value: int) -> None:
        out = self._exec("-t", "0x06", "-r", str(address), str(int(value)))
        if "SUCCESS" not in out:
            raise TransportError(out.strip() or f"write to register {address} not acknowledged")


class FakeTransport(Transport):
    """In-memory transport used for simulations."""

    def __init__(self, cfg: Config | None = None) -> None:
        cfg = cfg or Config()
        self._regs: dict[int, int] = {
            REG.ADDRESS: cfg.slave_id,
            REG.SPEED: cfg.baudrate // 100,
        }

    def read_holding_registers(self, address: int, count: int) -> List[int]:
        return [self._regs.get(address + i, 0) for i in range(count)]

    def write_register(self, address: int, value: int) -> None:
        logger.debug("fake write %s <- %s", address, value)
        self._regs[address] = int(value)

    def close(self) -> None:  # pragma: no cover - nothing to do
        pass
