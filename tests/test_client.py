from __future__ import annotations

import pytest

from wbspeed import registers as REG
from wbspeed.client import RegisterClient, make_transport
from wbspeed.config import Config
from wbspeed.errors import TimeoutError, UnsupportedBaudRate, WbSpeedError
from wbspeed.transport import FakeTransport as SimTransport
from wbspeed.transport import ModbusClientTransport, Transport


class FakeTransport(Transport):
    def __init__(self) -> None:
        self.regs: dict[int, int] = {}
        self.last_address: int | None = None
        self.writes: list[tuple[int, int]] = []

    def read_holding_registers(self, address: int, count: int) -> list[int]:
        self.last_address = address
        return [self.regs.get(address + i, 0) for i in range(count)]

    def write_register(self, address: int, value: int) -> None:
        self.last_address = address
        self.writes.append((address, value))
        self.regs[address] = value

    def close(self) -> None:
        pass


def test_register_address_is_sent_unchanged() -> None:
    ft = FakeTransport()
    client = RegisterClient(Config(), transport=ft)
    ft.regs[REG.ADDRESS] = 139
    assert client.read_address() == 139
    assert ft.last_address == 128


def test_read_speed_decodes_register() -> None:
    ft = FakeTransport()
    ft.regs[REG.SPEED] = 1152
    client = RegisterClient(Config(), transport=ft)
    assert client.read_speed() == 115200


def test_read_speed_outside_table_still_decodes() -> None:
    ft = FakeTransport()
    ft.regs[REG.SPEED] = 3
    client = RegisterClient(Config(), transport=ft)
    assert client.read_speed() == 300


def test_set_speed_writes_code() -> None:
    ft = FakeTransport()
    client = RegisterClient(Config(), transport=ft)
    assert client.set_speed(19200) == 192
    assert ft.writes == [(110, 192)]


def test_set_unsupported_speed_writes_nothing() -> None:
    ft = FakeTransport()
    client = RegisterClient(Config(), transport=ft)
    with pytest.raises(UnsupportedBaudRate):
        client.set_speed(12345)
    assert ft.writes == []


def test_reboot_writes_one() -> None:
    ft = FakeTransport()
    client = RegisterClient(Config(), transport=ft)
    client.reboot()
    assert ft.writes == [(120, 1)]


class TimeoutTransport(Transport):
    def read_holding_registers(self, address: int, count: int) -> list[int]:
        raise TimeoutError("boom")

    def write_register(self, address: int, value: int) -> None:
        raise TimeoutError("boom")

    def close(self) -> None:
        pass


def test_timeout_path() -> None:
    client = RegisterClient(Config(), transport=TimeoutTransport())
    with pytest.raises(TimeoutError):
        client.read_speed()


def test_not_connected() -> None:
    client = RegisterClient(Config())
    with pytest.raises(WbSpeedError):
        client.read_address()


def test_connect_uses_fake_transport(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WBSPEED_FAKE", "1")
    client = RegisterClient(Config(slave_id=12, baudrate=57600))
    client.connect()
    assert isinstance(client.transport, SimTransport)
    assert client.read_address() == 12
    assert client.read_speed() == 57600


def test_make_transport_modbus_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WBSPEED_FAKE", raising=False)
    transport = make_transport(Config(transport="modbus_client"))
    assert isinstance(transport, ModbusClientTransport)
