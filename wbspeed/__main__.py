"""Command line interface for the wbspeed package."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from typing import List

from . import __version__
from .bridge import NullBridge, SocatBridge
from .config import PARITIES, TRANSPORTS, Config
from .errors import ConfigError
from .models import ExitCode
from .service import NullService, SystemdService
from .session import SpeedSession

logger = logging.getLogger(__name__)


class _Parser(argparse.ArgumentParser):
    """Reports usage errors with their own exit status, apart from a rejected speed."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(int(ExitCode.USAGE), f"{self.prog}: error: {message}\n")


def build_parser(env_cfg: Config) -> argparse.ArgumentParser:
    parser = _Parser(
        prog="wb-mio-speed",
        description="Change the serial speed of a WB-MIO device behind a TCP bridge",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--host", default=env_cfg.host, help="bridge TCP host [env WBSPEED_HOST]")
    parser.add_argument(
        "--tcp-port",
        type=int,
        default=env_cfg.tcp_port,
        help="bridge TCP port [env WBSPEED_TCP_PORT]",
    )
    parser.add_argument(
        "--port",
        default=env_cfg.port,
        help="virtual serial port to create [env WBSPEED_PORT]",
    )
    parser.add_argument(
        "--baud",
        type=int,
        default=env_cfg.baudrate,
        help="current device baud rate [env WBSPEED_BAUD]",
    )
    parser.add_argument(
        "--parity",
        choices=PARITIES,
        default=env_cfg.parity,
        help="current device parity [env WBSPEED_PARITY]",
    )
    parser.add_argument(
        "--stopbits",
        type=int,
        choices=(1, 2),
        default=env_cfg.stopbits,
        help="current device stop bits [env WBSPEED_STOPBITS]",
    )
    parser.add_argument(
        "--slave",
        type=int,
        default=env_cfg.slave_id,
        help="modbus device address [env WBSPEED_SLAVE_ID]",
    )
    parser.add_argument(
        "--service",
        default=env_cfg.service,
        help="service holding the serial port [env WBSPEED_SERVICE]",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        default=env_cfg.transport,
        help="modbus implementation [env WBSPEED_TRANSPORT]",
    )
    parser.add_argument(
        "--grace",
        type=float,
        default=env_cfg.bridge_grace,
        help="seconds to wait for socat before checking it [env WBSPEED_BRIDGE_GRACE]",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=env_cfg.timeout,
        help="modbus response timeout in seconds [env WBSPEED_TIMEOUT]",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug output")
    return parser


def parse_config(argv: List[str] | None = None) -> Config:
    """Build the session configuration from the environment and ``argv``."""
    try:
        env_cfg = Config.from_env()
    except ConfigError as exc:
        print(f"wb-mio-speed: invalid environment: {exc}", file=sys.stderr)
        raise SystemExit(int(ExitCode.USAGE)) from exc
    parser = build_parser(env_cfg)
    args = parser.parse_args(argv)
    try:
        return dataclasses.replace(
            env_cfg,
            host=args.host,
            tcp_port=args.tcp_port,
            port=args.port,
            baudrate=args.baud,
            parity=args.parity,
            stopbits=args.stopbits,
            slave_id=args.slave,
            service=args.service,
            transport=args.transport,
            bridge_grace=args.grace,
            timeout=args.timeout,
            verbose=args.verbose,
        )
    except ConfigError as exc:
        parser.error(str(exc))
        raise  # pragma: no cover - parser.error exits


def main(argv: List[str] | None = None) -> int:
    """Run one interactive speed change session."""
    cfg = parse_config(argv)
    logging.basicConfig(
        level=logging.DEBUG if cfg.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    if os.getenv("WBSPEED_FAKE"):
        service, bridge = NullService(cfg.service), NullBridge(cfg)
    else:
        service, bridge = SystemdService(cfg.service), SocatBridge(cfg)

    session = SpeedSession(cfg, service=service, bridge=bridge)
    try:
        code = session.run()
    except KeyboardInterrupt:
        logger.error("Interrupted.")
        return int(ExitCode.INTERRUPTED)
    if code == ExitCode.OK:
        logger.info("Script execution completed.")
    return int(code)


if __name__ == "__main__":
    sys.exit(main())
