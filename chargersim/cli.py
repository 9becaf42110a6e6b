"""
Command line entry point and operator console for the charger simulator.
"""

import argparse
import asyncio
import logging
import sys

from loguru import logger

from chargersim import config as settings
from chargersim.commands import Command, build_dispatch, execute, parse_command
from chargersim.config import build_config
from chargersim.simulator import ChargerSimulator

DESCRIPTION = "Start OCPP charging station simulator, connect simulator to Central System server."


class InterceptHandler(logging.Handler):
    """Forward stdlib log records (ocpp, websockets, uvicorn) to loguru."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(level=None):
    """Log to stderr and to a daily rotated file under LOG_DIR."""
    level = level or settings.LOG_LEVEL
    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error"):
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True
    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.add(
        settings.LOG_DIR / "charger_simulator.log",
        rotation="1 day",
        retention="7 days",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
    )


def build_parser():
    parser = argparse.ArgumentParser(prog="charger-simulator", description=DESCRIPTION)
    parser.add_argument(
        "cs_url_positional",
        nargs="?",
        metavar="URL",
        help="URL of the Central System server, ws://server.name/path (same as --cs-url)",
    )
    parser.add_argument(
        "-s",
        "--cs-url",
        default=settings.CENTRAL_SYSTEM_URL,
        help="URL of the Central System server to connect to, ws://server.name/path",
    )
    parser.add_argument(
        "-p",
        "--cp-port",
        type=int,
        default=int(settings.CHARGE_POINT_PORT) if settings.CHARGE_POINT_PORT else None,
        help="Port to bind the Charge Point SOAP service. If given, SOAP is used "
        "to talk to the Central System, otherwise WebSocket",
    )
    parser.add_argument(
        "-i",
        "--charger-id",
        default=settings.CHARGER_ID,
        help="OCPP ID of the simulated charger (default: %(default)s)",
    )
    parser.add_argument(
        "-c",
        "--connector-id",
        type=int,
        default=1,
        help="Connector to send status and transactions for (default: %(default)s)",
    )
    parser.add_argument(
        "-t",
        "--id-tag",
        default="12345678",
        help="ID tag used to start transactions (default: %(default)s)",
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: LOG_LEVEL or INFO)")
    return parser


def usage_text(connector_id, id_tag):
    return f"""Supported commands (key or name, then Enter):
    q:        quit

    --
    b:        send BootNotification
    o:        send BootNotification with optional parameters
    d:        send DataTransfer
    D:        disconnect from Central System

    Connector {connector_id} status
    ---
    A:        send Available status
    U:        send Unavailable status
    P:        send Preparing status
    C:        send Charging status
    F:        send Finishing status
    E:        send SuspendedEV status

    Transaction on connector {connector_id}, tag {id_tag}
    --
    u:        Authorize
    s:        StartTransaction
    t:        StopTransaction

    Debug
    --
    p:        Print current configuration
"""


class OperatorConsole:
    """Reads operator commands from stdin and runs them against the simulator."""

    def __init__(self, simulator, id_tag, stream=None):
        self.simulator = simulator
        self.id_tag = id_tag
        self.stream = stream or sys.stdin
        self.dispatch = build_dispatch(simulator, id_tag)
        self.running = False

    async def run(self):
        self.running = True
        while self.running:
            line = await self._get_input()
            if not line:
                # EOF
                break
            await self.handle(line)

    async def handle(self, line):
        if not line.strip():
            return
        command = parse_command(line)
        if command is None:
            print(f"❌ Unknown command: {line.strip()}")
            return
        if command is Command.QUIT:
            self.running = False
            return

        try:
            result = await execute(self.dispatch, command)
            if result is False:
                print(f"⚠️  {command.value} rejected")
        except Exception as e:
            logger.error(f"Command {command.value} failed: {e}")

    async def _get_input(self):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.stream.readline)


async def run_simulator(args):
    simulator_config = build_config(
        args.cs_url,
        args.charger_id,
        charge_point_port=args.cp_port,
        connector_id=args.connector_id,
    )
    simulator = ChargerSimulator(simulator_config)
    await simulator.start()

    logger.info(usage_text(args.connector_id, args.id_tag))
    try:
        await OperatorConsole(simulator, args.id_tag).run()
    finally:
        await simulator.stop()


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    args.cs_url = args.cs_url_positional or args.cs_url

    if not args.cs_url or not args.charger_id or not args.connector_id:
        parser.print_help()
        return 2

    configure_logging(args.log_level)
    logger.info(
        f"Starting charger simulator: csURL={args.cs_url}, connectorId={args.connector_id}, "
        f"chargerId={args.charger_id}, idTag={args.id_tag}"
    )

    try:
        asyncio.run(run_simulator(args))
    except KeyboardInterrupt:
        print("\n👋 Simulator stopped.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
