"""
Persistent OCPP-J transport: one WebSocket to ``<endpoint>/<identity>``.

The connection is re-established automatically after a drop and kept alive
with pings. Connection events are logged only; the simulator never reacts to
them.
"""

import asyncio

import websockets
from loguru import logger

from chargersim.config import SUPPORTED_PROTOCOLS
from chargersim.handlers.charge_point import ChargePoint
from chargersim.transport.proxy import CentralSystemProxy


class WebSocketTransport:
    """OCPP 1.6 JSON over a reconnecting WebSocket."""

    name = "websocket"

    def __init__(self, config):
        self.config = config
        self.url = f"{config.central_system_endpoint.rstrip('/')}/{config.charger_identity}"
        self.handler = None
        self.charge_point = None
        self.websocket = None

        self.proxy = CentralSystemProxy(self.send)

        self._connected = asyncio.Event()
        self._task = None
        self._closing = False

    def register_handler(self, handler):
        self.handler = handler

    async def connect(self):
        """Start the connection loop and wait for the first connection."""
        self._task = asyncio.create_task(self._run())
        await self._connected.wait()
        logger.info(f"Connected to Central System at {self.config.central_system_endpoint} using WebSocket")
        return self.proxy

    async def send(self, payload):
        """Send one call; a CallError answer is raised as an OCPPError."""
        await self._connected.wait()
        return await self.charge_point.call(payload, suppress=False)

    async def _run(self):
        keep_alive = self.config.keep_alive_timeout
        while not self._closing:
            try:
                async with websockets.connect(
                    self.url,
                    subprotocols=SUPPORTED_PROTOCOLS,
                    ping_interval=keep_alive,
                    ping_timeout=keep_alive,
                ) as websocket:
                    await self._serve(websocket)
            except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as e:
                logger.debug(f"OCPP connection to {self.url} failed: {e}")

            if not self._closing:
                logger.info(f"Reconnecting to {self.url} in {self.config.reconnect_delay} seconds...")
                await asyncio.sleep(self.config.reconnect_delay)

    async def _serve(self, websocket):
        self.websocket = websocket
        self.charge_point = ChargePoint(self.config.charger_identity, websocket, self.handler)
        self._connected.set()
        logger.debug(f"OCPP connected to {self.url}")
        try:
            await self.charge_point.start()
        except websockets.exceptions.ConnectionClosed as e:
            logger.debug(f"OCPP disconnected: {e}")
        finally:
            self._connected.clear()
            self.websocket = None

    async def disconnect(self):
        """Close the current connection; the reconnect loop opens a new one."""
        if self.websocket is None:
            logger.info("Not connected to Central System")
            return
        logger.info("Disconnecting from Central System")
        self._connected.clear()
        await self.websocket.close()

    async def close(self):
        self._closing = True
        if self.websocket is not None:
            await self.websocket.close()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
