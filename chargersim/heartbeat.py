"""
Periodic Heartbeat.req sender.
"""

import asyncio

from loguru import logger


class HeartbeatScheduler:
    """Sends one Heartbeat per interval for the lifetime of the simulator."""

    def __init__(self, central_system, interval):
        self.central_system = central_system
        self.interval = interval
        self._task = None

    def start(self):
        if not self.interval:
            logger.info("Heartbeat disabled (interval is 0)")
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"Heartbeat every {self.interval} seconds")

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            try:
                response = await self.central_system.heartbeat()
                logger.debug(f"Heartbeat response: {response}")
            except Exception as e:
                logger.warning(f"Heartbeat failed: {e}")

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None
