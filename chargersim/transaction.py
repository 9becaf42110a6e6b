"""
Transaction state machine and synthetic telemetry for the single simulated
connector.

    Idle --start--> PendingStart --StartTransaction.conf--> Active
    Active --stop--> PendingStop --StopTransaction.conf--> Idle

A start or stop requested outside its source state is rejected with
``False`` and never queued.
"""

import asyncio
import enum
import random

from loguru import logger

from chargersim.utils import TaskGroup, utc_now_iso

ENERGY_INCREMENTS_WH = (200, 300, 400, 500)
STATE_OF_CHARGE = "38"


class TransactionState(str, enum.Enum):
    idle = "Idle"
    pending_start = "PendingStart"
    active = "Active"
    pending_stop = "PendingStop"


class TransactionController:
    """Owns the transaction id, the energy register and the telemetry loop."""

    def __init__(self, config, central_system, rng: random.Random = None):
        self.config = config
        self.central_system = central_system
        self.rng = rng or random.Random()

        self.state = TransactionState.idle
        self.transaction_id = None
        self.connector_id = config.connector_id
        self.energy_wh = 0

        self._lock = asyncio.Lock()
        self._meter_task = None
        self._tasks = TaskGroup(f"{config.charger_identity}/transaction")

    @property
    def meter_active(self) -> bool:
        return self._meter_task is not None and not self._meter_task.done()

    async def start_transaction(self, connector_id: int, id_tag: str, use_configured_delay: bool) -> bool:
        """
        Schedule a StartTransaction.req.

        Args:
            connector_id: Connector the transaction runs on
            id_tag: Authorization token presented for the transaction
            use_configured_delay: True for server-triggered starts (configured
                start delay), False for operator starts (short fixed delay)

        Returns:
            bool: True if the start was accepted for scheduling
        """
        async with self._lock:
            if self.state is not TransactionState.idle:
                logger.info(f"StartTransaction rejected, transaction is {self.state.value}")
                return False
            self.state = TransactionState.pending_start
            self.connector_id = int(connector_id)

        delay = self.config.start_delay if use_configured_delay else self.config.operator_start_delay
        logger.info(
            f"StartTransaction scheduled in {delay}s: connector={connector_id}, idTag={id_tag}"
        )
        self._tasks.spawn(
            self._start_after(delay, self.connector_id, id_tag), "StartTransaction"
        )
        return True

    async def _start_after(self, delay, connector_id, id_tag):
        await asyncio.sleep(delay)
        try:
            response = await self.central_system.start_transaction(
                connector_id=connector_id, id_tag=id_tag, meter_start=0
            )
            if response is None:
                raise ValueError("no StartTransaction.conf received")
            transaction_id = int(response.transaction_id)
        except Exception as e:
            logger.error(f"StartTransaction failed: {e}")
            async with self._lock:
                self.state = TransactionState.idle
            return

        async with self._lock:
            self.transaction_id = transaction_id
            self.energy_wh = 0
            self.state = TransactionState.active
            self._meter_task = asyncio.create_task(self._meter_loop())

        logger.info(f"Transaction {self.transaction_id} started on connector {connector_id}")

    async def stop_transaction(self, params=None, use_configured_delay: bool = False) -> bool:
        """
        Cancel telemetry and schedule a StopTransaction.req.

        ``params`` is merged into the request; the active transaction id is
        used unless it supplies one. The final meter reading is the energy
        accumulated when telemetry was cancelled.
        """
        async with self._lock:
            if self.state is not TransactionState.active:
                logger.info(f"StopTransaction rejected, transaction is {self.state.value}")
                return False
            self.state = TransactionState.pending_stop
            self._meter_task.cancel()
            self._meter_task = None
            meter_stop = self.energy_wh
            request = {"transaction_id": self.transaction_id, **(params or {})}

        delay = self.config.stop_delay if use_configured_delay else 0
        logger.info(
            f"StopTransaction scheduled in {delay}s: transaction={request['transaction_id']}, meterStop={meter_stop}"
        )
        self._tasks.spawn(self._stop_after(delay, meter_stop, request), "StopTransaction")
        return True

    async def _stop_after(self, delay, meter_stop, request):
        await asyncio.sleep(delay)
        try:
            await self.central_system.stop_transaction(meter_stop=meter_stop, **request)
            logger.info(f"Transaction {request['transaction_id']} stopped at {meter_stop} Wh")
        except Exception as e:
            logger.error(f"StopTransaction failed: {e}")
        finally:
            async with self._lock:
                self._meter_task = None
                self.transaction_id = None
                self.state = TransactionState.idle

    async def _meter_loop(self):
        while True:
            await asyncio.sleep(self.config.meter_values_interval)
            self.energy_wh += self.rng.choice(ENERGY_INCREMENTS_WH)
            self.send_meter_values()

    def send_meter_values(self):
        """Emit one MeterValues.req with the current energy register, without waiting for it."""
        return self._tasks.spawn(
            self.central_system.meter_values(
                connector_id=self.connector_id,
                transaction_id=self.transaction_id,
                meter_value=[self.sample()],
            ),
            "MeterValues",
        )

    def sample(self):
        """Build one meter value: energy register, SoC, power and L1 current."""
        return {
            "timestamp": utc_now_iso(),
            "sampledValue": [
                {
                    "value": str(self.energy_wh),
                    "measurand": "Energy.Active.Import.Register",
                    "unit": "Wh",
                },
                {
                    "value": STATE_OF_CHARGE,
                    "measurand": "SoC",
                    "unit": "Percent",
                },
                {
                    "value": f"{(1 - self.rng.random()) * 150:.2f}",
                    "measurand": "Power.Active.Import",
                    "unit": "W",
                },
                {
                    "value": f"{1 - self.rng.random():.3f}",
                    "measurand": "Current.Import",
                    "unit": "A",
                    "phase": "L1",
                },
            ],
        }

    def cancel(self):
        """Drop telemetry and any pending start/stop without notifying the Central System."""
        if self._meter_task is not None:
            self._meter_task.cancel()
        self._tasks.cancel_all()
