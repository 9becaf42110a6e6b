"""
Charge point simulator: one charger, one connector.
"""

from loguru import logger

from chargersim.configuration import ConfigurationStore
from chargersim.handlers import RemoteCommandHandler
from chargersim.heartbeat import HeartbeatScheduler
from chargersim.transaction import TransactionController
from chargersim.transport import select_transport


class ChargerSimulator:
    """
    Simulated OCPP 1.6 charge point.

    The transport is chosen from the configuration at construction and is
    fixed for the lifetime of the instance. Operator operations call out to
    the Central System through ``central_system``; inbound requests are
    answered by ``handler``.
    """

    def __init__(self, config, transport=None, rng=None):
        self.config = config
        self.transport = transport or select_transport(config)
        self.central_system = self.transport.proxy

        self.configuration = ConfigurationStore(
            heartbeat_interval=config.heartbeat_interval,
            meter_values_interval=config.meter_values_interval,
            read_delay=config.configuration_read_delay,
        )
        self.transactions = TransactionController(config, self.central_system, rng=rng)
        self.handler = RemoteCommandHandler(
            self.transactions, self.configuration, self.central_system
        )
        self.heartbeat = HeartbeatScheduler(self.central_system, config.heartbeat_interval)

    async def start(self):
        """Connect to the Central System and start heartbeats."""
        logger.info(
            f"Starting charger {self.config.charger_identity} using {self.transport.name} transport"
        )
        self.transport.register_handler(self.handler)
        await self.transport.connect()
        self.heartbeat.start()

    async def stop(self):
        """Stop timers and release the transport without draining anything."""
        self.heartbeat.stop()
        self.transactions.cancel()
        await self.transport.close()

    async def disconnect(self):
        await self.transport.disconnect()

    # Operator operations

    async def boot_notification(self, with_optional_fields: bool = False):
        if with_optional_fields:
            response = await self.central_system.boot_notification(
                charge_point_vendor="OC",
                charge_point_model="OCX",
                charge_point_serial_number="1234-5678",
                meter_serial_number="1234-5678-AA-BB",
                firmware_version="AA-001",
                iccid="OMEGA-PEPEGA",
                imsi="ENERGY-001",
            )
        else:
            response = await self.central_system.boot_notification(
                charge_point_vendor="Mock", charge_point_model="Simulator"
            )
        logger.info(f"BootNotification response: {response}")
        return response

    async def data_transfer(self):
        response = await self.central_system.data_transfer(
            vendor_id="Emulator", message_id="MessageID", data="Data"
        )
        logger.info(f"DataTransfer response: {response}")
        return response

    async def send_status(self, status: str, connector_id: int = None):
        connector_id = self.config.connector_id if connector_id is None else connector_id
        response = await self.central_system.status_notification(
            connector_id=connector_id, status=status
        )
        logger.info(f"StatusNotification {status} response: {response}")
        return response

    async def authorize(self, id_tag: str):
        response = await self.central_system.authorize(id_tag=id_tag)
        logger.info(f"Authorize {id_tag} response: {response}")
        return response

    async def start_transaction(self, id_tag: str, connector_id: int = None) -> bool:
        connector_id = self.config.connector_id if connector_id is None else connector_id
        return await self.transactions.start_transaction(
            connector_id, id_tag, use_configured_delay=False
        )

    async def stop_transaction(self, params=None) -> bool:
        return await self.transactions.stop_transaction(params, use_configured_delay=False)

    def print_configuration(self):
        print(self.configuration.dump())
        return True
