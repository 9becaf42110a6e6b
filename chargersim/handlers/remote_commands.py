"""
Handlers for Central System -> Charge Point requests.

Each handler takes the snake_case request payload and returns the snake_case
response payload as a dict, so the same handler serves the OCPP-J router and
the SOAP listener. Outbound calls triggered here are spawned, never awaited:
the OCPP-J receive loop is blocked until the handler returns.
"""

import json

from loguru import logger

from chargersim.utils import TaskGroup


class UnknownActionError(Exception):
    """Raised when an inbound action has no handler."""


class RemoteCommandHandler:
    """Inbound OCPP 1.6 call surface of the simulated charge point."""

    ACTIONS = {
        "RemoteStartTransaction": "remote_start_transaction",
        "RemoteStopTransaction": "remote_stop_transaction",
        "UnlockConnector": "unlock_connector",
        "GetConfiguration": "get_configuration",
        "ChangeConfiguration": "change_configuration",
        "ChangeAvailability": "change_availability",
        "ClearCache": "clear_cache",
        "ReserveNow": "reserve_now",
        "CancelReservation": "cancel_reservation",
        "Reset": "reset",
        "TriggerMessage": "trigger_message",
        "UpdateFirmware": "update_firmware",
        "SendLocalList": "send_local_list",
    }

    def __init__(self, transactions, configuration, central_system=None):
        self.transactions = transactions
        self.configuration = configuration
        self.central_system = central_system
        self._tasks = TaskGroup("remote-commands")

    async def dispatch(self, action: str, payload: dict) -> dict:
        """Route an inbound request by OCPP action name."""
        method_name = self.ACTIONS.get(action)
        if method_name is None:
            raise UnknownActionError(action)
        return await getattr(self, method_name)(**payload)

    async def remote_start_transaction(self, id_tag, connector_id=None, **kwargs):
        connector_id = int(connector_id or self.transactions.config.connector_id)
        logger.info(f"RemoteStartTransaction: idTag={id_tag}, connector={connector_id}")

        accepted = await self.transactions.start_transaction(
            connector_id, id_tag, use_configured_delay=True
        )
        return {"status": "Accepted" if accepted else "Rejected"}

    async def remote_stop_transaction(self, transaction_id, **kwargs):
        logger.info(f"RemoteStopTransaction: transaction={transaction_id}")

        await self.transactions.stop_transaction(
            {"transaction_id": transaction_id}, use_configured_delay=False
        )
        self._tasks.spawn(
            self.central_system.status_notification(
                connector_id=self.transactions.connector_id, status="Finishing"
            ),
            "StatusNotification",
        )
        return {"status": "Accepted"}

    async def unlock_connector(self, connector_id, **kwargs):
        logger.info(f"UnlockConnector: connector={connector_id}")
        return {"status": "Unlocked"}

    async def get_configuration(self, key=None, **kwargs):
        entries = await self.configuration.get()
        return {
            "configuration_key": [
                {
                    "key": entry["key"],
                    "readonly": entry["readonly"],
                    "value": _as_text(entry["value"]),
                }
                for entry in entries
            ]
        }

    async def change_configuration(self, key, value, **kwargs):
        return {"status": self.configuration.set(key, value)}

    async def change_availability(self, connector_id, type, **kwargs):
        logger.info(f"ChangeAvailability: connector={connector_id}, type={type}")
        return {"status": "Accepted"}

    async def clear_cache(self, **kwargs):
        return {"status": "Accepted"}

    async def reserve_now(self, connector_id, id_tag, reservation_id, **kwargs):
        logger.info(f"ReserveNow: reservation={reservation_id}, idTag={id_tag}")
        return {"status": "Accepted"}

    async def cancel_reservation(self, reservation_id, **kwargs):
        return {"status": "Accepted"}

    async def reset(self, type, **kwargs):
        logger.info(f"Reset ({type}) requested, ignoring")
        return {"status": "Accepted"}

    async def trigger_message(self, requested_message=None, **kwargs):
        logger.info(f"TriggerMessage: {requested_message}, sending MeterValues")
        self.transactions.send_meter_values()
        return {"status": "Accepted"}

    async def update_firmware(self, location, retrieve_date, **kwargs):
        logger.info(f"UpdateFirmware from {location}, ignoring")
        return {}

    async def send_local_list(self, list_version=None, local_authorization_list=None, **kwargs):
        self.configuration.set_local_authorization_list(local_authorization_list or [])
        return {"status": "Accepted"}


def _as_text(value):
    return value if isinstance(value, str) else json.dumps(value)
