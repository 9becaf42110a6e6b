from loguru import logger
from ocpp.routing import on
from ocpp.v16 import ChargePoint as ChargePointV16
from ocpp.v16 import call_result


class ChargePoint(ChargePointV16):
    """
    OCPP 1.6 JSON charge point bound to one WebSocket connection.

    Inbound requests are forwarded to the RemoteCommandHandler; this class
    only turns its dict results into ``call_result`` payloads.
    """

    def __init__(self, id, connection, handler, response_timeout=30):
        super().__init__(id, connection, response_timeout=response_timeout)
        self.handler = handler

    async def route_message(self, raw_msg):
        logger.debug(f"OCPP in [{self.id}]: {raw_msg}")
        await super().route_message(raw_msg)

    async def _send(self, message):
        logger.debug(f"OCPP out [{self.id}]: {message}")
        await super()._send(message)

    @on("RemoteStartTransaction")
    async def on_remote_start_transaction(self, **kwargs):
        result = await self.handler.remote_start_transaction(**kwargs)
        return call_result.RemoteStartTransaction(**result)

    @on("RemoteStopTransaction")
    async def on_remote_stop_transaction(self, **kwargs):
        result = await self.handler.remote_stop_transaction(**kwargs)
        return call_result.RemoteStopTransaction(**result)

    @on("UnlockConnector")
    async def on_unlock_connector(self, **kwargs):
        result = await self.handler.unlock_connector(**kwargs)
        return call_result.UnlockConnector(**result)

    @on("GetConfiguration")
    async def on_get_configuration(self, **kwargs):
        result = await self.handler.get_configuration(**kwargs)
        return call_result.GetConfiguration(**result)

    @on("ChangeConfiguration")
    async def on_change_configuration(self, **kwargs):
        result = await self.handler.change_configuration(**kwargs)
        return call_result.ChangeConfiguration(**result)

    @on("ChangeAvailability")
    async def on_change_availability(self, **kwargs):
        result = await self.handler.change_availability(**kwargs)
        return call_result.ChangeAvailability(**result)

    @on("ClearCache")
    async def on_clear_cache(self, **kwargs):
        result = await self.handler.clear_cache(**kwargs)
        return call_result.ClearCache(**result)

    @on("ReserveNow")
    async def on_reserve_now(self, **kwargs):
        result = await self.handler.reserve_now(**kwargs)
        return call_result.ReserveNow(**result)

    @on("CancelReservation")
    async def on_cancel_reservation(self, **kwargs):
        result = await self.handler.cancel_reservation(**kwargs)
        return call_result.CancelReservation(**result)

    @on("Reset")
    async def on_reset(self, **kwargs):
        result = await self.handler.reset(**kwargs)
        return call_result.Reset(**result)

    @on("TriggerMessage")
    async def on_trigger_message(self, **kwargs):
        result = await self.handler.trigger_message(**kwargs)
        return call_result.TriggerMessage(**result)

    @on("UpdateFirmware")
    async def on_update_firmware(self, **kwargs):
        result = await self.handler.update_firmware(**kwargs)
        return call_result.UpdateFirmware(**result)

    @on("SendLocalList")
    async def on_send_local_list(self, **kwargs):
        result = await self.handler.send_local_list(**kwargs)
        return call_result.SendLocalList(**result)
