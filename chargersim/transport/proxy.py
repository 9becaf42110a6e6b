"""
Outbound call surface towards the Central System.

Every method builds an OCPP 1.6 request payload and hands it to the
transport's ``send`` coroutine, which returns the matching ``call_result``
payload.
"""

from ocpp.v16 import call

from chargersim.utils import utc_now_iso


class CentralSystemProxy:
    """Charge point -> Central System operations, independent of the transport."""

    def __init__(self, send):
        self._send = send

    async def boot_notification(self, charge_point_vendor, charge_point_model, **kwargs):
        return await self._send(
            call.BootNotification(
                charge_point_vendor=charge_point_vendor,
                charge_point_model=charge_point_model,
                **kwargs,
            )
        )

    async def heartbeat(self):
        return await self._send(call.Heartbeat())

    async def status_notification(self, connector_id: int, status: str, error_code="NoError", **kwargs):
        kwargs.setdefault("timestamp", utc_now_iso())
        return await self._send(
            call.StatusNotification(
                connector_id=int(connector_id),
                error_code=error_code,
                status=status,
                **kwargs,
            )
        )

    async def start_transaction(self, connector_id: int, id_tag: str, meter_start=0, **kwargs):
        kwargs.setdefault("timestamp", utc_now_iso())
        return await self._send(
            call.StartTransaction(
                connector_id=int(connector_id),
                id_tag=id_tag,
                meter_start=meter_start,
                **kwargs,
            )
        )

    async def stop_transaction(self, transaction_id, meter_stop, **kwargs):
        kwargs.setdefault("timestamp", utc_now_iso())
        return await self._send(
            call.StopTransaction(
                transaction_id=transaction_id,
                meter_stop=meter_stop,
                **kwargs,
            )
        )

    async def meter_values(self, connector_id: int, meter_value, transaction_id=None):
        return await self._send(
            call.MeterValues(
                connector_id=int(connector_id),
                meter_value=meter_value,
                transaction_id=transaction_id,
            )
        )

    async def authorize(self, id_tag: str):
        return await self._send(call.Authorize(id_tag=id_tag))

    async def data_transfer(self, vendor_id: str, **kwargs):
        return await self._send(call.DataTransfer(vendor_id=vendor_id, **kwargs))
