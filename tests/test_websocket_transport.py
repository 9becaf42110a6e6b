"""
End-to-end tests of the WebSocket transport against an in-process OCPP 1.6
Central System.
"""

import asyncio

import pytest
import websockets
from ocpp.exceptions import InternalError
from ocpp.routing import on
from ocpp.v16 import ChargePoint as ChargePointV16
from ocpp.v16 import call, call_result

from chargersim.config import build_config
from chargersim.simulator import ChargerSimulator
from chargersim.transaction import TransactionState
from chargersim.utils import utc_now_iso
from tests.conftest import wait_for


class CentralSystemCP(ChargePointV16):
    """Central System side of one charge point connection, recording requests."""

    def __init__(self, id, connection, received, failing):
        super().__init__(id, connection)
        self.received = received
        self.failing = failing

    @on("BootNotification")
    async def on_boot_notification(self, charge_point_vendor, charge_point_model, **kwargs):
        self.received.append(("BootNotification", {"charge_point_vendor": charge_point_vendor}))
        return call_result.BootNotification(current_time=utc_now_iso(), interval=300, status="Accepted")

    @on("Heartbeat")
    async def on_heartbeat(self):
        self.received.append(("Heartbeat", {}))
        return call_result.Heartbeat(current_time=utc_now_iso())

    @on("StatusNotification")
    async def on_status_notification(self, connector_id, error_code, status, **kwargs):
        self.received.append(("StatusNotification", {"connector_id": connector_id, "status": status}))
        return call_result.StatusNotification()

    @on("StartTransaction")
    async def on_start_transaction(self, connector_id, id_tag, meter_start, timestamp, **kwargs):
        self.received.append(("StartTransaction", {"connector_id": connector_id, "id_tag": id_tag}))
        if "StartTransaction" in self.failing:
            raise InternalError(description="StartTransaction unavailable")
        return call_result.StartTransaction(transaction_id=1001, id_tag_info={"status": "Accepted"})

    @on("StopTransaction")
    async def on_stop_transaction(self, meter_stop, timestamp, transaction_id, **kwargs):
        self.received.append(
            ("StopTransaction", {"meter_stop": meter_stop, "transaction_id": transaction_id})
        )
        if "StopTransaction" in self.failing:
            raise InternalError(description="StopTransaction unavailable")
        return call_result.StopTransaction(id_tag_info={"status": "Accepted"})

    @on("MeterValues")
    async def on_meter_values(self, connector_id, meter_value, **kwargs):
        self.received.append(("MeterValues", {"meter_value": meter_value, **kwargs}))
        return call_result.MeterValues()


class CentralSystem:
    def __init__(self):
        self.received = []
        self.connections = []
        self.paths = []
        # Actions answered with a CallError
        self.failing = set()

    def named(self, name):
        return [payload for action, payload in self.received if action == name]

    @property
    def charge_point(self):
        return self.connections[-1]

    async def on_connect(self, websocket, path=None):
        path = path or websocket.request.path
        self.paths.append(path)
        cp = CentralSystemCP(path.strip("/"), websocket, self.received, self.failing)
        self.connections.append(cp)
        try:
            await cp.start()
        except websockets.exceptions.ConnectionClosed:
            pass


@pytest.fixture
async def central_system():
    central = CentralSystem()
    async with websockets.serve(central.on_connect, "127.0.0.1", 0, subprotocols=["ocpp1.6"]) as server:
        central.port = server.sockets[0].getsockname()[1]
        yield central


def simulator_config(central_system, **overrides):
    settings = {
        "heartbeat_interval": 0,
        "start_delay": 0.05,
        "operator_start_delay": 0.01,
        "meter_values_interval": 0.05,
        "configuration_read_delay": 0,
        "reconnect_delay": 0.05,
        "keep_alive_timeout": None,
        **overrides,
    }
    return build_config(f"ws://127.0.0.1:{central_system.port}", "CP_WS", **settings)


@pytest.fixture
async def simulator(central_system):
    simulator = ChargerSimulator(simulator_config(central_system))
    await simulator.start()
    yield simulator
    await simulator.stop()


async def test_connects_with_identity_in_path(simulator, central_system):
    assert central_system.paths == ["/CP_WS"]

    response = await simulator.boot_notification()

    assert response.status == "Accepted"
    assert central_system.named("BootNotification") == [{"charge_point_vendor": "Mock"}]


async def test_remote_start_and_stop(simulator, central_system):
    response = await central_system.charge_point.call(
        call.RemoteStartTransaction(id_tag="TAG001", connector_id=1)
    )
    assert response.status == "Accepted"

    await wait_for(lambda: simulator.transactions.state is TransactionState.active)
    assert central_system.named("StartTransaction") == [{"connector_id": 1, "id_tag": "TAG001"}]
    await wait_for(lambda: len(central_system.named("MeterValues")) >= 2)
    assert central_system.named("MeterValues")[0]["transaction_id"] == 1001

    response = await central_system.charge_point.call(
        call.RemoteStartTransaction(id_tag="TAG002", connector_id=1)
    )
    assert response.status == "Rejected"

    response = await central_system.charge_point.call(call.RemoteStopTransaction(transaction_id=1001))
    assert response.status == "Accepted"

    await wait_for(lambda: len(central_system.named("StopTransaction")) == 1)
    stop = central_system.named("StopTransaction")[0]
    assert stop["transaction_id"] == 1001
    assert stop["meter_stop"] > 0
    await wait_for(lambda: len(central_system.named("StatusNotification")) == 1)
    assert central_system.named("StatusNotification")[0]["status"] == "Finishing"


async def test_get_configuration_and_local_list(simulator, central_system):
    response = await central_system.charge_point.call(
        call.SendLocalList(
            list_version=1,
            update_type="Full",
            local_authorization_list=[{"idTag": "X", "idTagInfo": {"status": "Accepted"}}],
        )
    )
    assert response.status == "Accepted"

    response = await central_system.charge_point.call(call.GetConfiguration())

    keys = {entry["key"]: entry for entry in response.configuration_key}
    assert len(keys) == 8
    assert "X" in keys["localAuthorizationList"]["value"]
    assert keys["NumberOfConnectors"]["readonly"] is True


async def test_trigger_message_and_stubs(simulator, central_system):
    response = await central_system.charge_point.call(call.TriggerMessage(requested_message="MeterValues"))
    assert response.status == "Accepted"
    await wait_for(lambda: len(central_system.named("MeterValues")) == 1)

    response = await central_system.charge_point.call(call.Reset(type="Hard"))
    assert response.status == "Accepted"
    response = await central_system.charge_point.call(call.UnlockConnector(connector_id=1))
    assert response.status == "Unlocked"


async def test_reconnects_after_disconnect(simulator, central_system):
    await simulator.disconnect()

    await wait_for(lambda: len(central_system.paths) == 2)
    response = await simulator.send_status("Available")

    assert response is not None
    assert central_system.named("StatusNotification") == [{"connector_id": 1, "status": "Available"}]


async def test_calls_wait_for_reconnection(simulator, central_system):
    await simulator.disconnect()
    await asyncio.sleep(0)

    response = await asyncio.wait_for(simulator.central_system.heartbeat(), timeout=2)

    assert response.current_time


async def test_start_answered_with_call_error_returns_to_idle(simulator, central_system):
    central_system.failing.add("StartTransaction")

    response = await central_system.charge_point.call(
        call.RemoteStartTransaction(id_tag="TAG001", connector_id=1)
    )
    assert response.status == "Accepted"
    await wait_for(lambda: len(central_system.named("StartTransaction")) == 1)
    await wait_for(lambda: simulator.transactions.state is TransactionState.idle)

    central_system.failing.clear()
    response = await central_system.charge_point.call(
        call.RemoteStartTransaction(id_tag="TAG001", connector_id=1)
    )
    assert response.status == "Accepted"
    await wait_for(lambda: simulator.transactions.state is TransactionState.active)
    assert simulator.transactions.transaction_id == 1001


async def test_stop_answered_with_call_error_returns_to_idle(simulator, central_system):
    central_system.failing.add("StopTransaction")
    assert await simulator.start_transaction("TAG001")
    await wait_for(lambda: simulator.transactions.state is TransactionState.active)

    assert await simulator.stop_transaction()

    await wait_for(lambda: simulator.transactions.state is TransactionState.idle)
    assert len(central_system.named("StopTransaction")) == 1
    assert simulator.transactions.transaction_id is None


async def test_keep_alive_pings_keep_connection_open(central_system):
    simulator = ChargerSimulator(simulator_config(central_system, keep_alive_timeout=0.2))
    await simulator.start()
    try:
        await asyncio.sleep(0.7)

        response = await simulator.boot_notification()

        assert response.status == "Accepted"
        assert central_system.paths == ["/CP_WS"]
    finally:
        await simulator.stop()
