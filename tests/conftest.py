"""
Shared fixtures for the simulator tests.
"""

import asyncio
import random
from types import SimpleNamespace

import pytest

from chargersim.config import build_config


class FakeCentralSystem:
    """Records outbound calls instead of sending them anywhere."""

    def __init__(self, transaction_id=42):
        self.transaction_id = transaction_id
        self.calls = []
        self.fail_start = False
        self.fail_stop = False
        self.start_unanswered = False

    def named(self, name):
        return [kwargs for call_name, kwargs in self.calls if call_name == name]

    async def boot_notification(self, **kwargs):
        self.calls.append(("BootNotification", kwargs))
        return SimpleNamespace(status="Accepted", interval=300)

    async def heartbeat(self):
        self.calls.append(("Heartbeat", {}))
        return SimpleNamespace(current_time="2024-01-01T00:00:00Z")

    async def status_notification(self, **kwargs):
        self.calls.append(("StatusNotification", kwargs))
        return SimpleNamespace()

    async def start_transaction(self, **kwargs):
        self.calls.append(("StartTransaction", kwargs))
        if self.fail_start:
            raise ConnectionError("Central System unavailable")
        if self.start_unanswered:
            return None
        return SimpleNamespace(transaction_id=self.transaction_id, id_tag_info={"status": "Accepted"})

    async def stop_transaction(self, **kwargs):
        self.calls.append(("StopTransaction", kwargs))
        if self.fail_stop:
            raise ConnectionError("Central System unavailable")
        return SimpleNamespace(id_tag_info={"status": "Accepted"})

    async def meter_values(self, **kwargs):
        self.calls.append(("MeterValues", kwargs))
        return SimpleNamespace()

    async def authorize(self, **kwargs):
        self.calls.append(("Authorize", kwargs))
        return SimpleNamespace(id_tag_info={"status": "Accepted"})

    async def data_transfer(self, **kwargs):
        self.calls.append(("DataTransfer", kwargs))
        return SimpleNamespace(status="Accepted")


class FakeTransport:
    """Transport double exposing a FakeCentralSystem as its proxy."""

    name = "fake"

    def __init__(self):
        self.proxy = FakeCentralSystem()
        self.handler = None
        self.connected = False
        self.disconnects = 0
        self.closed = False

    def register_handler(self, handler):
        self.handler = handler

    async def connect(self):
        self.connected = True
        return self.proxy

    async def disconnect(self):
        self.disconnects += 1

    async def close(self):
        self.closed = True


async def wait_for(predicate, timeout=2.0, interval=0.01):
    """Poll ``predicate`` until it is truthy or fail after ``timeout`` seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met in time")
        await asyncio.sleep(interval)


@pytest.fixture
def fast_config():
    return build_config(
        "ws://localhost:9000",
        "CP_TEST",
        heartbeat_interval=0,
        start_delay=0.05,
        stop_delay=0.05,
        operator_start_delay=0.01,
        meter_values_interval=0.05,
        configuration_read_delay=0,
        reconnect_delay=0.05,
        keep_alive_timeout=None,
    )


@pytest.fixture
def central_system():
    return FakeCentralSystem()


@pytest.fixture
def rng():
    return random.Random(1234)
