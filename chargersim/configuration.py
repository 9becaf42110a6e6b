"""
Configuration key store of the simulated charge point.

Backs GetConfiguration, ChangeConfiguration and SendLocalList. The key set is
fixed at construction; only values change afterwards.
"""

import asyncio
import copy
import json

from loguru import logger

LOCAL_AUTHORIZATION_LIST = "localAuthorizationList"


class ConfigurationStore:
    """Ordered list of OCPP configuration keys."""

    def __init__(self, heartbeat_interval, meter_values_interval, read_delay: float = 0):
        self.read_delay = read_delay
        self._entries = [
            {"key": LOCAL_AUTHORIZATION_LIST, "readonly": False, "value": []},
            {"key": "HeartBeatInterval", "readonly": False, "value": str(heartbeat_interval)},
            {"key": "ResetRetries", "readonly": False, "value": "1"},
            {"key": "MeterValueSampleInterval", "readonly": False, "value": f"{meter_values_interval:g}"},
            {"key": "NumberOfConnectors", "readonly": True, "value": "2"},
            {"key": "ChargePointVendor", "readonly": True, "value": "Mock"},
            {"key": "ChargePointModel", "readonly": True, "value": "Simulator"},
            {"key": "ChargeBoxSerialNumber", "readonly": True, "value": "SN0000000000000001"},
        ]

    async def get(self):
        """Return a snapshot of all entries after the simulated hardware read delay."""
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        return self.snapshot()

    def snapshot(self):
        return copy.deepcopy(self._entries)

    def set(self, key: str, value) -> str:
        """
        Change the value of a single configuration key.

        Returns:
            str: "Accepted", "Rejected" for a readonly key, or "NotSupported"
            for a key the charge point does not know.
        """
        entry = self._find(key)
        if entry is None:
            logger.info(f"ChangeConfiguration for unknown key {key}")
            return "NotSupported"
        if entry["readonly"]:
            logger.info(f"ChangeConfiguration rejected, {key} is readonly")
            return "Rejected"

        entry["value"] = str(value)
        logger.info(f"Configuration {key} set to {entry['value']}")
        return "Accepted"

    def set_local_authorization_list(self, local_authorization_list):
        entry = self._find(LOCAL_AUTHORIZATION_LIST)
        entry["value"] = local_authorization_list
        logger.info(
            f"Local authorization list replaced ({len(local_authorization_list or [])} entries)"
        )

    def dump(self) -> str:
        return json.dumps(self._entries)

    def _find(self, key):
        for entry in self._entries:
            if entry["key"] == key:
                return entry
        return None
