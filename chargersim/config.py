"""
Configuration settings for the charger simulator.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# Load environment variables from .env file if it exists
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Central System settings
CENTRAL_SYSTEM_URL = os.getenv("CENTRAL_SYSTEM_URL")
CHARGER_ID = os.getenv("CHARGER_ID", "test1")
CHARGE_POINT_PORT = os.getenv("CHARGE_POINT_PORT")
CHARGE_POINT_HOST = os.getenv("CHARGE_POINT_HOST", "localhost")

# Logging settings
LOG_DIR = Path(os.getenv("LOG_DIR", BASE_DIR / "logs"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Supported OCPP versions
SUPPORTED_PROTOCOLS = ["ocpp1.6"]

# Simulator timing (seconds)
HEARTBEAT_INTERVAL = int(os.getenv("HEARTBEAT_INTERVAL", 30))
START_DELAY = float(os.getenv("START_DELAY", 8))
STOP_DELAY = float(os.getenv("STOP_DELAY", 8))
OPERATOR_START_DELAY = float(os.getenv("OPERATOR_START_DELAY", 1))
KEEP_ALIVE_TIMEOUT = float(os.getenv("KEEP_ALIVE_TIMEOUT", 50))  # 0 disables pings
METER_VALUES_INTERVAL = float(os.getenv("METER_VALUES_INTERVAL", 20))
CONFIGURATION_READ_DELAY = float(os.getenv("CONFIGURATION_READ_DELAY", 2))
RECONNECT_DELAY = float(os.getenv("RECONNECT_DELAY", 5))

# Identity reported by the simulated hardware
CHARGE_POINT_VENDOR = os.getenv("CHARGE_POINT_VENDOR", "Test")
CHARGE_POINT_MODEL = os.getenv("CHARGE_POINT_MODEL", "1")


class SimulatorConfig(BaseModel):
    """
    Immutable settings for one simulated charger.

    Built once from the module defaults above merged with caller overrides.
    A non-zero ``charge_point_port`` selects the SOAP transport, otherwise the
    WebSocket transport is used.
    """

    model_config = ConfigDict(frozen=True)

    central_system_endpoint: str
    charger_identity: str
    charge_point_port: Optional[int] = None
    charge_point_host: str = CHARGE_POINT_HOST
    connector_id: int = 1

    heartbeat_interval: int = HEARTBEAT_INTERVAL
    charge_point_vendor: str = CHARGE_POINT_VENDOR
    charge_point_model: str = CHARGE_POINT_MODEL
    start_delay: float = START_DELAY
    stop_delay: float = STOP_DELAY
    operator_start_delay: float = OPERATOR_START_DELAY
    keep_alive_timeout: Optional[float] = KEEP_ALIVE_TIMEOUT or None
    meter_values_interval: float = METER_VALUES_INTERVAL
    configuration_read_delay: float = CONFIGURATION_READ_DELAY
    reconnect_delay: float = RECONNECT_DELAY

    @property
    def uses_soap(self) -> bool:
        return bool(self.charge_point_port)

    @property
    def callback_url(self) -> str:
        return f"http://{self.charge_point_host}:{self.charge_point_port}/"


def build_config(central_system_endpoint: str, charger_identity: str, **overrides):
    """
    Merge caller overrides into the default simulator settings.

    Overrides set to ``None`` fall back to the default, except for the
    bind port and keepalive which treat ``None`` as "disabled".
    """
    nullable = {"charge_point_port", "keep_alive_timeout"}
    values = {
        key: value
        for key, value in overrides.items()
        if value is not None or key in nullable
    }
    return SimulatorConfig(
        central_system_endpoint=central_system_endpoint,
        charger_identity=charger_identity,
        **values,
    )
