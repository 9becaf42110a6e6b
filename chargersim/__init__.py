"""
OCPP 1.6 charge point simulator for exercising Central System servers.
"""
from .config import SimulatorConfig, build_config
from .simulator import ChargerSimulator

__all__ = ["ChargerSimulator", "SimulatorConfig", "build_config"]
