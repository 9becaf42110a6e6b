"""
Transport bindings between the simulator and the Central System.
"""
from .proxy import CentralSystemProxy
from .soap import SoapTransport
from .websocket import WebSocketTransport


def select_transport(config):
    """A bind port selects OCPP-S (SOAP), otherwise OCPP-J (WebSocket) is used."""
    if config.uses_soap:
        return SoapTransport(config)
    return WebSocketTransport(config)


__all__ = ["CentralSystemProxy", "SoapTransport", "WebSocketTransport", "select_transport"]
