"""
Handlers for requests initiated by the Central System.
"""
from .remote_commands import RemoteCommandHandler, UnknownActionError

__all__ = ["RemoteCommandHandler", "UnknownActionError"]
