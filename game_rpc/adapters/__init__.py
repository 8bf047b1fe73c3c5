"""
Communication Adapters Module

Adapter implementations providing a unified interface over the game RPC transports:
- socket: TCP (host:port) and Unix domain socket bindings

All adapters share the newline-delimited JSON wire protocol in game_rpc.protocol.
"""

from .adapter_factory import AdapterFactory, AdapterType
from .adapter_interface import ClientAdapterInterface, ServerAdapterInterface

__all__ = [
    "AdapterFactory",
    "AdapterType",
    "ClientAdapterInterface",
    "ServerAdapterInterface"
]
