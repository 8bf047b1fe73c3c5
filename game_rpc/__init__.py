"""
Game RPC client

Invokes named actions with JSON parameters against a running game server and
returns the JSON result or raises a typed error:

1. Wire format: one UTF-8 JSON object per direction, terminated by a line feed
2. Transports: TCP (host:port) and Unix domain socket (path)
3. One fresh connection per call, bounded by a per-client timeout

Calls are instrumented with OpenTelemetry spans and metrics.
"""

from game_rpc.adapters import AdapterFactory, AdapterType
from game_rpc.adapters.socket import SocketRpcClient, SocketRpcServer
from game_rpc.config import ClientConfig, EndpointConfig, EndpointType
from game_rpc.errors import (
    GameRpcError,
    ConfigurationError,
    TransportError,
    ProtocolError,
    RemoteError,
    RpcTimeoutError,
)

__version__ = "0.1.0"

__all__ = [
    "AdapterFactory",
    "AdapterType",
    "SocketRpcClient",
    "SocketRpcServer",
    "ClientConfig",
    "EndpointConfig",
    "EndpointType",
    "GameRpcError",
    "ConfigurationError",
    "TransportError",
    "ProtocolError",
    "RemoteError",
    "RpcTimeoutError",
]
