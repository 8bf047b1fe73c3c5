"""
Socket Adapter Package

Game RPC over stream sockets, TCP (host:port) or Unix domain socket (path).
Both bindings share one framing and deadline implementation.
"""

from game_rpc.adapters.socket.client import SocketRpcClient
from game_rpc.adapters.socket.server import SocketRpcServer

__all__ = ["SocketRpcClient", "SocketRpcServer"]
