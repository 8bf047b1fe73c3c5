"""
Game RPC error taxonomy

Every failure surfaced by the client is an instance of GameRpcError, so callers can
catch the whole family at once or branch on the specific kind.
"""

from typing import Optional


class GameRpcError(Exception):
    """Base class for all game RPC errors"""

    # Process exit code used by the command line client
    exit_code = 1


class ConfigurationError(GameRpcError, ValueError):
    """Missing or invalid endpoint/timeout configuration, raised before any I/O"""

    exit_code = 2


class TransportError(GameRpcError, ConnectionError):
    """Connect, write or read failure at the socket layer"""

    exit_code = 3


class ProtocolError(GameRpcError, ValueError):
    """Malformed or structurally invalid frame, or an unencodable request"""

    exit_code = 4

    def __init__(self, message: str, frame: Optional[str] = None):
        super().__init__(message)
        self.frame = frame


class RemoteError(GameRpcError):
    """Well-formed response with success=false"""

    exit_code = 1

    def __init__(self, message: str, action: Optional[str] = None):
        super().__init__(message)
        self.action = action


class RpcTimeoutError(GameRpcError, TimeoutError):
    """No terminal outcome was reached within the configured duration"""

    exit_code = 5

    def __init__(self, timeout_ms: int, action: Optional[str] = None):
        super().__init__(f"RPC call timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms
        self.action = action
