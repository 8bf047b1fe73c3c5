"""
Adapter factory

Creates client and server adapters for a transport name plus a configuration
dictionary, falling back to environment variables for the client address.
"""

from typing import Dict, Any

from game_rpc.adapters.adapter_interface import ClientAdapterInterface, ServerAdapterInterface
from game_rpc.adapters.socket.client import SocketRpcClient
from game_rpc.adapters.socket.server import SocketRpcServer
from game_rpc.config import DEFAULT_MAX_FRAME_BYTES, DEFAULT_TIMEOUT_MS
from game_rpc.errors import ConfigurationError

class AdapterType:
    """Adapter type constants"""
    TCP = "tcp"
    UNIX = "unix"

class AdapterFactory:
    """Adapter factory for creating transport adapters"""

    @staticmethod
    def create_client(adapter_type: str, config: Dict[str, Any] = None) -> ClientAdapterInterface:
        """Create client adapter

        Args:
            adapter_type: "tcp" or "unix"
            config: Optional keys "endpoint" (host:port), "socket_path",
                "timeout_ms" and "max_frame_bytes"

        Returns:
            ClientAdapterInterface: Client adapter instance

        Raises:
            ConfigurationError: Invalid adapter type or address
        """
        if config is None:
            config = {}

        options = {
            "timeout_ms": config.get("timeout_ms", DEFAULT_TIMEOUT_MS),
            "max_frame_bytes": config.get("max_frame_bytes", DEFAULT_MAX_FRAME_BYTES),
        }

        if adapter_type.lower() == AdapterType.TCP:
            return SocketRpcClient.tcp(config.get("endpoint"), **options)
        elif adapter_type.lower() == AdapterType.UNIX:
            return SocketRpcClient.unix(config.get("socket_path"), **options)
        else:
            raise ConfigurationError(f"Invalid adapter type: {adapter_type}")

    @staticmethod
    def create_server(adapter_type: str, config: Dict[str, Any] = None) -> ServerAdapterInterface:
        """Create server adapter

        Args:
            adapter_type: "tcp" or "unix"
            config: "host"/"port" for TCP (default 127.0.0.1:0), "socket_path" for Unix

        Returns:
            ServerAdapterInterface: Server adapter instance

        Raises:
            ConfigurationError: Invalid adapter type or missing socket path
        """
        if config is None:
            config = {}

        if adapter_type.lower() == AdapterType.TCP:
            return SocketRpcServer.tcp(
                host=config.get("host", "127.0.0.1"),
                port=config.get("port", 0)
            )
        elif adapter_type.lower() == AdapterType.UNIX:
            if not config.get("socket_path"):
                raise ConfigurationError("Unix server requires socket_path")
            return SocketRpcServer.unix(config["socket_path"])
        else:
            raise ConfigurationError(f"Invalid adapter type: {adapter_type}")
