"""
Configuration settings for the game RPC client
"""
import os
from typing import Dict, Any, Optional
from dataclasses import dataclass
from enum import Enum

from game_rpc.errors import ConfigurationError

# Environment variables consulted when no explicit endpoint is given
ENDPOINT_ENV = "KSA_RPC_ENDPOINT"
SOCKET_ENV = "KSA_RPC_SOCKET"
TIMEOUT_ENV = "KSA_RPC_TIMEOUT_MS"

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_MAX_FRAME_BYTES = 16 * 1024 * 1024


class EndpointType(Enum):
    """Supported transport bindings"""
    TCP = "tcp"
    UNIX = "unix"


@dataclass(frozen=True)
class EndpointConfig:
    """Where a client connects to: tcp{host, port} or unix{path}"""
    type: EndpointType
    host: Optional[str] = None
    port: Optional[int] = None
    path: Optional[str] = None

    @classmethod
    def parse_tcp(cls, address: str) -> "EndpointConfig":
        """Parse a ``host:port`` string

        Raises:
            ConfigurationError: If the address is empty or malformed
        """
        if not address or not address.strip():
            raise ConfigurationError("TCP endpoint must not be empty")

        address = address.strip()
        host, sep, port_text = address.rpartition(":")
        if not sep or not host:
            raise ConfigurationError(f"Invalid TCP endpoint '{address}', expected host:port")

        # IPv6 literals are written as [::1]:port
        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]

        try:
            port = int(port_text)
        except ValueError:
            raise ConfigurationError(f"Invalid port in TCP endpoint '{address}'")
        if not 0 < port < 65536:
            raise ConfigurationError(f"Port out of range in TCP endpoint '{address}'")

        return cls(type=EndpointType.TCP, host=host, port=port)

    @classmethod
    def unix(cls, path: str) -> "EndpointConfig":
        """Build a Unix domain socket endpoint"""
        if not path or not str(path).strip():
            raise ConfigurationError("Unix socket path must not be empty")
        return cls(type=EndpointType.UNIX, path=str(path))

    @classmethod
    def from_env(cls, endpoint_type: Optional[EndpointType] = None) -> "EndpointConfig":
        """Create endpoint from environment variables

        With no endpoint_type the Unix socket wins when both variables are set.
        """
        socket_path = os.getenv(SOCKET_ENV)
        address = os.getenv(ENDPOINT_ENV)

        if endpoint_type in (None, EndpointType.UNIX) and socket_path:
            return cls.unix(socket_path)
        if endpoint_type in (None, EndpointType.TCP) and address:
            return cls.parse_tcp(address)

        if endpoint_type == EndpointType.UNIX:
            raise ConfigurationError(f"No socket path given and {SOCKET_ENV} is not set")
        if endpoint_type == EndpointType.TCP:
            raise ConfigurationError(f"No endpoint given and {ENDPOINT_ENV} is not set")
        raise ConfigurationError(f"No endpoint given and neither {SOCKET_ENV} nor {ENDPOINT_ENV} is set")

    @property
    def address(self) -> str:
        """``host:port`` for TCP, the socket path for Unix"""
        if self.type == EndpointType.UNIX:
            return self.path
        if self.host and ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"

    def __str__(self) -> str:
        return self.address


@dataclass(frozen=True)
class ClientConfig:
    """Main configuration for a game RPC client"""
    endpoint: EndpointConfig
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES

    def __post_init__(self):
        if not isinstance(self.endpoint, EndpointConfig):
            raise ConfigurationError("endpoint must be an EndpointConfig")
        if isinstance(self.timeout_ms, bool) or not isinstance(self.timeout_ms, int) or self.timeout_ms <= 0:
            raise ConfigurationError(f"timeout_ms must be a positive integer, got {self.timeout_ms!r}")
        if self.max_frame_bytes <= 0:
            raise ConfigurationError(f"max_frame_bytes must be positive, got {self.max_frame_bytes!r}")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @classmethod
    def from_env(cls, endpoint_type: Optional[EndpointType] = None) -> "ClientConfig":
        """Create config from environment variables"""
        return cls(
            endpoint=EndpointConfig.from_env(endpoint_type),
            timeout_ms=timeout_from_env(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging"""
        return {
            "transport": self.endpoint.type.value,
            "endpoint": self.endpoint.address,
            "timeout_ms": self.timeout_ms,
            "max_frame_bytes": self.max_frame_bytes,
        }


def timeout_from_env() -> int:
    """Timeout in milliseconds from KSA_RPC_TIMEOUT_MS, default 5000"""
    timeout_text = os.getenv(TIMEOUT_ENV)
    if not timeout_text:
        return DEFAULT_TIMEOUT_MS
    try:
        return int(timeout_text)
    except ValueError:
        raise ConfigurationError(f"{TIMEOUT_ENV} must be an integer, got '{timeout_text}'")
