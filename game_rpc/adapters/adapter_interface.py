"""
Adapter interfaces

Unified interfaces implemented by every transport adapter, so callers do not
depend on whether the game server is reached over TCP or a Unix socket.
"""

import abc
from typing import Dict, Any, Callable


class ClientAdapterInterface(abc.ABC):
    """Client adapter interface"""

    @property
    @abc.abstractmethod
    def endpoint(self) -> str:
        """Configured endpoint, ``host:port`` or socket path"""
        pass

    @abc.abstractmethod
    async def call(self, action: str, params: Dict[str, Any] = None) -> Any:
        """Send a request and wait for its response

        Args:
            action: Name of the action to invoke
            params: Action parameters

        Returns:
            The ``data`` value of a successful response

        Raises:
            RpcTimeoutError: Request timed out
            TransportError: Connection failed
            ProtocolError: Response invalid
            RemoteError: Server reported a failure
        """
        pass


class ServerAdapterInterface(abc.ABC):
    """Server adapter interface"""

    @property
    @abc.abstractmethod
    def endpoint(self) -> str:
        """Address the server listens on"""
        pass

    @abc.abstractmethod
    def register_action(self, name: str, handler: Callable):
        """Register an action handler

        Args:
            name: Action name
            handler: Callable receiving the params dict and returning the result data
        """
        pass

    @abc.abstractmethod
    async def start(self):
        """Start accepting connections"""
        pass

    @abc.abstractmethod
    async def stop(self):
        """Stop the server"""
        pass
