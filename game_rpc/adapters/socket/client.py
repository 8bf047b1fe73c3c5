"""
Socket client adapter

Invokes named game actions over TCP or a Unix domain socket. Every call opens
its own connection, sends one request frame, reads one response frame and
closes, bounded by the client's timeout.
"""

import asyncio
import logging
import time
from typing import Dict, Any, Optional

from game_rpc.adapters.adapter_interface import ClientAdapterInterface
from game_rpc.adapters.socket.call import Connector, PendingCall
from game_rpc.adapters.socket.connector import open_connection
from game_rpc.config import (
    ClientConfig,
    EndpointConfig,
    EndpointType,
    DEFAULT_MAX_FRAME_BYTES,
    DEFAULT_TIMEOUT_MS,
)
from game_rpc.errors import ProtocolError
from game_rpc.protocol.decoder import Outcome
from game_rpc.protocol.envelope import encode_request
from game_rpc.telemetry.metrics import increment_counter, record_latency
from game_rpc.telemetry.tracer import create_span

logger = logging.getLogger(__name__)

class SocketRpcClient(ClientAdapterInterface):
    """
    Game RPC client over a stream socket

    Calls are independent: each owns its connection, buffer and timer, so they
    may be awaited concurrently from one event loop.
    """

    def __init__(self,
                 endpoint: EndpointConfig,
                 timeout_ms: int = DEFAULT_TIMEOUT_MS,
                 max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
                 connector: Connector = open_connection):
        """Initialize the client

        Args:
            endpoint: Resolved TCP or Unix endpoint
            timeout_ms: Deadline for each call in milliseconds
            max_frame_bytes: Largest response accepted
            connector: Coroutine opening a Connection for an endpoint

        Raises:
            ConfigurationError: If the endpoint or timeout is invalid
        """
        self._config = ClientConfig(
            endpoint=endpoint,
            timeout_ms=timeout_ms,
            max_frame_bytes=max_frame_bytes,
        )
        self._connector = connector
        logger.info(f"Game RPC client created: {self._config.to_dict()}")

    @classmethod
    def tcp(cls, address: Optional[str] = None, **kwargs) -> "SocketRpcClient":
        """Client for ``host:port``, read from KSA_RPC_ENDPOINT when omitted"""
        if address is None:
            endpoint = EndpointConfig.from_env(EndpointType.TCP)
        else:
            endpoint = EndpointConfig.parse_tcp(address)
        return cls(endpoint, **kwargs)

    @classmethod
    def unix(cls, path: Optional[str] = None, **kwargs) -> "SocketRpcClient":
        """Client for a Unix socket path, read from KSA_RPC_SOCKET when omitted"""
        if path is None:
            endpoint = EndpointConfig.from_env(EndpointType.UNIX)
        else:
            endpoint = EndpointConfig.unix(path)
        return cls(endpoint, **kwargs)

    @classmethod
    def from_config(cls, config: ClientConfig, connector: Connector = open_connection) -> "SocketRpcClient":
        return cls(
            config.endpoint,
            timeout_ms=config.timeout_ms,
            max_frame_bytes=config.max_frame_bytes,
            connector=connector,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def endpoint(self) -> str:
        return self._config.endpoint.address

    @property
    def timeout_ms(self) -> int:
        return self._config.timeout_ms

    async def invoke(self, action: str, params: Dict[str, Any] = None) -> Outcome:
        """Run one call and return its outcome without raising for failures

        Raises:
            ProtocolError: If the request cannot be encoded (before any I/O)
        """
        request = encode_request(action, params)
        pending = PendingCall(self._config, action, request, self._connector)
        return await pending.run()

    async def call(self, action: str, params: Dict[str, Any] = None) -> Any:
        """Invoke an action and return the response data

        Args:
            action: Name of the action to invoke
            params: Action parameters

        Returns:
            The ``data`` value of the response, None when absent

        Raises:
            RpcTimeoutError: No response within timeout_ms
            TransportError: Connection, write or read failed
            ProtocolError: Request unencodable or response malformed
            RemoteError: Server answered with success=false
        """
        attributes = {"action": str(action), "transport": self._config.endpoint.type.value}
        start_time = time.monotonic()

        with create_span("rpc.client.call", {"rpc.action": str(action), "rpc.endpoint": self.endpoint}) as span:
            try:
                outcome = await self.invoke(action, params)
            except ProtocolError as e:
                logger.error(f"Cannot encode request for {action!r}: {e}")
                increment_counter("rpc.client.errors", 1, {**attributes, "type": "protocol_error"})
                raise

            latency_ms = (time.monotonic() - start_time) * 1000
            increment_counter("rpc.client.requests", 1, attributes)
            record_latency("rpc.client.latency", latency_ms, attributes)
            span.set_attribute("rpc.outcome", outcome.kind)

            if outcome.ok:
                increment_counter("rpc.client.success", 1, attributes)
                logger.debug(f"Call '{action}' succeeded, latency: {latency_ms:.2f}ms")
            else:
                increment_counter("rpc.client.errors", 1, {**attributes, "type": outcome.kind})
                self._log_failure(action, outcome, latency_ms)

            return outcome.unwrap(action)

    def call_sync(self, action: str, params: Dict[str, Any] = None) -> Any:
        """Blocking variant of call() for code without an event loop"""
        return asyncio.run(self.call(action, params))

    def _log_failure(self, action: str, outcome: Outcome, latency_ms: float):
        if outcome.kind == "remote_error":
            logger.warning(f"Call '{action}' failed on server: {outcome.error}")
        elif outcome.kind == "protocol_error":
            logger.error(f"Invalid response to '{action}': {outcome.message}")
        elif outcome.kind == "transport_error":
            logger.error(f"Transport error during '{action}' after {latency_ms:.2f}ms: {outcome.cause}")
        else:
            logger.error(f"Call '{action}' timed out after {latency_ms:.2f}ms")

    def __repr__(self) -> str:
        return f"SocketRpcClient({self._config.endpoint.type.value}:{self.endpoint}, timeout_ms={self.timeout_ms})"
