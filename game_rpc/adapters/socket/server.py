"""
Socket server adapter

asyncio server speaking the game RPC wire protocol: each connection carries one
request line and receives one response line before being closed. Used to stand
in for the game during development and tests.
"""

import asyncio
import inspect
import json
import logging
import os
import stat
import time
from typing import Dict, Any, Callable, Optional, Set

from game_rpc.adapters.adapter_interface import ServerAdapterInterface
from game_rpc.config import EndpointConfig, EndpointType
from game_rpc.errors import ConfigurationError
from game_rpc.protocol.framing import normalize_frame
from game_rpc.telemetry.metrics import increment_counter, record_latency

logger = logging.getLogger(__name__)

# Largest request line accepted
MAX_REQUEST_BYTES = 1024 * 1024


def ok(data: Any = None) -> Dict[str, Any]:
    response = {"success": True}
    if data is not None:
        response["data"] = data
    return response


def fail(message: str) -> Dict[str, Any]:
    return {"success": False, "error": message}


def encode_response(response: Dict[str, Any]) -> bytes:
    return (json.dumps(response, separators=(",", ":"), ensure_ascii=False) + "\n").encode("utf-8")


class SocketRpcServer(ServerAdapterInterface):
    """
    Game RPC server adapter over TCP or a Unix domain socket
    """

    def __init__(self, endpoint: EndpointConfig):
        """Initialize the server

        Args:
            endpoint: Address to bind; TCP port 0 picks an ephemeral port
        """
        self._endpoint = endpoint
        self._bound_endpoint = endpoint
        self.actions: Dict[str, Callable] = {}
        self._server: Optional[asyncio.AbstractServer] = None
        # Connection handlers still running
        self._client_tasks: Set[asyncio.Task] = set()

    @classmethod
    def tcp(cls, host: str = "127.0.0.1", port: int = 0) -> "SocketRpcServer":
        return cls(EndpointConfig(type=EndpointType.TCP, host=host, port=port))

    @classmethod
    def unix(cls, path: str) -> "SocketRpcServer":
        return cls(EndpointConfig.unix(path))

    @property
    def endpoint(self) -> str:
        return self._bound_endpoint.address

    @property
    def endpoint_config(self) -> EndpointConfig:
        return self._bound_endpoint

    @property
    def is_running(self) -> bool:
        return self._server is not None and self._server.is_serving()

    def register_action(self, name: str, handler: Callable):
        """Register an action handler, replacing any earlier one with the same name

        Args:
            name: Action name
            handler: Sync or async callable receiving the params dict
        """
        if name in self.actions:
            logger.debug(f"Replacing handler for action: {name}")
        self.actions[name] = handler
        logger.debug(f"Registered action: {name}")

    async def start(self):
        """Bind and start accepting connections

        Raises:
            RuntimeError: If the server is already running
            ConfigurationError: If a non-socket file exists at the Unix socket path
        """
        if self.is_running:
            raise RuntimeError("Server is already running")

        if self._endpoint.type == EndpointType.UNIX:
            self._remove_socket_file()
            self._server = await asyncio.start_unix_server(
                self._handle_client, path=self._endpoint.path, limit=MAX_REQUEST_BYTES
            )
        else:
            self._server = await asyncio.start_server(
                self._handle_client, self._endpoint.host, self._endpoint.port, limit=MAX_REQUEST_BYTES
            )
            host, port = self._server.sockets[0].getsockname()[:2]
            self._bound_endpoint = EndpointConfig(type=EndpointType.TCP, host=host, port=port)

        increment_counter("rpc.server.started", 1)
        logger.info(f"Game RPC server listening on {self.endpoint}")

    async def stop(self):
        """Stop accepting connections, cancel in-flight requests and release the listening socket"""
        if self._server is None:
            return
        self._server.close()
        tasks = list(self._client_tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await self._server.wait_closed()
        self._server = None
        if self._endpoint.type == EndpointType.UNIX:
            self._remove_socket_file()
        logger.info(f"Game RPC server on {self.endpoint} stopped")

    async def __aenter__(self) -> "SocketRpcServer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    def _remove_socket_file(self):
        path = self._endpoint.path
        try:
            mode = os.stat(path).st_mode
        except FileNotFoundError:
            return
        if not stat.S_ISSOCK(mode):
            raise ConfigurationError(f"Refusing to remove {path}: not a Unix socket")
        os.unlink(path)

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        task = asyncio.current_task()
        self._client_tasks.add(task)
        try:
            try:
                line = await reader.readline()
            except ValueError:
                # Line longer than the reader limit
                increment_counter("rpc.server.errors", 1, {"type": "request_too_large"})
                writer.write(encode_response(fail("Invalid request: request too large")))
                await writer.drain()
                return

            if not line.strip():
                logger.debug("Client sent empty request, closing connection")
                return

            increment_counter("rpc.server.requests.received", 1)
            start_time = time.time()

            response = await self._handle_line(line)
            try:
                payload = encode_response(response)
            except (TypeError, ValueError) as e:
                logger.error(f"Cannot serialize response: {e}")
                increment_counter("rpc.server.errors", 1, {"type": "serialization_error"})
                payload = encode_response(fail(f"Internal error: {e}"))
            writer.write(payload)
            await writer.drain()

            latency_ms = (time.time() - start_time) * 1000
            record_latency("rpc.server.request.latency", latency_ms)
            logger.debug(f"Sent response, took {latency_ms:.2f}ms")

        except OSError as e:
            logger.debug(f"Client connection error: {e}")
        finally:
            self._client_tasks.discard(task)
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.debug(f"Error while closing client connection: {e}")

    async def _handle_line(self, line: bytes) -> Dict[str, Any]:
        try:
            request = json.loads(normalize_frame(line))
        except (ValueError, RecursionError) as e:
            # Undecodable bytes, malformed JSON or nesting too deep to parse
            logger.warning(f"Failed to parse RPC request: {e}")
            increment_counter("rpc.server.errors", 1, {"type": "parse_error"})
            return fail(f"Invalid JSON: {e}")

        action = request.get("action") if isinstance(request, dict) else None
        if not isinstance(action, str) or not action:
            increment_counter("rpc.server.errors", 1, {"type": "invalid_request"})
            return fail("Invalid request: missing action")

        handler = self.actions.get(action)
        if handler is None:
            increment_counter("rpc.server.errors", 1, {"type": "unknown_action"})
            return fail(f"Unknown action: {action}")

        params = request.get("params")
        if params is None:
            params = {}

        logger.debug(f"Dispatching action: {action}")
        try:
            result = handler(params)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(f"Error handling action {action}: {e}")
            increment_counter("rpc.server.errors", 1, {"type": "internal_error", "action": action})
            return fail(f"Internal error: {e}")

        return ok(result)
