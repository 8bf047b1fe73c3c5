"""
Socket transport connector

Opens one asyncio stream connection per call, to either a TCP host:port or a
Unix domain socket path. Both bindings return the same Connection handle.
"""

import asyncio
import logging

from game_rpc.config import EndpointConfig, EndpointType
from game_rpc.errors import TransportError

logger = logging.getLogger(__name__)

# Upper bound for a single read
READ_CHUNK_SIZE = 64 * 1024


class Connection:
    """One open stream: write bytes, receive chunks, close once"""

    def __init__(self,
                 endpoint: EndpointConfig,
                 reader: asyncio.StreamReader,
                 writer: asyncio.StreamWriter):
        self.endpoint = endpoint
        self._reader = reader
        self._writer = writer
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def write(self, data: bytes):
        """Write data and wait until it has been flushed to the socket

        Raises:
            TransportError: If the peer has gone away
        """
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as e:
            raise TransportError(f"Failed to write to {self.endpoint}: {e}") from e

    async def read_chunk(self, size: int = READ_CHUNK_SIZE) -> bytes:
        """Receive the next chunk, ``b""`` once the peer has closed

        Raises:
            TransportError: If the read fails
        """
        try:
            return await self._reader.read(size)
        except OSError as e:
            raise TransportError(f"Failed to read from {self.endpoint}: {e}") from e

    def close(self):
        """Close the connection; repeated calls are no-ops"""
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        logger.debug(f"Closed connection to {self.endpoint}")

    async def wait_closed(self):
        """Wait for the transport to finish closing"""
        try:
            await self._writer.wait_closed()
        except OSError as e:
            # The connection is gone either way
            logger.debug(f"Error while closing connection to {self.endpoint}: {e}")


async def open_connection(endpoint: EndpointConfig) -> Connection:
    """Establish one connection to the endpoint

    Args:
        endpoint: TCP or Unix endpoint configuration

    Returns:
        Connection: Open connection handle

    Raises:
        TransportError: If the connection cannot be established
    """
    try:
        if endpoint.type == EndpointType.UNIX:
            reader, writer = await asyncio.open_unix_connection(endpoint.path)
        else:
            reader, writer = await asyncio.open_connection(endpoint.host, endpoint.port)
    except OSError as e:
        # Refused, not found, permission denied, name resolution
        raise TransportError(f"Cannot connect to {endpoint}: {e}") from e

    logger.debug(f"Connected to {endpoint.type.value} endpoint {endpoint}")
    return Connection(endpoint, reader, writer)
