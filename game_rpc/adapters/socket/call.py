"""
Per-call lifecycle with deadline guard

A PendingCall moves CONNECTING -> AWAITING_RESPONSE -> SETTLED. The response
pipeline and the deadline timer race to settle it; the first settlement wins and
every later one is ignored. The connection is closed exactly once whichever path
ends the call.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from game_rpc.config import ClientConfig, EndpointConfig
from game_rpc.errors import ProtocolError, TransportError
from game_rpc.protocol.decoder import (
    Outcome,
    ProtocolFailure,
    Timeout,
    TransportFailure,
    decode_frame,
)
from game_rpc.protocol.framing import ResponseFramer
from game_rpc.adapters.socket.connector import Connection, open_connection

logger = logging.getLogger(__name__)

Connector = Callable[[EndpointConfig], Awaitable[Connection]]


class CallState(Enum):
    CONNECTING = "connecting"
    AWAITING_RESPONSE = "awaiting_response"
    SETTLED = "settled"


class PendingCall:
    """One request/response exchange over its own connection"""

    def __init__(self,
                 config: ClientConfig,
                 action: str,
                 request: bytes,
                 connector: Connector = open_connection):
        self.config = config
        self.action = action
        self.request = request
        self.state = CallState.CONNECTING
        self.outcome: Optional[Outcome] = None
        self.elapsed_ms: Optional[float] = None

        self._connector = connector
        self._connection: Optional[Connection] = None
        self._future: Optional[asyncio.Future] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None
        self._started_at = 0.0

    @property
    def settled(self) -> bool:
        return self._future is not None and self._future.done()

    @property
    def connection(self) -> Optional[Connection]:
        return self._connection

    async def run(self) -> Outcome:
        """Run the exchange and return its single outcome"""
        loop = asyncio.get_running_loop()
        self._started_at = loop.time()
        self._future = loop.create_future()
        self._timer = loop.call_later(self.config.timeout_seconds, self._on_deadline)
        self._task = loop.create_task(self._pipeline())

        try:
            return await self._future
        finally:
            self._timer.cancel()
            if not self._task.done():
                self._task.cancel()
            # A cancelled pipeline ends with CancelledError, collected here
            await asyncio.gather(self._task, return_exceptions=True)
            await self._close()
            self.elapsed_ms = (loop.time() - self._started_at) * 1000

    def settle(self, outcome: Outcome) -> bool:
        """Settle the call once; returns False when it was already settled"""
        if self._future is None or self._future.done():
            logger.debug(f"Ignoring late {outcome.kind} for '{self.action}', call already settled")
            return False

        self._timer.cancel()
        self.state = CallState.SETTLED
        self.outcome = outcome
        self._future.set_result(outcome)
        logger.debug(f"Call '{self.action}' settled with {outcome.kind}")
        return True

    def _on_deadline(self):
        if self.settle(Timeout(self.config.timeout_ms)):
            logger.debug(f"Call '{self.action}' to {self.config.endpoint} timed out after {self.config.timeout_ms}ms")
            # Tear the socket down now rather than when the pipeline unwinds
            if self._connection is not None:
                self._connection.close()

    async def _pipeline(self):
        try:
            self._connection = await self._connector(self.config.endpoint)
            self.state = CallState.AWAITING_RESPONSE
            await self._connection.write(self.request)

            framer = ResponseFramer(self.config.max_frame_bytes)
            frame = None
            while frame is None:
                chunk = await self._connection.read_chunk()
                if not chunk:
                    framer.finish()  # raises ProtocolError
                frame = framer.feed(chunk)

            self.settle(decode_frame(frame))

        except ProtocolError as e:
            self.settle(ProtocolFailure.from_error(e))
        except TransportError as e:
            self.settle(TransportFailure(e))
        except Exception as e:
            logger.error(f"Unexpected error during call '{self.action}': {e}")
            if not self.settled:
                self._timer.cancel()
                self.state = CallState.SETTLED
                self._future.set_exception(e)

    async def _close(self):
        if self._connection is None:
            return
        if not self._connection.closed:
            self._connection.close()
        await self._connection.wait_closed()
