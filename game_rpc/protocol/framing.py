"""
Response framing

Accumulates chunks from a stream and extracts the first newline-delimited frame.
The same algorithm is used for every transport binding.
"""

import logging
from typing import Optional

from game_rpc.config import DEFAULT_MAX_FRAME_BYTES
from game_rpc.errors import ProtocolError

logger = logging.getLogger(__name__)

BYTE_ORDER_MARK = "\ufeff"


class ResponseFramer:
    """Cumulative buffer that detects the end of a single response frame"""

    def __init__(self, max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES):
        self.max_frame_bytes = max_frame_bytes
        self._buffer = bytearray()
        # Offset up to which the buffer is known to contain no delimiter
        self._scanned = 0
        self._frame: Optional[str] = None

    @property
    def complete(self) -> bool:
        return self._frame is not None

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    def feed(self, chunk: bytes) -> Optional[str]:
        """Append a chunk and return the frame once its delimiter has arrived

        Args:
            chunk: Raw bytes received from the transport

        Returns:
            The BOM-stripped, trimmed frame text, or None if more bytes are needed

        Raises:
            ProtocolError: If the frame is not valid UTF-8 or grows past max_frame_bytes
        """
        if self._frame is not None:
            # One frame per connection, anything after it is ignored
            return self._frame

        self._buffer.extend(chunk)
        index = self._buffer.find(b"\n", self._scanned)
        if index > self.max_frame_bytes:
            raise ProtocolError(f"Response frame exceeds {self.max_frame_bytes} bytes")
        if index < 0:
            self._scanned = len(self._buffer)
            if self._scanned > self.max_frame_bytes:
                raise ProtocolError(
                    f"Response exceeds {self.max_frame_bytes} bytes without a frame delimiter"
                )
            return None

        discarded = len(self._buffer) - index - 1
        if discarded:
            logger.debug(f"Discarding {discarded} bytes after response frame")

        self._frame = normalize_frame(bytes(self._buffer[:index]))
        self._buffer.clear()
        return self._frame

    def finish(self):
        """Signal end of stream before a frame was seen

        Raises:
            ProtocolError: Always; "empty response" when nothing arrived, otherwise
                "incomplete response"
        """
        if self._frame is not None:
            return
        if not self._buffer:
            raise ProtocolError("empty response: connection closed without data")
        partial = bytes(self._buffer).decode("utf-8", errors="replace")
        raise ProtocolError(
            f"incomplete response: connection closed after {len(self._buffer)} bytes without a line feed",
            frame=partial,
        )


def normalize_frame(raw: bytes) -> str:
    """Decode frame bytes, strip one leading BOM and surrounding whitespace"""
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ProtocolError(f"Response is not valid UTF-8: {e}") from e
    if text.startswith(BYTE_ORDER_MARK):
        text = text[len(BYTE_ORDER_MARK):]
    return text.strip()
