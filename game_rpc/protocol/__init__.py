"""
Game RPC wire protocol

One UTF-8 JSON object per direction, terminated by a single line feed:
- envelope: request encoding
- framing: incremental response buffering and frame extraction
- decoder: frame parsing into call outcomes
"""

from .envelope import build_request, encode_request
from .framing import ResponseFramer, normalize_frame
from .decoder import (
    Outcome,
    Success,
    Failure,
    Timeout,
    TransportFailure,
    ProtocolFailure,
    decode_frame,
)

__all__ = [
    "build_request",
    "encode_request",
    "ResponseFramer",
    "normalize_frame",
    "Outcome",
    "Success",
    "Failure",
    "Timeout",
    "TransportFailure",
    "ProtocolFailure",
    "decode_frame",
]
