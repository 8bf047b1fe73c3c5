"""
Response decoding and call outcomes

A call always ends in exactly one Outcome. Outcomes are plain values; unwrap()
converts them to the caller-facing result or exception.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

from game_rpc.errors import (
    ProtocolError,
    RemoteError,
    RpcTimeoutError,
    TransportError,
)

UNKNOWN_ERROR = "unknown error"


class Outcome:
    """Terminal result of a call"""

    kind = "outcome"

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self, action: Optional[str] = None) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Success(Outcome):
    data: Any = None

    kind = "success"

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self, action: Optional[str] = None) -> Any:
        return self.data


@dataclass(frozen=True)
class Failure(Outcome):
    """Application-level failure reported by the server"""
    error: str = UNKNOWN_ERROR

    kind = "remote_error"

    def unwrap(self, action: Optional[str] = None) -> Any:
        raise RemoteError(self.error, action=action)


@dataclass(frozen=True)
class Timeout(Outcome):
    timeout_ms: int

    kind = "timeout"

    def unwrap(self, action: Optional[str] = None) -> Any:
        raise RpcTimeoutError(self.timeout_ms, action=action)


@dataclass(frozen=True)
class TransportFailure(Outcome):
    cause: BaseException

    kind = "transport_error"

    def unwrap(self, action: Optional[str] = None) -> Any:
        if isinstance(self.cause, TransportError):
            raise self.cause
        raise TransportError(f"Transport error: {self.cause}") from self.cause


@dataclass(frozen=True)
class ProtocolFailure(Outcome):
    message: str
    frame: Optional[str] = None

    kind = "protocol_error"

    @classmethod
    def from_error(cls, error: ProtocolError) -> "ProtocolFailure":
        return cls(message=str(error), frame=error.frame)

    def unwrap(self, action: Optional[str] = None) -> Any:
        raise ProtocolError(self.message, frame=self.frame)


def decode_frame(frame: str) -> Outcome:
    """Parse a framed, trimmed response into an outcome

    Args:
        frame: Response text with delimiter, BOM and whitespace already removed

    Returns:
        Success, Failure or ProtocolFailure
    """
    if not frame:
        return ProtocolFailure("empty response", frame=frame)

    try:
        response = json.loads(frame)
    except json.JSONDecodeError as e:
        return ProtocolFailure(f"Invalid JSON in response: {e}", frame=frame)
    except RecursionError as e:
        # Valid JSON nested deeper than the parser can follow
        return ProtocolFailure(f"Response nested too deeply: {e}", frame=frame)

    if not isinstance(response, dict):
        return ProtocolFailure(
            f"Response must be a JSON object, got {type(response).__name__}", frame=frame
        )

    if "success" not in response:
        return ProtocolFailure("Response is missing the 'success' field", frame=frame)

    success = response["success"]
    if not isinstance(success, bool):
        return ProtocolFailure(
            f"Response 'success' must be a boolean, got {type(success).__name__}", frame=frame
        )

    if success:
        return Success(response.get("data"))

    error = response.get("error")
    if error is None or error == "":
        error = UNKNOWN_ERROR
    elif not isinstance(error, str):
        error = json.dumps(error)
    return Failure(error)

