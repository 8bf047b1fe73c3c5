"""
Request envelope encoding

Builds the newline-terminated JSON request sent to the game server.
"""

import json
from collections.abc import Mapping
from typing import Dict, Any, Optional

from game_rpc.errors import ProtocolError

FRAME_DELIMITER = b"\n"


def build_request(action: str, params: Optional[Mapping] = None) -> Dict[str, Any]:
    """Build the request envelope dictionary

    Args:
        action: Name of the action to invoke
        params: Optional action parameters

    Returns:
        Dict: ``{"action": ..., "params": ...}``, params omitted when not given

    Raises:
        ProtocolError: If action is empty or params is not a string-keyed mapping
    """
    if not isinstance(action, str) or not action:
        raise ProtocolError(f"action must be a non-empty string, got {action!r}")

    request = {"action": action}
    if params is not None:
        if not isinstance(params, Mapping):
            raise ProtocolError(f"params must be a mapping, got {type(params).__name__}")
        if not all(isinstance(key, str) for key in params):
            raise ProtocolError("params keys must be strings")
        request["params"] = dict(params)
    return request


def encode_request(action: str, params: Optional[Mapping] = None) -> bytes:
    """Encode a request as UTF-8 JSON followed by a single line feed

    Raises:
        ProtocolError: If the envelope is invalid or cannot be serialized
    """
    request = build_request(action, params)
    try:
        text = json.dumps(request, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        # ValueError covers circular references and NaN/Infinity
        raise ProtocolError(f"Cannot serialize request for '{action}': {e}") from e
    return text.encode("utf-8") + FRAME_DELIMITER
