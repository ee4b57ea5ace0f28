"""JSON helpers for consumer-facing payloads.

Amounts travel as ``{"__bigint__": "<decimal>"}`` (see ``models.types.Uint64``)
so a 64-bit balance survives any JSON parser unchanged.
"""

import json
from typing import Any

from models.types import BIGINT_TAG


def json_reviver(obj: dict) -> Any:
    """``object_hook`` that turns tagged bigints back into ints."""
    if len(obj) == 1 and BIGINT_TAG in obj:
        return int(obj[BIGINT_TAG])
    return obj


def revive(payload: Any) -> Any:
    """Recursively decode tagged bigints in an already-parsed payload."""
    if isinstance(payload, dict):
        decoded = {key: revive(value) for key, value in payload.items()}
        return json_reviver(decoded)
    if isinstance(payload, list):
        return [revive(item) for item in payload]
    return payload


def dumps_payload(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), default=str)


def loads_payload(text: str) -> Any:
    return json.loads(text, object_hook=json_reviver)
