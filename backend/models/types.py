"""Shared field types used across the wallet models."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BeforeValidator, Field, PlainSerializer

UINT64_MAX = 2**64 - 1

# Tag used for lossless integer transport in JSON payloads. Consumers on
# runtimes without arbitrary-precision numbers (JS, float-based parsers)
# would silently round amounts above 2**53 if they were plain numbers.
BIGINT_TAG = "__bigint__"


def bigint_to_json(value: int) -> dict[str, str]:
    return {BIGINT_TAG: str(int(value))}


def bigint_from_json(value: Any) -> Any:
    """Accept the tagged form alongside plain ints and numeric strings."""
    if isinstance(value, dict) and BIGINT_TAG in value:
        return int(value[BIGINT_TAG])
    return value


Uint64 = Annotated[
    int,
    BeforeValidator(bigint_from_json),
    Field(ge=0, le=UINT64_MAX),
    PlainSerializer(bigint_to_json, when_used="json"),
]
