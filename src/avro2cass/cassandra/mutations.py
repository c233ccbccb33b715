from __future__ import annotations

from typing import Protocol

from avro2cass.domain.write import Mutation
from avro2cass.errors import EncodingError

MAX_TIMESTAMP = 2**63 - 1
MIN_TIMESTAMP = -(2**63)
MAX_TTL = 2**31 - 1


class MutationBuilderFn(Protocol):
    def __call__(self, name: str, value: bytes, timestamp: int, ttl: int) -> Mutation:
        ...


def build_mutation(name: str, value: bytes, timestamp: int, ttl: int) -> Mutation:
    """Build one column write; a ttl of 0 means the column never expires."""
    return Mutation(name=name, value=bytes(value), timestamp=timestamp, ttl=ttl)


def coerce_timestamp(value: object) -> int:
    """Return ``value`` as a 64-bit milliseconds timestamp."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(
            f"timestamp must be an integer of milliseconds, got {type(value).__name__}"
        )
    if not MIN_TIMESTAMP <= value <= MAX_TIMESTAMP:
        raise EncodingError(f"timestamp {value} does not fit in 64 bits")
    return value


def coerce_ttl(value: object) -> int:
    """Return ``value`` as a non-negative 32-bit TTL in seconds."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"ttl must be an integer of seconds, got {type(value).__name__}")
    if not 0 <= value <= MAX_TTL:
        raise EncodingError(f"ttl {value} is outside [0, {MAX_TTL}]")
    return value
