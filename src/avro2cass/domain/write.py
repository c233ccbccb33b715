from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Mutation:
    """A single column write bound to a timestamp and an optional expiry."""

    name: str
    value: bytes
    timestamp: int
    ttl: int = 0

    @property
    def name_bytes(self) -> bytes:
        return self.name.encode("utf-8")

    @property
    def expires(self) -> bool:
        return self.ttl > 0


@dataclass(frozen=True)
class WriteUnit:
    """Encoded row key paired with its column mutations, in schema order."""

    row_key: bytes
    mutations: tuple[Mutation, ...]

    def __iter__(self) -> Iterator[Mutation]:
        return iter(self.mutations)

    def __len__(self) -> int:
        return len(self.mutations)

    @property
    def column_names(self) -> list[str]:
        return [m.name for m in self.mutations]
