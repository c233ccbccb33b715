from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator

from avro2cass.domain.record import Record
from avro2cass.domain.write import WriteUnit


class ProjectionTransformBase(ABC):
    """Base interface for transforms from records to write units."""

    def __call__(self, stream: Iterator[Record]) -> Iterator[WriteUnit]:
        return self.apply(stream)

    @abstractmethod
    def apply(self, stream: Iterator[Record]) -> Iterator[WriteUnit]:
        ...
