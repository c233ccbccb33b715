from __future__ import annotations

import logging
from itertools import islice
from typing import Iterator, Optional

from avro2cass.domain.record import Record
from avro2cass.domain.write import WriteUnit
from avro2cass.projection.projector import RecordProjector
from avro2cass.transforms.interfaces import ProjectionTransformBase

logger = logging.getLogger(__name__)


class ProjectRecordsTransform(ProjectionTransformBase):
    """Project each record of a stream into one write unit, in order."""

    def __init__(self, projector: RecordProjector, *, limit: Optional[int] = None) -> None:
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")
        self.projector = projector
        self.limit = limit
        self.count = 0
        self.columns = 0

    def apply(self, stream: Iterator[Record]) -> Iterator[WriteUnit]:
        if self.limit is not None:
            stream = islice(stream, self.limit)
        for record in stream:
            unit = self.projector.project(record)
            self.count += 1
            self.columns += len(unit)
            yield unit
        logger.debug(
            "Projected %d records into %d column mutations", self.count, self.columns
        )
