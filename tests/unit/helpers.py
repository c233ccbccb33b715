from __future__ import annotations

from typing import Any

from avro2cass.config.projection import ProjectionConfig
from avro2cass.domain.record import Record
from avro2cass.domain.schema import RecordSchema


def make_schema(name: str = "Row") -> RecordSchema:
    return RecordSchema.of(
        name,
        [("id", "long"), ("ts", "long"), ("ttl", "int"), "extra", "secret"],
    )


def make_config(**overrides: Any) -> ProjectionConfig:
    data: dict[str, Any] = {
        "rowkey": "id",
        "timestamp": "ts",
        "ttl": "ttl",
        "ignore": ["secret"],
    }
    data.update(overrides)
    return ProjectionConfig.model_validate(data)


def make_record(schema: RecordSchema | None = None, **values: Any) -> Record:
    schema = schema or make_schema()
    base = {"id": 42, "ts": 1000, "ttl": 30, "extra": "x", "secret": "y"}
    base.update(values)
    return Record.from_mapping(schema, base)


class FixedClock:
    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now
        self.calls = 0

    def __call__(self) -> int:
        self.calls += 1
        return self.now
