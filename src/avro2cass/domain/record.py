from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Sequence

from avro2cass.domain.schema import FieldSchema, RecordSchema


@dataclass(frozen=True)
class Record:
    """Read-only row: one value per schema field, in field order."""

    schema: RecordSchema
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        values = tuple(self.values)
        if len(values) != len(self.schema):
            raise ValueError(
                f"record for {self.schema.name!r} expects {len(self.schema)} values, got {len(values)}"
            )
        object.__setattr__(self, "values", values)

    @classmethod
    def from_values(cls, schema: RecordSchema, values: Sequence[Any]) -> "Record":
        return cls(schema=schema, values=tuple(values))

    @classmethod
    def from_mapping(cls, schema: RecordSchema, data: Mapping[str, Any]) -> "Record":
        """Build a record from a name -> value mapping; missing names are None."""
        return cls(schema=schema, values=tuple(data.get(f.name) for f in schema))

    def get(self, pos: int) -> Any:
        return self.values[pos]

    def get_by_name(self, name: str) -> Any:
        f = self.schema.get_field(name)
        if f is None:
            raise KeyError(name)
        return self.values[f.pos]

    def items(self) -> Iterator[tuple[FieldSchema, Any]]:
        return zip(self.schema.fields, self.values)

    def as_dict(self) -> dict[str, Any]:
        return {f.name: value for f, value in self.items()}
