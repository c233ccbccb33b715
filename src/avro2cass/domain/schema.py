from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional, Sequence

from avro2cass.errors import SchemaError

PRIMITIVE_TYPES = frozenset(
    {"null", "boolean", "int", "long", "float", "double", "bytes", "string"}
)
# Named types that still carry a single scalar value.
SCALAR_NAMED_TYPES = frozenset({"enum", "fixed"})
COMPLEX_TYPES = frozenset({"record", "array", "map", "error"})


@dataclass(frozen=True)
class FieldSchema:
    """One flat field of a record schema."""

    name: str
    pos: int
    type: str
    nullable: bool = False
    logical_type: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise SchemaError("field name must be non-empty")
        if self.pos < 0:
            raise SchemaError(f"field {self.name!r} has negative position {self.pos}")


@dataclass(frozen=True, eq=False)
class RecordSchema:
    """Ordered, flat Avro-style record schema.

    Equality is identity. Use ``fingerprint`` to compare two schema objects
    structurally.
    """

    name: str
    fields: tuple[FieldSchema, ...]
    _by_name: dict[str, FieldSchema] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        fields = tuple(self.fields)
        object.__setattr__(self, "fields", fields)
        by_name: dict[str, FieldSchema] = {}
        for idx, f in enumerate(fields):
            if f.pos != idx:
                raise SchemaError(
                    f"field {f.name!r} declared at index {idx} has position {f.pos}"
                )
            if f.name in by_name:
                raise SchemaError(f"duplicate field name {f.name!r} in schema {self.name!r}")
            by_name[f.name] = f
        object.__setattr__(self, "_by_name", by_name)

    def __iter__(self) -> Iterator[FieldSchema]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @cached_property
    def fingerprint(self) -> tuple:
        return (
            self.name,
            tuple((f.name, f.pos, f.type, f.nullable, f.logical_type) for f in self.fields),
        )

    def get_field(self, name: str) -> Optional[FieldSchema]:
        return self._by_name.get(name)

    @classmethod
    def of(cls, name: str, fields: Sequence[str | tuple[str, str]]) -> "RecordSchema":
        """Build a schema from names or (name, type) pairs; bare names are strings."""
        built = []
        for pos, item in enumerate(fields):
            if isinstance(item, str):
                fname, ftype = item, "string"
            else:
                fname, ftype = item
            built.append(_parse_field(fname, pos, ftype))
        return cls(name=name, fields=tuple(built))

    @classmethod
    def from_avro(cls, doc: Mapping[str, Any]) -> "RecordSchema":
        """Parse a flat Avro record schema document."""
        if not isinstance(doc, Mapping):
            raise SchemaError(
                f"Avro schema must be a JSON object, got {type(doc).__name__}"
            )
        if doc.get("type") != "record":
            raise SchemaError(
                f"top-level Avro schema must be a record, got {doc.get('type')!r}"
            )
        name = doc.get("name")
        if not isinstance(name, str) or not name:
            raise SchemaError("record schema requires a name")
        namespace = doc.get("namespace")
        full_name = f"{namespace}.{name}" if namespace else name
        raw_fields = doc.get("fields")
        if not isinstance(raw_fields, list):
            raise SchemaError(f"record {full_name!r} requires a 'fields' list")
        fields = []
        for pos, raw in enumerate(raw_fields):
            if not isinstance(raw, Mapping) or "name" not in raw or "type" not in raw:
                raise SchemaError(f"field #{pos} of {full_name!r} needs 'name' and 'type'")
            fields.append(_parse_field(raw["name"], pos, raw["type"]))
        return cls(name=full_name, fields=tuple(fields))


def read_schema(path: Path) -> RecordSchema:
    """Load a record schema from an ``.avsc`` JSON file."""
    try:
        with path.open("r", encoding="utf-8") as f:
            doc = json.load(f)
    except FileNotFoundError as e:
        raise FileNotFoundError(f"Schema file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SchemaError(f"Invalid JSON in schema {path}: {e}") from e
    return RecordSchema.from_avro(doc)


def _parse_field(name: str, pos: int, avro_type: Any) -> FieldSchema:
    nullable = False
    if isinstance(avro_type, list):
        branches = [t for t in avro_type if t != "null"]
        nullable = len(branches) != len(avro_type)
        if len(branches) != 1:
            raise SchemaError(
                f"field {name!r}: only [\"null\", T] unions are supported, got {avro_type!r}"
            )
        avro_type = branches[0]

    logical_type = None
    if isinstance(avro_type, Mapping):
        logical_type = avro_type.get("logicalType")
        avro_type = avro_type.get("type")

    if not isinstance(avro_type, str):
        raise SchemaError(f"field {name!r}: unsupported type declaration {avro_type!r}")
    if avro_type in COMPLEX_TYPES:
        raise SchemaError(f"field {name!r}: nested type {avro_type!r} is not supported")
    if avro_type not in PRIMITIVE_TYPES and avro_type not in SCALAR_NAMED_TYPES:
        raise SchemaError(f"field {name!r}: unknown type {avro_type!r}")
    if avro_type == "null":
        nullable = True
    return FieldSchema(
        name=name,
        pos=pos,
        type=avro_type,
        nullable=nullable,
        logical_type=logical_type,
    )
