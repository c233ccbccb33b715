from __future__ import annotations

import enum
from dataclasses import dataclass
from functools import cached_property
from typing import Optional

from avro2cass.config.projection import ProjectionConfig
from avro2cass.domain.schema import FieldSchema, RecordSchema
from avro2cass.errors import RowKeyNotFoundError, SchemaError


class FieldRole(enum.Enum):
    ROW_KEY = "rowkey"
    TIMESTAMP = "timestamp"
    TTL = "ttl"
    IGNORED = "ignored"
    DATA = "data"


@dataclass(frozen=True)
class RoleMap:
    """Field roles resolved against one schema.

    Roles are stored by position, in schema order. Callers look roles up by
    field name; positions never leave this class.
    """

    schema: RecordSchema
    _roles: tuple[FieldRole, ...]
    rowkey_defaulted: bool = False

    def __post_init__(self) -> None:
        if len(self._roles) != len(self.schema):
            raise ValueError("role count does not match schema field count")
        if self._roles.count(FieldRole.ROW_KEY) != 1:
            raise ValueError("exactly one field must be the row key")
        for single in (FieldRole.TIMESTAMP, FieldRole.TTL):
            if self._roles.count(single) > 1:
                raise ValueError(f"at most one field may have role {single.value}")

    def role_of(self, name: str) -> FieldRole:
        f = self.schema.get_field(name)
        if f is None:
            raise KeyError(name)
        return self._roles[f.pos]

    def fields_with(self, role: FieldRole) -> list[FieldSchema]:
        return [f for f, r in zip(self.schema.fields, self._roles) if r is role]

    def data_fields(self) -> list[FieldSchema]:
        return self.fields_with(FieldRole.DATA)

    @property
    def row_key_field(self) -> FieldSchema:
        return self.fields_with(FieldRole.ROW_KEY)[0]

    @property
    def timestamp_field(self) -> Optional[FieldSchema]:
        found = self.fields_with(FieldRole.TIMESTAMP)
        return found[0] if found else None

    @property
    def ttl_field(self) -> Optional[FieldSchema]:
        found = self.fields_with(FieldRole.TTL)
        return found[0] if found else None

    @property
    def ignored_fields(self) -> list[FieldSchema]:
        return self.fields_with(FieldRole.IGNORED)

    def matches(self, schema: RecordSchema) -> bool:
        """True when this map was resolved for ``schema`` (same object or same structure)."""
        return schema is self.schema or schema.fingerprint == self.schema.fingerprint

    @cached_property
    def pairs(self) -> tuple[tuple[FieldSchema, FieldRole], ...]:
        return tuple(zip(self.schema.fields, self._roles))


def resolve_roles(schema: RecordSchema, config: ProjectionConfig) -> RoleMap:
    """Resolve the role of every field of ``schema`` from the configured names.

    Checked per field, in declared order: row key, timestamp, TTL, ignored.
    Anything else is a data field. When no field is named like the row key the
    first field becomes the row key, overriding any other role it matched.
    """
    if not len(schema):
        raise SchemaError(f"schema {schema.name!r} has no fields")

    roles: list[FieldRole] = []
    for f in schema:
        if f.name == config.rowkey:
            roles.append(FieldRole.ROW_KEY)
        elif config.timestamp is not None and f.name == config.timestamp:
            roles.append(FieldRole.TIMESTAMP)
        elif config.ttl is not None and f.name == config.ttl:
            roles.append(FieldRole.TTL)
        elif f.name in config.ignore:
            roles.append(FieldRole.IGNORED)
        else:
            roles.append(FieldRole.DATA)

    defaulted = FieldRole.ROW_KEY not in roles
    if defaulted:
        if config.strict_rowkey:
            raise RowKeyNotFoundError(config.rowkey, schema.name)
        roles[0] = FieldRole.ROW_KEY

    return RoleMap(schema=schema, _roles=tuple(roles), rowkey_defaulted=defaulted)
