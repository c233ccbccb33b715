"""Project flat Avro-style records into Thrift-style Cassandra write units."""

from avro2cass.config.projection import ProjectionConfig
from avro2cass.domain.record import Record
from avro2cass.domain.schema import FieldSchema, RecordSchema
from avro2cass.domain.write import Mutation, WriteUnit
from avro2cass.errors import (
    Avro2CassError,
    EncodingError,
    RowKeyNotFoundError,
    SchemaError,
)
from avro2cass.projection.projector import RecordProjector
from avro2cass.projection.roles import FieldRole, RoleMap, resolve_roles

__all__ = [
    "Avro2CassError",
    "EncodingError",
    "FieldRole",
    "FieldSchema",
    "Mutation",
    "ProjectionConfig",
    "Record",
    "RecordProjector",
    "RecordSchema",
    "RoleMap",
    "RowKeyNotFoundError",
    "SchemaError",
    "WriteUnit",
    "resolve_roles",
]
