"""Cell values to Cassandra wire bytes.

Serialization goes through the native type classes of the DataStax driver
(``cassandra.cqltypes``), so the bytes match what the server stores for the
corresponding validator (Int32Type, LongType, UTF8Type, ...).
"""

from __future__ import annotations

import struct
import uuid
from decimal import Decimal
from typing import Any, Callable, Optional, Protocol

from cassandra import ProtocolVersion
from cassandra.cqltypes import (
    BooleanType,
    BytesType,
    DecimalType,
    DoubleType,
    FloatType,
    Int32Type,
    LongType,
    UTF8Type,
    UUIDType,
)

from avro2cass.domain.schema import FieldSchema
from avro2cass.errors import EncodingError

EMPTY = b""

_BYTES_LIKE = (bytes, bytearray, memoryview)
_NUMBER = (int, float)


class CellEncoderFn(Protocol):
    def __call__(self, value: Any, field: Optional[FieldSchema] = None) -> bytes:
        ...


# Avro type name -> (accepted python types, cassandra type)
_AVRO_CODECS: dict[str, tuple[tuple[type, ...], type]] = {
    "boolean": ((bool,), BooleanType),
    "int": ((int,), Int32Type),
    "long": ((int,), LongType),
    "float": (_NUMBER, FloatType),
    "double": (_NUMBER, DoubleType),
    "string": ((str,), UTF8Type),
    "enum": ((str,), UTF8Type),
    "bytes": (_BYTES_LIKE, BytesType),
    "fixed": (_BYTES_LIKE, BytesType),
}

# Python type -> cassandra type, checked in order (bool before int).
_PYTHON_CODECS: tuple[tuple[type | tuple[type, ...], type], ...] = (
    (bool, BooleanType),
    (int, LongType),
    (float, DoubleType),
    (str, UTF8Type),
    (_BYTES_LIKE, BytesType),
    (uuid.UUID, UUIDType),
    (Decimal, DecimalType),
)


class CellEncoder:
    """Encode one cell value to bytes.

    With a field, the declared Avro type picks the serializer and the value
    must match it. Without one, the Python type decides; integers become
    8-byte longs and floats 8-byte doubles. ``None`` always encodes to the
    empty value.
    """

    def __init__(self, protocol_version: int = ProtocolVersion.V4) -> None:
        self.protocol_version = protocol_version

    def __call__(self, value: Any, field: Optional[FieldSchema] = None) -> bytes:
        if field is not None and field.type == "null":
            raise EncodingError(f"field {field.name!r} is null-only and cannot be written")
        if value is None:
            return EMPTY
        cql_type = self._typed(value, field) if field is not None else self._untyped(value)
        return self._serialize(cql_type, value, field)

    def _typed(self, value: Any, field: FieldSchema) -> type:
        if field.logical_type == "uuid" and isinstance(value, (uuid.UUID, str)):
            return UUIDType
        if field.logical_type == "decimal" and isinstance(value, Decimal):
            return DecimalType
        accepted, cql_type = _AVRO_CODECS[field.type]
        # bool is an int subclass; only boolean fields take it.
        if isinstance(value, bool) and field.type != "boolean":
            accepted = ()
        if not isinstance(value, accepted):
            raise EncodingError(
                f"field {field.name!r} of type {field.type!r} cannot encode "
                f"{type(value).__name__} value {value!r}"
            )
        return cql_type

    def _untyped(self, value: Any) -> type:
        for py_type, cql_type in _PYTHON_CODECS:
            if isinstance(value, py_type):
                return cql_type
        raise EncodingError(
            f"cannot encode value of type {type(value).__name__} to bytes"
        )

    def _serialize(self, cql_type: type, value: Any, field: Optional[FieldSchema]) -> bytes:
        if cql_type is UUIDType and isinstance(value, str):
            try:
                value = uuid.UUID(value)
            except ValueError as exc:
                raise EncodingError(f"invalid uuid {value!r}") from exc
        try:
            return cql_type.serialize(value, self.protocol_version)
        except (struct.error, OverflowError, TypeError, ValueError) as exc:
            label = field.name if field is not None else cql_type.typename
            raise EncodingError(f"cannot encode {value!r} as {cql_type.typename} ({label}): {exc}") from exc


_default_encoder = CellEncoder()


def encode(value: Any, field: Optional[FieldSchema] = None) -> bytes:
    """Encode with the default, protocol v4 ``CellEncoder``."""
    return _default_encoder(value, field)


def encoder_for(fn: Callable[[Any], bytes]) -> CellEncoderFn:
    """Adapt a single-argument ``encode(value)`` function to the field-aware form."""

    def _encode(value: Any, field: Optional[FieldSchema] = None) -> bytes:
        return fn(value)

    return _encode
