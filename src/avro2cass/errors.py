class Avro2CassError(Exception):
    """Base class for errors raised by avro2cass."""


class EncodingError(Avro2CassError, ValueError):
    """A value cannot be represented in its Cassandra byte form."""


class SchemaError(Avro2CassError, ValueError):
    """A record schema is empty, nested, or uses an unsupported type."""


class RowKeyNotFoundError(Avro2CassError, KeyError):
    """The configured row key name matches no field (strict mode only)."""

    def __init__(self, rowkey: str, schema_name: str) -> None:
        super().__init__(rowkey)
        self.rowkey = rowkey
        self.schema_name = schema_name

    def __str__(self) -> str:
        return f"row key field {self.rowkey!r} not found in schema {self.schema_name!r}"
