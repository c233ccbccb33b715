from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional

from avro2cass.cassandra.encoding import CellEncoder, CellEncoderFn
from avro2cass.cassandra.mutations import (
    MutationBuilderFn,
    build_mutation,
    coerce_timestamp,
    coerce_ttl,
)
from avro2cass.config.projection import ProjectionConfig
from avro2cass.domain.record import Record
from avro2cass.domain.schema import RecordSchema
from avro2cass.domain.write import Mutation, WriteUnit
from avro2cass.pipeline.observability import (
    ROLES_RESOLVED,
    ROWKEY_DEFAULTED,
    SCHEMA_CHANGED,
    Observer,
    ProjectionEvent,
)
from avro2cass.projection.roles import FieldRole, RoleMap, resolve_roles

logger = logging.getLogger(__name__)


def current_time_millis() -> int:
    return time.time_ns() // 1_000_000


class RecordProjector:
    """Turn flat records into write units for the Thrift-style write path.

    Field roles are resolved the first time a schema is seen and cached by
    schema fingerprint; later records of that schema reuse the cached map.
    Instances may be shared across threads; the role map is computed once
    under a lock and published as a single reference.

    Parameters
    - config: field-role names
    - encoder: ``encoder(value, field) -> bytes``, used for the row key and
      every data column; errors it raises propagate unchanged
    - mutation_builder: ``builder(name, value, timestamp, ttl) -> Mutation``
    - clock: wall-clock milliseconds, read only when no timestamp resolves
    """

    def __init__(
        self,
        config: ProjectionConfig,
        *,
        encoder: Optional[CellEncoderFn] = None,
        mutation_builder: Optional[MutationBuilderFn] = None,
        clock: Callable[[], int] = current_time_millis,
        observer: Optional[Observer] = None,
    ) -> None:
        self.config = config
        self._encode = encoder or CellEncoder()
        self._build = mutation_builder or build_mutation
        self._clock = clock
        self._observer = observer
        self._role_map: Optional[RoleMap] = None
        self._role_maps: dict[tuple, RoleMap] = {}
        self._lock = threading.Lock()
        self.resolve_count = 0

    def set_observer(self, observer: Optional[Observer]) -> None:
        self._observer = observer

    @property
    def ready(self) -> bool:
        return self._role_map is not None

    @property
    def role_map(self) -> Optional[RoleMap]:
        return self._role_map

    def roles_for(self, schema: RecordSchema) -> RoleMap:
        """Return the cached role map for ``schema``, resolving it if needed.

        Maps are kept per schema fingerprint, so a stream that alternates
        between schemas resolves each of them once.
        """
        current = self._role_map
        if current is not None and current.matches(schema):
            return current
        key = schema.fingerprint
        cached = self._role_maps.get(key)
        if cached is None:
            with self._lock:
                cached = self._role_maps.get(key)
                if cached is None:
                    role_map = resolve_roles(schema, self.config)
                    self.resolve_count += 1
                    self._role_maps[key] = role_map
                    self._role_map = role_map
        if cached is not None:
            self._role_map = cached
            return cached
        self._announce(role_map, previous=current)
        return role_map

    def project(self, record: Record) -> WriteUnit:
        role_map = self.roles_for(record.schema)

        row_key: Any = None
        timestamp: Optional[int] = None
        ttl = 0
        for f, role in role_map.pairs:
            if role is FieldRole.ROW_KEY:
                row_key = record.get(f.pos)
            elif role is FieldRole.TIMESTAMP:
                value = record.get(f.pos)
                if value is not None:
                    timestamp = coerce_timestamp(value)
            elif role is FieldRole.TTL:
                value = record.get(f.pos)
                if value is not None:
                    ttl = coerce_ttl(value)
        if timestamp is None:
            timestamp = self._clock()

        mutations: list[Mutation] = []
        for f, role in role_map.pairs:
            if role is not FieldRole.DATA:
                continue
            value = self._encode(record.get(f.pos), f)
            mutations.append(self._build(f.name, value, timestamp, ttl))

        return WriteUnit(
            row_key=self._encode(row_key, role_map.row_key_field),
            mutations=tuple(mutations),
        )

    __call__ = project

    def _announce(self, role_map: RoleMap, previous: Optional[RoleMap]) -> None:
        schema = role_map.schema.name
        if previous is None:
            logger.debug("Resolved field roles for schema %s", schema)
            self._emit(
                ROLES_RESOLVED,
                schema=schema,
                rowkey=role_map.row_key_field.name,
                data=[f.name for f in role_map.data_fields()],
            )
        else:
            logger.debug(
                "Schema changed from %s to %s; field roles re-resolved",
                previous.schema.name,
                schema,
            )
            self._emit(SCHEMA_CHANGED, schema=schema, previous=previous.schema.name)
        if role_map.rowkey_defaulted:
            self._emit(
                ROWKEY_DEFAULTED,
                schema=schema,
                configured=self.config.rowkey,
                fallback=role_map.row_key_field.name,
            )

    def _emit(self, event_type: str, **payload: object) -> None:
        if self._observer is None:
            return
        self._observer(ProjectionEvent(type=event_type, payload=payload))
