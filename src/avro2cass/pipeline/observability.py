from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Protocol, runtime_checkable

ROLES_RESOLVED = "roles_resolved"
SCHEMA_CHANGED = "schema_changed"
ROWKEY_DEFAULTED = "rowkey_defaulted"


@dataclass(frozen=True)
class ProjectionEvent:
    type: str
    payload: Mapping[str, object]


# Observer receives a structured event.
Observer = Callable[[ProjectionEvent], None]
# Factory builds an observer for a given logger (may return None if not active at current level).
ObserverFactory = Callable[[logging.Logger], Optional[Observer]]


@runtime_checkable
class SupportsObserver(Protocol):
    def set_observer(self, observer: Optional[Observer]) -> None:
        ...


class ObserverRegistry:
    def __init__(self, factories: Optional[Mapping[str, ObserverFactory]] = None) -> None:
        self._factories: dict[str, ObserverFactory] = dict(factories or {})

    def register(self, name: str, factory: ObserverFactory) -> None:
        self._factories[name] = factory

    def get(self, name: str, logger: logging.Logger) -> Optional[Observer]:
        factory = self._factories.get(name)
        return factory(logger) if factory else None

    def attach(self, target: object, name: str, logger: logging.Logger) -> bool:
        """Hand ``target`` the named observer; False when it takes none or logging is off."""
        if not isinstance(target, SupportsObserver):
            return False
        observer = self.get(name, logger)
        target.set_observer(observer)
        return observer is not None


def _projection_observer_factory(logger: logging.Logger) -> Optional[Observer]:
    if not logger.isEnabledFor(logging.WARNING):
        return None

    warned: set[str] = set()

    def _observer(event: ProjectionEvent) -> None:
        schema = event.payload.get("schema")
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Projection event %s: %s", event.type, dict(event.payload))
        if event.type == ROLES_RESOLVED:
            logger.info(
                "Resolved field roles for schema=%s rowkey=%s data=%s",
                schema,
                event.payload.get("rowkey"),
                event.payload.get("data"),
            )
        elif event.type == SCHEMA_CHANGED:
            logger.info(
                "Schema changed: previous=%s current=%s; field roles re-resolved",
                event.payload.get("previous"),
                schema,
            )
        elif event.type == ROWKEY_DEFAULTED:
            # Warn once per schema.
            if isinstance(schema, str) and schema not in warned:
                warned.add(schema)
                logger.warning(
                    "Row key field %r not in schema=%s; using first field %r",
                    event.payload.get("configured"),
                    schema,
                    event.payload.get("fallback"),
                )

    return _observer


def default_observer_registry() -> ObserverRegistry:
    registry = ObserverRegistry()
    registry.register("project", _projection_observer_factory)
    return registry
