from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProjectionConfig(BaseModel):
    """Field-role names used to turn records into write units.

    ``rowkey`` names the partition key field. When no field carries that name
    the first declared field is used as the row key, unless ``strict_rowkey``
    is set, in which case resolution fails with ``RowKeyNotFoundError``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rowkey: str
    timestamp: Optional[str] = Field(default=None)
    ttl: Optional[str] = Field(default=None)
    ignore: frozenset[str] = Field(default_factory=frozenset)
    strict_rowkey: bool = False
    log_level: Optional[str] = Field(
        default=None, description="DEBUG | INFO | WARNING | ERROR | CRITICAL"
    )

    @field_validator("rowkey", mode="before")
    @classmethod
    def _normalize_rowkey(cls, value: object):
        if isinstance(value, str):
            value = value.strip()
        if not value:
            raise ValueError("rowkey must be a non-empty field name")
        return value

    @field_validator("timestamp", "ttl", "log_level", mode="before")
    @classmethod
    def _normalize_optional(cls, value: object):
        if value is None:
            return None
        if isinstance(value, str):
            text = value.strip()
            return text if text else None
        return value

    @field_validator("ignore", mode="before")
    @classmethod
    def _normalize_ignore(cls, value: object):
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        names = [str(v).strip() for v in value]
        return frozenset(n for n in names if n)


def _read_projection_document(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise FileNotFoundError(f"Projection config not found: {path}") from e
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Projection config {path} is not valid YAML: {e}") from e
    # An empty file still fails validation on the missing rowkey.
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise TypeError(
            f"Projection config {path} must map role names to fields, "
            f"got a {type(doc).__name__}"
        )
    return doc


def load_projection_config(path: Path, **overrides: Any) -> ProjectionConfig:
    """Load a ProjectionConfig from YAML, letting non-None overrides win."""
    data = _read_projection_document(path)
    data.update({k: v for k, v in overrides.items() if v is not None})
    return ProjectionConfig.model_validate(data)
