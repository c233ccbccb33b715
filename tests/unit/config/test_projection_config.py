import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from avro2cass.config.projection import ProjectionConfig, load_projection_config


def _write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "projection.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def test_load_projection_config(tmp_path):
    path = _write_config(
        tmp_path,
        """
        rowkey: user_id
        timestamp: written_at
        ttl: expires_in
        ignore:
          - password
          - ssn
        """,
    )

    cfg = load_projection_config(path)

    assert cfg.rowkey == "user_id"
    assert cfg.timestamp == "written_at"
    assert cfg.ttl == "expires_in"
    assert cfg.ignore == frozenset({"password", "ssn"})
    assert cfg.strict_rowkey is False


def test_overrides_win_over_file(tmp_path):
    path = _write_config(tmp_path, "rowkey: id\n")

    cfg = load_projection_config(path, strict_rowkey=True, ttl=None)

    assert cfg.strict_rowkey is True
    assert cfg.ttl is None


def test_blank_optional_names_become_none():
    cfg = ProjectionConfig.model_validate(
        {"rowkey": " id ", "timestamp": "", "ttl": "  ", "ignore": "secret"}
    )
    assert cfg.rowkey == "id"
    assert cfg.timestamp is None
    assert cfg.ttl is None
    assert cfg.ignore == frozenset({"secret"})


def test_rowkey_is_required():
    with pytest.raises(ValidationError):
        ProjectionConfig.model_validate({"rowkey": "  "})
    with pytest.raises(ValidationError):
        ProjectionConfig.model_validate({"timestamp": "ts"})


def test_unknown_keys_are_rejected():
    with pytest.raises(ValidationError):
        ProjectionConfig.model_validate({"rowkey": "id", "row_key": "id"})


def test_config_is_immutable():
    cfg = ProjectionConfig(rowkey="id")
    with pytest.raises(ValidationError):
        cfg.rowkey = "other"


def test_missing_file_and_non_mapping(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_projection_config(tmp_path / "absent.yaml")
    path = _write_config(tmp_path, "- rowkey\n")
    with pytest.raises(TypeError):
        load_projection_config(path)


def test_invalid_yaml_is_a_value_error(tmp_path):
    path = _write_config(tmp_path, "rowkey: [id\n")
    with pytest.raises(ValueError, match="not valid YAML"):
        load_projection_config(path)


def test_empty_file_fails_on_missing_rowkey(tmp_path):
    path = _write_config(tmp_path, "")
    with pytest.raises(ValidationError):
        load_projection_config(path)
