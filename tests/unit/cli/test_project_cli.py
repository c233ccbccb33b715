import io
import json
import logging
import textwrap
from pathlib import Path
from types import SimpleNamespace

from avro2cass.cli.app import _log_level, main

SCHEMA = {
    "type": "record",
    "name": "Event",
    "fields": [
        {"name": "id", "type": "string"},
        {"name": "ts", "type": ["null", "long"]},
        {"name": "ttl", "type": ["null", "int"]},
        {"name": "payload", "type": "string"},
        {"name": "secret", "type": "string"},
    ],
}


def _workspace(tmp_path: Path, config: str = "") -> dict[str, Path]:
    cfg = tmp_path / "projection.yaml"
    cfg.write_text(
        textwrap.dedent(
            config
            or """
            rowkey: id
            timestamp: ts
            ttl: ttl
            ignore: [secret]
            """
        ),
        encoding="utf-8",
    )
    schema = tmp_path / "event.avsc"
    schema.write_text(json.dumps(SCHEMA), encoding="utf-8")
    records = tmp_path / "events.jsonl"
    records.write_text(
        '{"id": "a", "ts": 1000, "ttl": 30, "payload": "x", "secret": "s"}\n'
        '{"id": "b", "ts": 2000, "ttl": null, "payload": "y", "secret": "s"}\n',
        encoding="utf-8",
    )
    return {"config": cfg, "schema": schema, "input": records}


def test_project_writes_jsonl_file(tmp_path):
    paths = _workspace(tmp_path)
    out = tmp_path / "out.jsonl"

    code = main([
        "project",
        "--config", str(paths["config"]),
        "--schema", str(paths["schema"]),
        "--input", str(paths["input"]),
        "--output", str(out),
        "--visuals", "off",
    ])

    assert code == 0
    rows = [json.loads(line) for line in out.read_text(encoding="utf-8").splitlines()]
    assert rows == [
        {
            "row_key": b"a".hex(),
            "mutations": [{"name": "payload", "value": b"x".hex(), "timestamp": 1000, "ttl": 30}],
        },
        {
            "row_key": b"b".hex(),
            "mutations": [{"name": "payload", "value": b"y".hex(), "timestamp": 2000, "ttl": 0}],
        },
    ]


def test_project_reads_stdin_and_prints(tmp_path, monkeypatch, capsys):
    paths = _workspace(tmp_path)
    data = paths["input"].read_bytes()
    monkeypatch.setattr("sys.stdin", SimpleNamespace(buffer=io.BytesIO(data)))

    code = main([
        "project",
        "-c", str(paths["config"]),
        "-s", str(paths["schema"]),
        "--format", "print",
        "--limit", "1",
    ])

    assert code == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [f"{b'a'.hex()}: payload={b'x'.hex()}@1000 ttl=30"]


def test_strict_rowkey_flag_fails_run(tmp_path):
    paths = _workspace(tmp_path, "rowkey: user\n")

    code = main([
        "project",
        "-c", str(paths["config"]),
        "-s", str(paths["schema"]),
        "-i", str(paths["input"]),
        "-o", str(tmp_path / "out.jsonl"),
        "--strict-rowkey",
    ])

    assert code == 1
    assert not (tmp_path / "out.jsonl").exists()


def test_invalid_config_returns_2(tmp_path):
    paths = _workspace(tmp_path, "timestamp: ts\n")

    code = main([
        "project",
        "-c", str(paths["config"]),
        "-s", str(paths["schema"]),
        "-i", str(paths["input"]),
    ])

    assert code == 2


def test_log_level_prefers_flag_then_config():
    assert _log_level("DEBUG", "info") == logging.DEBUG
    assert _log_level(None, " info ") == logging.INFO
    assert _log_level(None, "chatty") == logging.WARNING
    assert _log_level(None, None) == logging.WARNING


def test_progress_total_counts_input_lines(tmp_path, monkeypatch):
    paths = _workspace(tmp_path)
    seen: list[dict] = []

    def fake_tqdm(iterable, **kwargs):
        seen.append(kwargs)
        return iterable

    monkeypatch.setattr("avro2cass.cli.app.tqdm", fake_tqdm)

    code = main([
        "project",
        "-c", str(paths["config"]),
        "-s", str(paths["schema"]),
        "-i", str(paths["input"]),
        "-o", str(tmp_path / "out.jsonl"),
    ])
    assert code == 0
    assert seen[-1]["total"] == 2

    main([
        "project",
        "-c", str(paths["config"]),
        "-s", str(paths["schema"]),
        "-i", str(paths["input"]),
        "-o", str(tmp_path / "one.jsonl"),
        "--limit", "1",
    ])
    assert seen[-1]["total"] == 1


def test_defaulted_rowkey_warns_once(tmp_path, caplog):
    paths = _workspace(tmp_path, "rowkey: user\n")
    caplog.set_level(logging.WARNING, logger="avro2cass.projection")

    code = main([
        "project",
        "-c", str(paths["config"]),
        "-s", str(paths["schema"]),
        "-i", str(paths["input"]),
        "-o", str(tmp_path / "out.jsonl"),
        "--visuals", "off",
    ])

    assert code == 0
    warnings = [
        r for r in caplog.records
        if r.name == "avro2cass.projection" and r.levelno == logging.WARNING
    ]
    assert len(warnings) == 1
    assert "'user'" in warnings[0].getMessage()
    assert "'id'" in warnings[0].getMessage()
