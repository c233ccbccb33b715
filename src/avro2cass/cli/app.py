import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from avro2cass.config.projection import ProjectionConfig, load_projection_config
from avro2cass.domain.schema import read_schema
from avro2cass.errors import Avro2CassError
from avro2cass.io.readers import JsonLinesRecordReader
from avro2cass.io.writers import OUTPUT_FORMATS, writer_factory
from avro2cass.pipeline.observability import default_observer_registry
from avro2cass.projection.projector import RecordProjector
from avro2cass.transforms.project import ProjectRecordsTransform

logger = logging.getLogger("avro2cass.cli")


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="set logging level (default: config log_level, else WARNING)",
    )

    parser = argparse.ArgumentParser(
        prog="avro2cass",
        description="Project flat Avro-style records into Cassandra write units.",
        parents=[common],
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_project = sub.add_parser(
        "project",
        help="turn JSON-lines records into write units",
        parents=[common],
    )
    p_project.add_argument("--config", "-c", required=True, help="path to projection YAML")
    p_project.add_argument("--schema", "-s", required=True, help="path to .avsc record schema")
    p_project.add_argument("--input", "-i", default=None, help="JSON-lines records (default: stdin)")
    p_project.add_argument("--output", "-o", default=None, help="destination file (default: stdout)")
    p_project.add_argument(
        "--format", "-f", choices=OUTPUT_FORMATS, default="jsonl",
        help="output format",
    )
    p_project.add_argument(
        "--limit", "-n", type=int, default=None,
        help="optional cap on the number of records to project",
    )
    p_project.add_argument(
        "--strict-rowkey", action="store_true", default=None,
        help="fail when no field matches the configured row key",
    )
    p_project.add_argument(
        "--visuals", choices=["auto", "rich", "off"], default="auto",
        help="stdout rendering and progress bars",
    )
    return parser


def _log_level(*names: Optional[str]) -> int:
    """First name that logging recognises wins; WARNING otherwise."""
    for name in names:
        if not name:
            continue
        level = logging.getLevelName(name.strip().upper())
        if isinstance(level, int):
            return level
    return logging.WARNING


def _load_config(path: str, strict_rowkey: Optional[bool]) -> ProjectionConfig:
    return load_projection_config(Path(path), strict_rowkey=strict_rowkey)


def handle_project(args: argparse.Namespace, config: ProjectionConfig) -> int:
    schema = read_schema(Path(args.schema))
    projector = RecordProjector(config)
    default_observer_registry().attach(
        projector, "project", logging.getLogger("avro2cass.projection")
    )
    reader = JsonLinesRecordReader(schema)
    transform = ProjectRecordsTransform(projector, limit=args.limit)
    destination = Path(args.output) if args.output else None
    show_progress = destination is not None and args.visuals != "off"

    total = None
    if args.input:
        records = reader.read_path(Path(args.input))
        if show_progress:
            total = reader.count_path(Path(args.input))
            if args.limit is not None:
                total = min(total, args.limit)
    else:
        records = reader.read(sys.stdin.buffer)

    with writer_factory(args.format, destination, visuals=args.visuals) as writer:
        units = transform(records)
        if show_progress:
            with logging_redirect_tqdm():
                progress = tqdm(units, total=total, desc="project", unit="rec", leave=False)
                for unit in progress:
                    writer.write(unit)
        else:
            for unit in units:
                writer.write(unit)

    logger.info(
        "Projected %d records (%d columns) with schema %s",
        transform.count,
        transform.columns,
        schema.name,
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args.config, args.strict_rowkey)
    except (FileNotFoundError, TypeError, ValueError) as exc:
        logging.basicConfig(level=logging.WARNING, format="%(message)s")
        logger.error("Invalid projection config: %s", exc)
        return 2

    logging.basicConfig(
        level=_log_level(args.log_level, config.log_level), format="%(message)s"
    )

    if args.cmd == "project":
        try:
            return handle_project(args, config)
        except (Avro2CassError, FileNotFoundError, ValueError) as exc:
            logger.error("%s", exc)
            return 1
    parser.error(f"unknown command {args.cmd!r}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
