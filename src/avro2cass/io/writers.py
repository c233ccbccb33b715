from pathlib import Path
from typing import Optional

from avro2cass.domain.write import WriteUnit
from avro2cass.io.formatters import JsonLineFormatter, PrintLineFormatter
from avro2cass.io.sinks import AtomicTextFileSink, RichStdoutSink, StdoutTextSink

OUTPUT_FORMATS = ("jsonl", "print")


class LineWriter:
    """Text line writer (uses a text sink + string formatter)."""

    def __init__(self, sink, formatter):
        self.sink = sink
        self.fmt = formatter

    def write(self, item: WriteUnit) -> None:
        self.sink.write_text(self.fmt(item))

    def close(self) -> None:
        self.sink.close()

    def __enter__(self) -> "LineWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None and isinstance(self.sink, AtomicTextFileSink):
            self.sink.discard()
            return
        self.close()


def writer_factory(
    format_: str,
    destination: Optional[Path] = None,
    *,
    visuals: Optional[str] = None,
) -> LineWriter:
    fmt = (format_ or "jsonl").lower()
    if fmt in {"jsonl", "json-lines", "json"}:
        formatter = JsonLineFormatter()
    elif fmt == "print":
        formatter = PrintLineFormatter()
    else:
        raise ValueError(f"Unsupported output format '{format_}'")

    if destination is None:
        if (visuals or "").lower() == "rich":
            return LineWriter(RichStdoutSink(), formatter)
        return LineWriter(StdoutTextSink(), formatter)
    destination.parent.mkdir(parents=True, exist_ok=True)
    return LineWriter(AtomicTextFileSink(destination), formatter)
