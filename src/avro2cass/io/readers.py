from __future__ import annotations

import base64
import binascii
import codecs
import json
from pathlib import Path
from typing import IO, Any, Iterable, Iterator

from avro2cass.domain.record import Record
from avro2cass.domain.schema import RecordSchema

CHUNK_SIZE = 64 * 1024


def _iter_text_lines(chunks: Iterable[bytes], encoding: str) -> Iterator[str]:
    decoder = codecs.getincrementaldecoder(encoding)()
    buffer = ""
    for chunk in chunks:
        buffer += decoder.decode(chunk)
        while True:
            idx = buffer.find("\n")
            if idx == -1:
                break
            line, buffer = buffer[:idx], buffer[idx + 1:]
            if line.endswith("\r"):
                line = line[:-1]
            yield line
    buffer += decoder.decode(b"", final=True)
    if buffer:
        if buffer.endswith("\r"):
            buffer = buffer[:-1]
        yield buffer


def iter_chunks(fh: IO[bytes], chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    while True:
        chunk = fh.read(chunk_size)
        if not chunk:
            return
        yield chunk


class JsonLinesRecordReader:
    """Decode JSON objects, one per line, into records of a fixed schema.

    Names absent from a line become None. Values of ``bytes``/``fixed`` fields
    are given as base64 text.
    """

    def __init__(self, schema: RecordSchema, *, encoding: str = "utf-8") -> None:
        self.schema = schema
        self.encoding = encoding
        self._binary = {f.name for f in schema if f.type in {"bytes", "fixed"}}

    def decode(self, chunks: Iterable[bytes]) -> Iterator[Record]:
        for lineno, line in enumerate(_iter_text_lines(chunks, self.encoding), start=1):
            s = line.strip()
            if not s:
                continue
            try:
                data = json.loads(s)
            except json.JSONDecodeError as exc:
                raise ValueError(f"line {lineno}: invalid JSON: {exc}") from exc
            if not isinstance(data, dict):
                raise ValueError(
                    f"line {lineno}: expected a JSON object, got {type(data).__name__}")
            yield Record.from_mapping(self.schema, self._convert(data, lineno))

    def read(self, fh: IO[bytes]) -> Iterator[Record]:
        return self.decode(iter_chunks(fh))

    def read_path(self, path: Path) -> Iterator[Record]:
        with path.open("rb") as fh:
            yield from self.read(fh)

    def count(self, chunks: Iterable[bytes]) -> int:
        return sum(1 for s in _iter_text_lines(chunks, self.encoding) if s.strip())

    def count_path(self, path: Path) -> int:
        with path.open("rb") as fh:
            return self.count(iter_chunks(fh))

    def _convert(self, data: dict[str, Any], lineno: int) -> dict[str, Any]:
        for name in self._binary:
            value = data.get(name)
            if isinstance(value, str):
                try:
                    data[name] = base64.b64decode(value, validate=True)
                except binascii.Error as exc:
                    raise ValueError(
                        f"line {lineno}: field {name!r} is not valid base64") from exc
        return data
