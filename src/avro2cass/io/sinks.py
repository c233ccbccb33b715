import os
import sys
import tempfile
from pathlib import Path


class StdoutTextSink:
    def __init__(self) -> None:
        self.stream = sys.stdout

    def write_text(self, s: str) -> None:
        self.stream.write(s)

    def flush(self) -> None:
        self.stream.flush()

    def close(self) -> None:
        self.flush()


class RichStdoutSink(StdoutTextSink):
    """Stdout sink that renders lines through a rich console."""

    def __init__(self) -> None:
        super().__init__()
        from rich.console import Console

        self._console = Console(file=self.stream, highlight=True, soft_wrap=True)

    def write_text(self, s: str) -> None:
        self._console.print(s.rstrip("\n"), markup=False)


class AtomicTextFileSink:
    """Write to a temp file beside ``dest`` and move it into place on close."""

    def __init__(self, dest: Path) -> None:
        self._dest = dest
        fd, tmp = tempfile.mkstemp(
            dir=str(dest.parent), prefix=f".{dest.name}.", suffix=".tmp")
        self._tmp = Path(tmp)
        self._fh = os.fdopen(fd, "w", encoding="utf-8")

    def write_text(self, s: str) -> None:
        self._fh.write(s)

    def close(self) -> None:
        self._fh.close()
        os.replace(self._tmp, self._dest)

    def discard(self) -> None:
        self._fh.close()
        self._tmp.unlink(missing_ok=True)
