"""LineWriter: line-oriented adapter over a text stream.

Writes issued inside batch() are buffered and handed to the underlying
stream as a single write() when the outermost batch exits, under an
exclusive lock. Any other writer going through the same LineWriter waits
for the batch to finish, so raw worker output and formatted lines never
interleave mid-line.

The LineWriter does not own the stream: close() stops accepting writes but
leaves the stream open.
"""

from __future__ import annotations

import codecs
import shutil
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, TextIO

from runreport.domain.exceptions import StreamClosedError

if TYPE_CHECKING:
    from collections.abc import Iterator


class LineWriter:
    """Line writer satisfying OutputSink.

    Attributes:
        columns: Terminal width used to bound code excerpts and rules.
        is_tty: Whether the stream is an interactive terminal.
    """

    def __init__(
        self,
        stream: TextIO,
        *,
        columns: int | None = None,
        is_tty: bool | None = None,
    ) -> None:
        """Initialize writer.

        Args:
            stream: Target text stream.
            columns: Width override. Default: stream.columns if present,
                else the terminal size when the stream is a TTY, else None.
            is_tty: TTY override. Default: stream.isatty().
        """
        if columns is not None and columns < 1:
            raise ValueError(f"columns must be >= 1, got {columns}")

        self._stream = stream
        self.is_tty = is_tty if is_tty is not None else _detect_tty(stream)
        self.columns = columns if columns is not None else _detect_columns(stream, self.is_tty)

        self._lock = threading.RLock()
        self._depth = 0
        self._buffer: list[str] = []
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether close() was called."""
        return self._closed

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Hold the writer exclusively and flush all writes at once on exit.

        Nested batches flush once, at the outermost exit. The buffer is
        flushed and the lock released on every exit path.
        """
        with self._lock:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
                if self._depth == 0:
                    self._flush()

    def write_line(self, text: str = "") -> None:
        """Write text followed by a newline."""
        self._emit(text + "\n")

    def write(self, chunk: str | bytes) -> None:
        """Write chunk unmodified. Bytes are decoded as UTF-8.

        Multi-byte characters split across consecutive byte chunks are
        reassembled.
        """
        with self._lock:
            if isinstance(chunk, bytes):
                chunk = self._decoder.decode(chunk)
            self._emit(chunk)

    def close(self) -> None:
        """Flush pending output and reject further writes."""
        with self._lock:
            tail = self._decoder.decode(b"", final=True)
            if tail:
                self._buffer.append(tail)
            self._flush()
            self._closed = True

    def _emit(self, text: str) -> None:
        with self._lock:
            if self._closed:
                raise StreamClosedError
            self._buffer.append(text)
            if self._depth == 0:
                self._flush()

    def _flush(self) -> None:
        if not self._buffer:
            return
        data = "".join(self._buffer)
        self._buffer.clear()
        if data:
            self._stream.write(data)
            self._stream.flush()


def _detect_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty()) if callable(isatty) else False


def _detect_columns(stream: TextIO, is_tty: bool) -> int | None:
    columns = getattr(stream, "columns", None)
    if isinstance(columns, int) and columns > 0:
        return columns
    if is_tty:
        return shutil.get_terminal_size().columns
    return None
