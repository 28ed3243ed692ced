"""Output sink protocol: the writable character stream a reporter targets."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from contextlib import AbstractContextManager


class OutputSink(Protocol):
    """Line-oriented writer with an atomic batch scope.

    Attributes:
        columns: Terminal width, None when unknown.
        is_tty: Whether the sink is an interactive terminal.
    """

    columns: int | None
    is_tty: bool

    def write_line(self, text: str = "") -> None:
        """Write text followed by a newline."""
        ...

    def write(self, chunk: str | bytes) -> None:
        """Write chunk unmodified."""
        ...

    def batch(self) -> AbstractContextManager[None]:
        """Group writes into a single uninterruptible flush."""
        ...
