"""Glyphs used by reporters, with ASCII fallbacks for limited terminals."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Figures:
    """Glyph set.

    Attributes:
        tick: Passed test.
        cross: Failure of any kind.
        info: Log line marker.
        line: Horizontal rule segment.
        pointer: Title prefix separator.
    """

    tick: str
    cross: str
    info: str
    line: str
    pointer: str


UNICODE = Figures(tick="✔", cross="✖", info="ℹ", line="─", pointer="›")
ASCII = Figures(tick="√", cross="×", info="i", line="-", pointer=">")


def get_figures(*, unicode: bool = True) -> Figures:
    """Return the unicode glyph set, or the ASCII fallback."""
    return UNICODE if unicode else ASCII
