"""Named output styles rendered to ANSI strings with rich.

Reporters write pre-rendered strings to a line writer rather than printing
through a rich Console, so raw worker output can be interleaved byte for
byte. Styles therefore come from a rich Theme and are rendered with
Style.render().
"""

from __future__ import annotations

from rich.color import ColorSystem
from rich.console import COLOR_SYSTEMS
from rich.theme import Theme

DEFAULT_THEME = Theme(
    {
        "log": "bright_black",
        "title": "bold",
        "error": "red",
        "skip": "yellow",
        "todo": "blue",
        "pass": "green",
        "duration": "dim bright_black",
        "error_source": "bright_black",
        "error_stack": "bright_black",
        "stack": "red",
        "information": "magenta",
        "dim": "dim bright_black",
        "excerpt_focus": "on red",
        "path": "yellow",
        "code": "cyan",
    },
    inherit=False,
)


class Colors:
    """Style renderer.

    color_system=None disables styling: every method returns text unchanged.
    """

    def __init__(self, theme: Theme | None = None, color_system: str | None = "standard") -> None:
        """Initialize renderer.

        Args:
            theme: Style names to rich styles. Default: DEFAULT_THEME.
            color_system: "standard", "256", "truecolor", "windows" or None.

        Raises:
            ValueError: Unknown color system.
        """
        if color_system is not None and color_system not in COLOR_SYSTEMS:
            raise ValueError(f"unknown color_system {color_system!r}, expected one of {sorted(COLOR_SYSTEMS)}")

        self._styles = dict((theme or DEFAULT_THEME).styles)
        self._color_system: ColorSystem | None = COLOR_SYSTEMS[color_system] if color_system else None

    @property
    def enabled(self) -> bool:
        """Whether styles produce escape codes."""
        return self._color_system is not None

    def style(self, name: str, text: str) -> str:
        """Render text with the named style.

        Raises:
            KeyError: Unknown style name.
        """
        style = self._styles[name]
        if self._color_system is None or not text:
            return text
        return style.render(text, color_system=self._color_system)

    def log(self, text: str) -> str:
        return self.style("log", text)

    def title(self, text: str) -> str:
        return self.style("title", text)

    def error(self, text: str) -> str:
        return self.style("error", text)

    def skip(self, text: str) -> str:
        return self.style("skip", text)

    def todo(self, text: str) -> str:
        return self.style("todo", text)

    def pass_(self, text: str) -> str:
        return self.style("pass", text)

    def duration(self, text: str) -> str:
        return self.style("duration", text)

    def error_source(self, text: str) -> str:
        return self.style("error_source", text)

    def error_stack(self, text: str) -> str:
        return self.style("error_stack", text)

    def stack(self, text: str) -> str:
        return self.style("stack", text)

    def information(self, text: str) -> str:
        return self.style("information", text)

    def dim(self, text: str) -> str:
        return self.style("dim", text)
