"""Tests for Colors and figures."""

import pytest
from rich.theme import Theme

from runreport.application.reporters.colors import DEFAULT_THEME, Colors
from runreport.application.reporters.figures import ASCII, UNICODE, get_figures


class TestColors:
    """Tests for Colors."""

    def test_disabled_returns_text_unchanged(self) -> None:
        """color_system=None is plain text."""
        colors = Colors(color_system=None)
        assert colors.enabled is False
        assert colors.error("boom") == "boom"
        assert colors.dim("x") == "x"

    def test_enabled_wraps_in_escape_codes(self) -> None:
        """Styled text is wrapped in SGR codes and reset."""
        colors = Colors(color_system="standard")
        rendered = colors.error("boom")
        assert colors.enabled is True
        assert rendered.startswith("\x1b[")
        assert "boom" in rendered
        assert rendered.endswith("\x1b[0m")

    def test_styles_differ(self) -> None:
        """Different names produce different output."""
        colors = Colors(color_system="standard")
        assert colors.skip("x") != colors.todo("x")
        assert colors.pass_("x") != colors.error("x")

    def test_empty_text_unstyled(self) -> None:
        """Empty strings never gain escape codes."""
        assert Colors(color_system="standard").error("") == ""

    def test_custom_theme(self) -> None:
        """A custom theme replaces the default styles."""
        theme = Theme({**{name: "none" for name in DEFAULT_THEME.styles}, "error": "blue"}, inherit=False)
        custom = Colors(theme=theme, color_system="standard")
        assert custom.error("x") == Colors(color_system="standard").todo("x")

    def test_unknown_color_system_raises(self) -> None:
        """Unknown color systems are rejected."""
        with pytest.raises(ValueError, match="color_system"):
            Colors(color_system="sepia")

    def test_unknown_style_raises(self) -> None:
        """Unknown style names are a KeyError."""
        with pytest.raises(KeyError):
            Colors(color_system=None).style("nope", "x")


class TestFigures:
    """Tests for glyph sets."""

    def test_unicode_default(self) -> None:
        assert get_figures() is UNICODE
        assert UNICODE.tick == "✔"
        assert UNICODE.cross == "✖"

    def test_ascii_fallback(self) -> None:
        figures = get_figures(unicode=False)
        assert figures is ASCII
        assert all(ord(ch) < 128 for ch in (figures.info, figures.line, figures.pointer))
