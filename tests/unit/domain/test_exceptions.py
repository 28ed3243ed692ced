"""Tests for domain/exceptions.py."""

import pytest

from runreport.domain.exceptions import ConversionError, RunReportError, StreamClosedError


class TestRunReportError:
    """Tests for RunReportError base exception."""

    def test_is_exception(self) -> None:
        assert issubclass(RunReportError, Exception)

    def test_can_raise_and_catch(self) -> None:
        with pytest.raises(RunReportError, match="test message"):
            raise RunReportError("test message")

    def test_empty_message(self) -> None:
        assert str(RunReportError()) == ""


class TestConversionError:
    """Tests for ConversionError."""

    def test_attributes(self) -> None:
        error = ConversionError(field="title", expected="str", got=int)
        assert error.field == "title"
        assert error.expected == "str"
        assert error.got is int

    def test_message(self) -> None:
        error = ConversionError(field="title", expected="str", got=type(None))
        assert str(error) == "title: str, got NoneType"

    def test_hierarchy(self) -> None:
        error = ConversionError(field="x", expected="int", got=str)
        assert isinstance(error, RunReportError)
        assert isinstance(error, TypeError)


class TestStreamClosedError:
    """Tests for StreamClosedError."""

    def test_fixed_message(self) -> None:
        assert str(StreamClosedError()) == "Cannot write to a closed line writer"

    def test_hierarchy(self) -> None:
        assert issubclass(StreamClosedError, RunReportError)
        assert issubclass(StreamClosedError, RuntimeError)
