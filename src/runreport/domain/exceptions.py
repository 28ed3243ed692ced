"""Domain exceptions: all public errors of runreport.

All exceptions visible to users are defined in the domain layer.
Infrastructure/Application use these, not define their own public exceptions.

The reporter itself never raises while rendering: errors it receives from
the test process are data, not exceptions. These types cover the adapters
around it (payload conversion, output sink).
"""


class RunReportError(Exception):
    """Base for all runreport error exceptions.

    Allows: except RunReportError to catch all library errors.
    """


class ConversionError(RunReportError, TypeError):
    """Raw event payload has a missing field or an unexpected type.

    Inherits TypeError for semantic correctness (expected type X, got Y).
    Inherits RunReportError for unified exception handling.

    Attributes:
        field: Name of the offending payload field.
        expected: Description of expected type(s).
        got: Actual type received (NoneType when the field is missing).
    """

    def __init__(self, *, field: str, expected: str, got: type) -> None:
        """Initialize with field name, expected type description and actual type."""
        self.field = field
        self.expected = expected
        self.got = got
        super().__init__(f"{field}: {expected}, got {got.__name__}")


class StreamClosedError(RunReportError, RuntimeError):
    """Write attempted after the line writer was closed.

    Inherits RuntimeError for semantic correctness (invalid state).
    """

    def __init__(self) -> None:
        """Initialize with fixed message."""
        super().__init__("Cannot write to a closed line writer")
