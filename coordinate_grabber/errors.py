"""Exceptions that are allowed to abort a run."""


class CoordinateGrabberError(Exception):
    """Base class for fatal errors."""


class ConfigurationError(CoordinateGrabberError):
    """Raised when required settings are missing or invalid."""


class InputFileError(CoordinateGrabberError):
    """Raised when the address file cannot be decoded or split into lines."""


class MalformedLineError(InputFileError):
    """Raised when an input line does not split into address, city and state."""

    def __init__(self, line_number: int, field_count: int, delimiter: str = "\t") -> None:
        self.line_number = line_number
        self.field_count = field_count
        super().__init__(
            f"Line {line_number}: expected 3 fields separated by {delimiter!r}, found {field_count}"
        )
