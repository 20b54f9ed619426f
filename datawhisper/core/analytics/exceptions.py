"""Domain exceptions for the profiling pipeline.

Only the tabular parser raises. Classification, statistics and chart
selection exclude bad values instead of failing.

Usage:
    from datawhisper.core.analytics.exceptions import ParseError

    try:
        output = profile(file_name, content)
    except ParseError as e:
        show_error(e.to_dict())
"""

from typing import Any, Dict, Optional


class DataWhisperError(Exception):
    """Base exception for all DataWhisper errors.

    Attributes:
        message: Human-readable error message
        details: Additional error details (optional)
    """

    default_message: str = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for a JSON response."""
        result = {
            "success": False,
            "error": self.message
        }
        if self.details:
            result["details"] = self.details
        return result


class ParseError(DataWhisperError):
    """Raised when an uploaded file cannot be turned into ParsedData.

    Terminal for the upload attempt; no partial result exists.
    """

    default_message = "Could not parse file"


class UnsupportedFormatError(ParseError):
    """Raised when the file extension is neither .csv nor .json.

    Examples:
        raise UnsupportedFormatError(".txt", file_name="data.txt")
    """

    default_message = "Unsupported file format"

    def __init__(
        self,
        extension: str = "",
        file_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.extension = extension
        shown = extension or "(none)"
        message = f"Unsupported file extension: {shown}. Supported: .csv, .json"
        merged = {"extension": extension}
        if file_name:
            merged["file_name"] = file_name
        merged.update(details or {})
        super().__init__(message, merged)


class EmptyDataError(ParseError):
    """Raised when parsing yields zero usable rows."""

    default_message = "File contains no data"


class MalformedInputError(ParseError):
    """Raised when the content cannot be decoded or has invalid syntax.

    The underlying exception is kept as ``cause`` and chained with
    ``raise ... from``.
    """

    default_message = "Malformed input"

    def __init__(
        self,
        message: Optional[str] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.cause = cause
        merged = dict(details or {})
        if cause is not None:
            merged.setdefault("cause", f"{type(cause).__name__}: {cause}")
        super().__init__(message, merged)


class NoTabularStructureError(ParseError):
    """Raised when JSON holds no array of records to tabulate."""

    default_message = "Could not extract tabular data from JSON"
