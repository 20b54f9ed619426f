"""Tabular parser for uploaded CSV and JSON files.

Turns raw file content into ParsedData: an ordered column list plus rows
keyed by column name. The file-name extension selects the format; content
is never sniffed.
"""

import io
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from datawhisper.setting import ParserSettings, get_settings

from .exceptions import (
    EmptyDataError,
    MalformedInputError,
    NoTabularStructureError,
    UnsupportedFormatError,
)
from .types import FileType, ParsedData, is_missing

Content = Union[bytes, str]


class TabularParser:
    """Parser for CSV and JSON uploads.

    CSV values are kept as the raw text found in the file; JSON values keep
    their decoded JSON types. All failures raise a ParseError subclass and
    no partial result is returned.

    Attributes:
        logger: Logger instance for operation tracking.
    """

    SUPPORTED_EXTENSIONS: Dict[str, FileType] = {
        ".csv": "csv",
        ".json": "json",
    }

    def __init__(self, settings: Optional[ParserSettings] = None) -> None:
        """Initialize the parser.

        Args:
            settings: Parser settings. Defaults to the loaded configuration.
        """
        self._settings = settings or get_settings().parser
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def logger(self) -> logging.Logger:
        """Access to the parser logger."""
        return self._logger

    def detect_format(self, file_name: str) -> FileType:
        """Return the format tag for ``file_name`` from its extension.

        Raises:
            UnsupportedFormatError: If the extension is not .csv or .json.
        """
        extension = Path(file_name or "").suffix.lower()
        file_type = self.SUPPORTED_EXTENSIONS.get(extension)
        if file_type is None:
            raise UnsupportedFormatError(extension, file_name=file_name)
        return file_type

    def parse(self, file_name: str, content: Content) -> ParsedData:
        """Parse an uploaded file into ParsedData.

        Args:
            file_name: Original file name, used for format detection and display.
            content: Raw file content as bytes or already-decoded text.

        Returns:
            ParsedData with row_count equal to the number of usable rows.

        Raises:
            UnsupportedFormatError: If the extension is not supported.
            EmptyDataError: If no usable rows remain.
            MalformedInputError: If the content cannot be decoded or parsed.
            NoTabularStructureError: If JSON holds no array of records.
        """
        file_type = self.detect_format(file_name)
        self._log_operation("parse", file_name=file_name, format=file_type)

        try:
            if file_type == "csv":
                parsed = self.parse_csv(file_name, content)
            else:
                parsed = self.parse_json(file_name, content)
        except Exception as e:
            self._log_error("parse", f"{type(e).__name__}: {e}")
            raise

        self.logger.info(
            f"Successfully parsed {file_name}: {parsed.row_count} rows, "
            f"{len(parsed.columns)} columns"
        )
        return parsed

    def parse_csv(self, file_name: str, content: Content) -> ParsedData:
        """Parse CSV content whose first record is the header row.

        Rows where every value is empty are dropped.
        """
        text = self._decode(content, self._settings.encodings)

        try:
            df = pd.read_csv(
                io.StringIO(text),
                sep=self._settings.delimiter,
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                index_col=False,
            )
        except pd.errors.EmptyDataError:
            raise EmptyDataError("File contains no data", details={"file_name": file_name})
        except (pd.errors.ParserError, ValueError) as e:
            raise MalformedInputError(f"Invalid CSV content: {e}", cause=e) from e

        if df.empty:
            raise EmptyDataError("File contains no data", details={"file_name": file_name})

        header = [self._cell_text(value) for value in df.iloc[0].tolist()]
        columns, warnings = self._normalize_column_names(header)

        rows: List[Dict[str, Any]] = []
        dropped = 0
        for record in df.iloc[1:].itertuples(index=False, name=None):
            # Padding for short records arrives as NaN or empty text
            row = {
                column: (value if isinstance(value, str) else None)
                for column, value in zip(columns, record)
            }
            if all(is_missing(value) for value in row.values()):
                dropped += 1
                continue
            rows.append(row)

        if dropped:
            warnings.append(f"Dropped {dropped} empty row(s)")

        if not rows:
            raise EmptyDataError(
                "File contains no data rows", details={"file_name": file_name}
            )

        return ParsedData.create(
            columns=columns,
            rows=rows,
            file_name=file_name,
            file_type="csv",
            file_size=self._content_size(content),
            parsing_warnings=warnings,
        )

    def parse_json(self, file_name: str, content: Content) -> ParsedData:
        """Parse JSON content holding an array of records.

        Accepts a top-level array of objects, or an object with at least one
        property holding a non-empty array of objects (the first such
        property in key order is used).
        """
        text = self._decode(content, ["utf-8-sig"])

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"Invalid JSON: {e.msg}", cause=e) from e
        except (ValueError, RecursionError) as e:
            # Integer digit limit or nesting too deep for the decoder
            raise MalformedInputError(f"Invalid JSON: {e}", cause=e) from e

        warnings: List[str] = []
        if isinstance(data, list):
            if not data:
                raise EmptyDataError("JSON array is empty", details={"file_name": file_name})
            if not self._is_record_array(data):
                raise NoTabularStructureError(
                    "JSON array must contain only objects", details={"file_name": file_name}
                )
            records = data
        elif isinstance(data, dict):
            key, records = self._find_record_array(data)
            if records is None:
                raise NoTabularStructureError(details={"file_name": file_name})
            warnings.append(f"Using records from property '{key}'")
        else:
            raise NoTabularStructureError(
                "Invalid JSON format", details={"file_name": file_name}
            )

        return ParsedData.create(
            columns=list(records[0].keys()),
            rows=records,
            file_name=file_name,
            file_type="json",
            file_size=self._content_size(content),
            parsing_warnings=warnings,
        )

    @staticmethod
    def _is_record_array(value: Any) -> bool:
        return (
            isinstance(value, list)
            and len(value) > 0
            and all(isinstance(item, dict) for item in value)
        )

    def _find_record_array(
        self,
        data: Dict[str, Any]
    ) -> Tuple[Optional[str], Optional[List[Dict[str, Any]]]]:
        for key, value in data.items():
            if self._is_record_array(value):
                return key, value
        return None, None

    def _decode(self, content: Content, encodings: Sequence[str]) -> str:
        """Decode bytes with the first encoding that succeeds.

        Raises:
            MalformedInputError: If no encoding can decode the content.
        """
        if isinstance(content, str):
            return content

        last_error: Optional[UnicodeDecodeError] = None
        for encoding in encodings:
            try:
                return content.decode(encoding)
            except UnicodeDecodeError as e:
                last_error = e
                continue
            except LookupError:
                self.logger.warning(f"Skipping unknown encoding: {encoding}")
                continue

        raise MalformedInputError(
            f"Could not decode file with any supported encoding: {list(encodings)}",
            cause=last_error,
        ) from last_error

    def _normalize_column_names(self, header: List[str]) -> Tuple[List[str], List[str]]:
        """Make header names non-empty and unique.

        Returns:
            Tuple of (column names, list of warnings).
        """
        warnings: List[str] = []
        new_columns: List[str] = []
        taken = set()

        for index, raw in enumerate(header):
            name = raw.strip().replace('\n', ' ').replace('\r', ' ')

            if not name:
                name = f"column_{index}"
                warnings.append(f"Renamed empty column header to '{name}'")

            if name in taken:
                suffix = 1
                while f"{name}_{suffix}" in taken:
                    suffix += 1
                new_name = f"{name}_{suffix}"
                warnings.append(f"Renamed duplicate column '{name}' to '{new_name}'")
                name = new_name

            taken.add(name)
            new_columns.append(name)

        return new_columns, warnings

    @staticmethod
    def _cell_text(value: Any) -> str:
        return "" if is_missing(value) else str(value)

    @staticmethod
    def _content_size(content: Content) -> int:
        if isinstance(content, str):
            return len(content.encode("utf-8"))
        return len(content)

    def _log_operation(self, operation: str, **kwargs: Any) -> None:
        """Log a parser operation with context."""
        context = ", ".join(f"{k}={v}" for k, v in kwargs.items())
        self._logger.info(f"{operation}: {context}")

    def _log_error(self, operation: str, error: str) -> None:
        """Log an error with context."""
        self._logger.error(f"{operation} failed: {error}")
