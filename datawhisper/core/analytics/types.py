"""
Type definitions for the profiling pipeline.

Defines the parsed dataset, column classification, per-column statistics,
the data summary and chart specifications. Every type is immutable and
exposes ``to_dict()`` returning the camelCase shape the presentation layer
consumes.
"""

import datetime
import math
import numbers
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Tuple

import numpy as np
import pandas as pd


# Type aliases
FileType = Literal["csv", "json"]
Row = Mapping[str, Any]


class CellKind(str, Enum):
    """Tagged kind of a single row value."""
    MISSING = "missing"      # None, "", NaN, NaT
    NUMBER = "number"        # int/float, never bool
    BOOLEAN = "boolean"
    DATE = "date"            # datetime.date / datetime.datetime / pd.Timestamp
    TEXT = "text"
    COMPOSITE = "composite"  # nested JSON list/dict


def cell_kind(value: Any) -> CellKind:
    """Classify a raw row value into exactly one CellKind."""
    if value is None or value is pd.NA or value is pd.NaT:
        return CellKind.MISSING
    if isinstance(value, str):
        return CellKind.MISSING if value == "" else CellKind.TEXT
    if isinstance(value, (bool, np.bool_)):
        return CellKind.BOOLEAN
    if isinstance(value, numbers.Number):
        if isinstance(value, (float, np.floating)) and math.isnan(value):
            return CellKind.MISSING
        return CellKind.NUMBER
    if isinstance(value, (datetime.date, np.datetime64)):
        return CellKind.DATE
    return CellKind.COMPOSITE


def is_missing(value: Any) -> bool:
    return cell_kind(value) is CellKind.MISSING


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime.date, pd.Timestamp)):
        return value.isoformat()
    if isinstance(value, np.generic):
        return value.item()
    return value


def _freeze_row(row: Mapping[str, Any]) -> Row:
    return MappingProxyType(dict(row))


@dataclass(frozen=True)
class ParsedData:
    """Immutable result of parsing one uploaded file.

    Attributes:
        columns: Column names in first-seen order, no duplicates
        rows: Read-only rows in source order
        file_name: Name of the uploaded file (display only)
        file_type: Source format tag
        row_count: Always equal to len(rows)
        file_size: Size of the raw content in bytes
        parsing_warnings: Non-fatal notes from parsing (dropped rows, renamed headers)
    """
    columns: Tuple[str, ...]
    rows: Tuple[Row, ...]
    file_name: str
    file_type: FileType
    row_count: int
    file_size: int = 0
    parsing_warnings: Tuple[str, ...] = ()

    def __post_init__(self):
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Duplicate column names: {list(self.columns)}")
        if self.row_count != len(self.rows):
            raise ValueError(
                f"row_count ({self.row_count}) does not match number of rows ({len(self.rows)})"
            )

    @classmethod
    def create(
        cls,
        columns: Iterable[str],
        rows: Iterable[Mapping[str, Any]],
        file_name: str,
        file_type: FileType,
        file_size: int = 0,
        parsing_warnings: Iterable[str] = (),
    ) -> "ParsedData":
        """Build ParsedData, copying rows into read-only mappings."""
        frozen_rows = tuple(_freeze_row(row) for row in rows)
        return cls(
            columns=tuple(columns),
            rows=frozen_rows,
            file_name=file_name,
            file_type=file_type,
            row_count=len(frozen_rows),
            file_size=file_size,
            parsing_warnings=tuple(parsing_warnings),
        )

    def sample(self, size: int) -> Tuple[Row, ...]:
        """First ``size`` rows (all rows if fewer)."""
        return self.rows[:max(size, 0)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": list(self.columns),
            "rows": [
                {key: _jsonable(value) for key, value in row.items()}
                for row in self.rows
            ],
            "fileName": self.file_name,
            "fileType": self.file_type,
            "rowCount": self.row_count,
            "fileSize": self.file_size,
            "parsingWarnings": list(self.parsing_warnings),
        }


class ColumnType(str, Enum):
    """Semantic type assigned to a column."""
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    DATE = "date"


@dataclass(frozen=True)
class ColumnClassification:
    """Partition of a dataset's columns into numeric, categorical and date.

    Each tuple keeps the dataset's column order.
    """
    numeric: Tuple[str, ...] = ()
    categorical: Tuple[str, ...] = ()
    date: Tuple[str, ...] = ()

    def __post_init__(self):
        seen = set()
        for name in self.numeric + self.categorical + self.date:
            if name in seen:
                raise ValueError(f"Column '{name}' classified more than once")
            seen.add(name)

    @property
    def columns(self) -> Tuple[str, ...]:
        return self.numeric + self.categorical + self.date

    def first_numeric(self) -> Optional[str]:
        return self.numeric[0] if self.numeric else None

    def second_numeric(self) -> Optional[str]:
        return self.numeric[1] if len(self.numeric) > 1 else None

    def first_categorical(self) -> Optional[str]:
        return self.categorical[0] if self.categorical else None

    def first_date(self) -> Optional[str]:
        return self.date[0] if self.date else None

    def type_of(self, column: str) -> Optional[ColumnType]:
        """Return the ColumnType of ``column``, or None if unknown."""
        if column in self.numeric:
            return ColumnType.NUMERIC
        if column in self.categorical:
            return ColumnType.CATEGORICAL
        if column in self.date:
            return ColumnType.DATE
        return None

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "numericColumns": list(self.numeric),
            "categoricalColumns": list(self.categorical),
            "dateColumns": list(self.date),
        }


@dataclass(frozen=True)
class ColumnStatistics:
    """Summary statistics for one column, computed over the sample.

    ``completeness`` is always set. Numeric columns add min/max/mean/median,
    categorical columns add unique_values/mode and date columns add
    earliest/latest. Fields that do not apply stay None.
    """
    completeness: float
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    median: Optional[float] = None
    unique_values: Optional[int] = None
    mode: Optional[Any] = None
    earliest: Optional[str] = None
    latest: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "completeness": self.completeness,
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "median": self.median,
            "uniqueValues": self.unique_values,
            "mode": _jsonable(self.mode),
            "earliest": self.earliest,
            "latest": self.latest,
        }
        return {key: value for key, value in payload.items() if value is not None}


@dataclass(frozen=True)
class DataSummary:
    """Classification plus per-column statistics for one dataset."""
    classification: ColumnClassification
    statistics: Mapping[str, ColumnStatistics] = field(default_factory=dict)
    sample_size: int = 0

    def __post_init__(self):
        object.__setattr__(self, "statistics", MappingProxyType(dict(self.statistics)))

    @property
    def numeric_columns(self) -> Tuple[str, ...]:
        return self.classification.numeric

    @property
    def categorical_columns(self) -> Tuple[str, ...]:
        return self.classification.categorical

    @property
    def date_columns(self) -> Tuple[str, ...]:
        return self.classification.date

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = self.classification.to_dict()
        result["statistics"] = {
            name: stats.to_dict() for name, stats in self.statistics.items()
        }
        result["sampleSize"] = self.sample_size
        return result


class ChartType(str, Enum):
    """Chart types understood by the rendering layer."""
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    AREA = "area"
    SCATTER = "scatter"
    COLUMN = "column"
    DONUT = "donut"
    RADAR = "radar"  # not produced by ChartSelector


@dataclass(frozen=True)
class ChartSpec:
    """Self-contained description of one chart.

    Attributes:
        id: Unique identifier within a chart batch
        title: Display title
        description: One-line description
        type: Chart type
        data: Plotting-ready records, shape depends on type
        config: Axis/key bindings (xAxis/yAxis or nameKey/valueKey)
    """
    id: str
    title: str
    description: str
    type: ChartType
    data: Tuple[Mapping[str, Any], ...]
    config: Mapping[str, str]

    def __post_init__(self):
        object.__setattr__(self, "data", tuple(_freeze_row(record) for record in self.data))
        object.__setattr__(self, "config", MappingProxyType(dict(self.config)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "data": [dict(record) for record in self.data],
            "config": dict(self.config),
        }


@dataclass(frozen=True)
class PipelineOutput:
    """Everything derived from one successful upload."""
    parsed: ParsedData
    summary: DataSummary
    charts: Tuple[ChartSpec, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.parsed.to_dict(),
            "summary": self.summary.to_dict(),
            "charts": [chart.to_dict() for chart in self.charts],
        }
