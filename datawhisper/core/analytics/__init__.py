"""Analytics module for tabular data profiling and chart selection.

Provides:
- CSV/JSON parsing into a uniform row model
- Heuristic column classification (numeric, categorical, date)
- Per-column summary statistics over a leading sample
- Rule-based default chart selection
"""

from .types import (
    CellKind,
    ParsedData,
    ColumnType,
    ColumnClassification,
    ColumnStatistics,
    DataSummary,
    ChartType,
    ChartSpec,
    PipelineOutput,
)
from .exceptions import (
    DataWhisperError,
    ParseError,
    UnsupportedFormatError,
    EmptyDataError,
    MalformedInputError,
    NoTabularStructureError,
)
from .parser import TabularParser
from .classifier import ColumnClassifier, is_numeric, is_date
from .profiler import DataProfiler
from .chart_selector import ChartSelector
from .pipeline import ProfilingPipeline, profile
from .session import ProfilingSession

__all__ = [
    # Types
    "CellKind",
    "ParsedData",
    "ColumnType",
    "ColumnClassification",
    "ColumnStatistics",
    "DataSummary",
    "ChartType",
    "ChartSpec",
    "PipelineOutput",
    # Errors
    "DataWhisperError",
    "ParseError",
    "UnsupportedFormatError",
    "EmptyDataError",
    "MalformedInputError",
    "NoTabularStructureError",
    # Services
    "TabularParser",
    "ColumnClassifier",
    "is_numeric",
    "is_date",
    "DataProfiler",
    "ChartSelector",
    "ProfilingPipeline",
    "profile",
    "ProfilingSession",
]
