"""Column type classification.

Classifies each column as numeric, date or categorical from the shape of the
values in a leading sample of rows. Values that fail a predicate are simply
not counted; classification never raises.
"""

import logging
import math
import re
import warnings
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import pandas as pd

from datawhisper.setting import ProfilingSettings, get_settings

from .types import (
    CellKind,
    ColumnClassification,
    ColumnType,
    ParsedData,
    Row,
    cell_kind,
)

logger = logging.getLogger(__name__)

# 1-4 / 1-2 / 1-4 digit groups, optional time of day
DATE_PATTERN = re.compile(r"\d{1,4}[-/]\d{1,2}[-/]\d{1,4}([ T]\d{1,2}:\d{1,2}(:\d{1,2})?)?")


def to_number(value: Any) -> Optional[float]:
    """Coerce a value to a finite float, or None if it is not numeric.

    Numbers are accepted as-is. Text must parse fully as a float once
    surrounding whitespace is removed. Booleans, NaN and infinities are
    never numeric.
    """
    kind = cell_kind(value)
    if kind is CellKind.NUMBER:
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return None
    elif kind is CellKind.TEXT:
        text = value.strip()
        # float() accepts digit separators, e.g. "1_000"
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except (ValueError, OverflowError):
            return None
    else:
        return None

    return number if math.isfinite(number) else None


def is_numeric(value: Any) -> bool:
    return to_number(value) is not None


def to_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Parse a native date or date text into a naive UTC Timestamp, or None."""
    kind = cell_kind(value)
    if kind not in (CellKind.DATE, CellKind.TEXT):
        return None

    try:
        with warnings.catch_warnings():
            # pandas warns when it has to guess day-first vs month-first
            warnings.simplefilter("ignore")
            if kind is CellKind.DATE:
                timestamp = pd.Timestamp(value)
            else:
                timestamp = pd.to_datetime(value.strip(), errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None

    if timestamp is None or pd.isna(timestamp):
        return None
    if timestamp.tzinfo is not None:
        timestamp = timestamp.tz_convert("UTC").tz_localize(None)
    return timestamp


def is_date(value: Any) -> bool:
    """True for native dates, or text that looks like a date and parses as one."""
    kind = cell_kind(value)
    if kind is CellKind.DATE:
        return to_timestamp(value) is not None
    if kind is CellKind.TEXT:
        return DATE_PATTERN.fullmatch(value) is not None and to_timestamp(value) is not None
    return False


@dataclass(frozen=True)
class ColumnCounts:
    """Predicate counts for one column over the sample."""
    non_empty: int = 0
    numeric: int = 0
    date: int = 0


class ColumnClassifier:
    """Partition a dataset's columns into numeric, date and categorical.

    A column is numeric when more than ``type_threshold`` of the sampled rows
    hold numeric values, otherwise date when more than ``type_threshold``
    hold dates, otherwise categorical. The threshold is measured against the
    sample size, so sparse columns lean categorical.
    """

    def __init__(self, settings: Optional[ProfilingSettings] = None):
        self._settings = settings or get_settings().profiling

    @property
    def sample_size(self) -> int:
        return self._settings.sample_size

    @property
    def type_threshold(self) -> float:
        return self._settings.type_threshold

    def sample(self, parsed: ParsedData) -> Sequence[Row]:
        """Rows used for classification: the first ``sample_size`` rows."""
        return parsed.sample(self.sample_size)

    def count_column(self, rows: Sequence[Row], column: str) -> ColumnCounts:
        non_empty = numeric = date = 0
        for row in rows:
            value = row.get(column)
            if cell_kind(value) is CellKind.MISSING:
                continue
            non_empty += 1
            if is_numeric(value):
                numeric += 1
            if is_date(value):
                date += 1
        return ColumnCounts(non_empty=non_empty, numeric=numeric, date=date)

    def decide(self, counts: ColumnCounts, sample_size: int) -> ColumnType:
        """Apply the threshold rule; numeric wins over date."""
        limit = self.type_threshold * sample_size
        if counts.numeric > limit:
            return ColumnType.NUMERIC
        if counts.date > limit:
            return ColumnType.DATE
        return ColumnType.CATEGORICAL

    def classify(self, parsed: ParsedData) -> ColumnClassification:
        """Classify every column of ``parsed``.

        Returns:
            ColumnClassification covering each column exactly once.
        """
        rows = self.sample(parsed)
        buckets = {
            ColumnType.NUMERIC: [],
            ColumnType.CATEGORICAL: [],
            ColumnType.DATE: [],
        }

        for column in parsed.columns:
            counts = self.count_column(rows, column)
            column_type = self.decide(counts, len(rows))
            buckets[column_type].append(column)
            logger.debug(
                f"Column '{column}': {column_type.value} "
                f"(non_empty={counts.non_empty}, numeric={counts.numeric}, "
                f"date={counts.date}, sample={len(rows)})"
            )

        return ColumnClassification(
            numeric=tuple(buckets[ColumnType.NUMERIC]),
            categorical=tuple(buckets[ColumnType.CATEGORICAL]),
            date=tuple(buckets[ColumnType.DATE]),
        )
