"""Per-column statistics over the classification sample.

Statistics are estimates: only the first ``sample_size`` rows are read, the
same rows the classifier looks at.
"""

import logging
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple

import pandas as pd

from .classifier import ColumnClassifier, is_date, to_number, to_timestamp
from .types import (
    CellKind,
    ColumnClassification,
    ColumnStatistics,
    ColumnType,
    DataSummary,
    ParsedData,
    cell_kind,
)

logger = logging.getLogger(__name__)


def distinct_key(value: Any) -> Tuple[CellKind, Hashable]:
    """Equality key used to count distinct raw values.

    Numbers compare by value (1 == 1.0) but never equal booleans or text.
    Lists and dicts are distinct per object.
    """
    kind = cell_kind(value)
    if kind is CellKind.COMPOSITE:
        return kind, id(value)
    if kind is CellKind.BOOLEAN:
        return kind, bool(value)
    try:
        hash(value)
    except TypeError:
        return kind, id(value)
    return kind, value


class DataProfiler:
    """Computes column statistics and assembles the DataSummary."""

    def __init__(self, classifier: Optional[ColumnClassifier] = None):
        """Initialize the profiler.

        Args:
            classifier: Column classifier; its sample size also bounds the
                statistics sample.
        """
        self._classifier = classifier or ColumnClassifier()

    @property
    def classifier(self) -> ColumnClassifier:
        return self._classifier

    def summarize(self, parsed: ParsedData) -> DataSummary:
        """Classify columns and compute their statistics.

        Args:
            parsed: Parsed dataset

        Returns:
            DataSummary for the dataset
        """
        classification = self._classifier.classify(parsed)
        column_stats = self.compute_statistics(parsed, classification)
        sample_size = len(self._classifier.sample(parsed))

        logger.info(
            f"Profiled {parsed.file_name}: {len(classification.numeric)} numeric, "
            f"{len(classification.categorical)} categorical, "
            f"{len(classification.date)} date columns (sample={sample_size})"
        )

        return DataSummary(
            classification=classification,
            statistics=column_stats,
            sample_size=sample_size,
        )

    def compute_statistics(
        self,
        parsed: ParsedData,
        classification: ColumnClassification,
    ) -> Dict[str, ColumnStatistics]:
        """Compute ColumnStatistics for every column of ``parsed``."""
        rows = self._classifier.sample(parsed)
        result: Dict[str, ColumnStatistics] = {}

        for column in parsed.columns:
            values = [
                row.get(column) for row in rows
                if cell_kind(row.get(column)) is not CellKind.MISSING
            ]
            completeness = len(values) / len(rows) if rows else 0.0
            column_type = classification.type_of(column)

            if column_type is ColumnType.NUMERIC:
                stats = self._numeric_statistics(values, completeness)
            elif column_type is ColumnType.DATE:
                stats = self._date_statistics(values, completeness)
            else:
                stats = self._categorical_statistics(values, completeness)

            result[column] = stats

        return result

    def _numeric_statistics(self, values: Sequence[Any], completeness: float) -> ColumnStatistics:
        numbers: List[float] = []
        for value in values:
            number = to_number(value)
            if number is not None:
                numbers.append(number)

        if not numbers:
            return ColumnStatistics(completeness=completeness)

        clean_col = pd.Series(numbers, dtype="float64")
        low = float(clean_col.min())
        high = float(clean_col.max())
        # Rounding can land the mean one ulp outside [low, high]
        mean = min(max(float(clean_col.mean()), low), high)

        return ColumnStatistics(
            completeness=completeness,
            min=low,
            max=high,
            mean=mean,
            median=float(clean_col.median()),
        )

    def _categorical_statistics(self, values: Sequence[Any], completeness: float) -> ColumnStatistics:
        counts: Dict[Tuple[CellKind, Hashable], int] = {}
        representatives: Dict[Tuple[CellKind, Hashable], Any] = {}

        for value in values:
            key = distinct_key(value)
            if key not in counts:
                counts[key] = 0
                representatives[key] = value
            counts[key] += 1

        mode = None
        best = 0
        for key, count in counts.items():
            if count > best:
                best = count
                mode = representatives[key]

        return ColumnStatistics(
            completeness=completeness,
            unique_values=len(counts),
            mode=mode,
        )

    def _date_statistics(self, values: Sequence[Any], completeness: float) -> ColumnStatistics:
        timestamps = [to_timestamp(value) for value in values if is_date(value)]
        timestamps = [ts for ts in timestamps if ts is not None]

        if not timestamps:
            return ColumnStatistics(completeness=completeness)

        return ColumnStatistics(
            completeness=completeness,
            earliest=min(timestamps).isoformat(),
            latest=max(timestamps).isoformat(),
        )
