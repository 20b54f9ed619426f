"""Rule-based chart selection.

Derives an ordered list of ChartSpec from a dataset and its summary. Each
rule fires independently when its columns exist; a rule that cannot fire is
skipped, so the result may be empty but selection never fails.

Rules, in order:
1. numeric + categorical  -> bar and pie of summed values per category
2. date + numeric         -> line and area of the daily mean
3. two numeric columns    -> scatter of the first against the second
4. categorical only       -> column and donut of category frequencies
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from datawhisper.setting import ChartSettings, get_settings

from .classifier import is_date, to_number, to_timestamp
from .types import CellKind, ChartSpec, ChartType, DataSummary, ParsedData, cell_kind

logger = logging.getLogger(__name__)


def category_label(value: Any, unknown_label: str = "Unknown") -> str:
    """Render a raw value as a grouping label."""
    kind = cell_kind(value)
    if kind is CellKind.MISSING:
        return unknown_label
    if kind is CellKind.TEXT:
        return value
    if kind is CellKind.BOOLEAN:
        return "true" if value else "false"
    if kind is CellKind.NUMBER:
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    if kind is CellKind.DATE:
        return value.isoformat() if hasattr(value, "isoformat") else str(value)
    return json.dumps(value, sort_keys=True, default=str)


class ChartSelector:
    """Selects default charts for a profiled dataset."""

    def __init__(self, settings: Optional[ChartSettings] = None):
        self._settings = settings or get_settings().charts

    @property
    def unknown_label(self) -> str:
        return self._settings.unknown_label

    def select(self, parsed: ParsedData, summary: DataSummary) -> List[ChartSpec]:
        """Build chart specifications for ``parsed``.

        Args:
            parsed: Parsed dataset; every row is used, not just the sample
            summary: Summary whose classification picks the columns

        Returns:
            Charts in rule order; related charts are adjacent, primary first
        """
        classification = summary.classification
        numeric_col = classification.first_numeric()
        second_numeric_col = classification.second_numeric()
        category_col = classification.first_categorical()
        date_col = classification.first_date()

        charts: List[ChartSpec] = []

        if numeric_col is not None and category_col is not None:
            charts.extend(self._category_totals_charts(parsed, category_col, numeric_col))

        if date_col is not None and numeric_col is not None:
            charts.extend(self._time_series_charts(parsed, date_col, numeric_col))

        if numeric_col is not None and second_numeric_col is not None:
            charts.extend(self._scatter_charts(parsed, numeric_col, second_numeric_col))

        if numeric_col is None and category_col is not None:
            charts.extend(self._frequency_charts(parsed, category_col))

        logger.info(
            f"Selected {len(charts)} chart(s) for {parsed.file_name}: "
            f"{[chart.id for chart in charts]}"
        )
        return charts

    def _category_totals_charts(
        self,
        parsed: ParsedData,
        category_col: str,
        numeric_col: str,
    ) -> List[ChartSpec]:
        totals: Dict[str, float] = {}
        for row in parsed.rows:
            label = category_label(row.get(category_col), self.unknown_label)
            value = to_number(row.get(numeric_col))
            totals[label] = totals.get(label, 0.0) + (value if value is not None else 0.0)

        data = [{"name": name, "value": value} for name, value in totals.items()]

        return [
            ChartSpec(
                id="bar-chart-1",
                title=f"{numeric_col} by {category_col}",
                description=f"Bar chart showing {numeric_col} values grouped by {category_col}",
                type=ChartType.BAR,
                data=data,
                config={"xAxis": category_col, "yAxis": numeric_col},
            ),
            ChartSpec(
                id="pie-chart-1",
                title=f"Distribution of {numeric_col} by {category_col}",
                description=(
                    f"Pie chart showing distribution of {numeric_col} "
                    f"across {category_col} categories"
                ),
                type=ChartType.PIE,
                data=data,
                config={"nameKey": "name", "valueKey": "value"},
            ),
        ]

    def _time_series_charts(
        self,
        parsed: ParsedData,
        date_col: str,
        numeric_col: str,
    ) -> List[ChartSpec]:
        buckets: Dict[str, Tuple[float, int]] = {}
        skipped = 0
        for row in parsed.rows:
            raw_date = row.get(date_col)
            # Relative words like "today" parse but are not dates
            timestamp = to_timestamp(raw_date) if is_date(raw_date) else None
            if timestamp is None:
                skipped += 1
                continue
            day = timestamp.date().isoformat()
            value = to_number(row.get(numeric_col))
            total, count = buckets.get(day, (0.0, 0))
            buckets[day] = (total + (value if value is not None else 0.0), count + 1)

        if skipped:
            logger.debug(f"Time series skipped {skipped} row(s) without a usable '{date_col}'")

        if not buckets:
            return []

        data = [
            {"date": day, "value": total / count}
            for day, (total, count) in sorted(buckets.items())
        ]

        return [
            ChartSpec(
                id="line-chart-1",
                title=f"{numeric_col} Trends Over Time",
                description=f"Line chart showing {numeric_col} trends by {date_col}",
                type=ChartType.LINE,
                data=data,
                config={"xAxis": "date", "yAxis": "value"},
            ),
            ChartSpec(
                id="area-chart-1",
                title=f"{numeric_col} Area Over Time",
                description=f"Area chart showing {numeric_col} changes over time",
                type=ChartType.AREA,
                data=data,
                config={"xAxis": "date", "yAxis": "value"},
            ),
        ]

    def _scatter_charts(self, parsed: ParsedData, x_col: str, y_col: str) -> List[ChartSpec]:
        points = []
        for row in parsed.rows:
            x = to_number(row.get(x_col))
            y = to_number(row.get(y_col))
            if x is None or y is None:
                continue
            points.append({"x": x, "y": y})

        if not points:
            return []

        return [
            ChartSpec(
                id="scatter-plot-1",
                title=f"{x_col} vs {y_col}",
                description=f"Scatter plot showing relationship between {x_col} and {y_col}",
                type=ChartType.SCATTER,
                data=points,
                config={"xAxis": x_col, "yAxis": y_col},
            ),
        ]

    def _frequency_charts(self, parsed: ParsedData, category_col: str) -> List[ChartSpec]:
        frequencies: Dict[str, int] = {}
        for row in parsed.rows:
            label = category_label(row.get(category_col), self.unknown_label)
            frequencies[label] = frequencies.get(label, 0) + 1

        data = [{"name": name, "value": count} for name, count in frequencies.items()]

        return [
            ChartSpec(
                id="column-chart-1",
                title=f"Frequency of {category_col}",
                description=f"Column chart showing counts of each {category_col} category",
                type=ChartType.COLUMN,
                data=data,
                config={"xAxis": "name", "yAxis": "value"},
            ),
            ChartSpec(
                id="donut-chart-1",
                title=f"Distribution of {category_col}",
                description=f"Donut chart showing distribution of {category_col} categories",
                type=ChartType.DONUT,
                data=data,
                config={"nameKey": "name", "valueKey": "value"},
            ),
        ]
