"""Tests for rule-based chart selection."""

import datetime

import pytest

from datawhisper.core.analytics.chart_selector import ChartSelector, category_label
from datawhisper.core.analytics.classifier import ColumnClassifier
from datawhisper.core.analytics.profiler import DataProfiler
from datawhisper.core.analytics.types import ChartType, ColumnClassification, DataSummary, ParsedData
from datawhisper.setting import ChartSettings, ProfilingSettings


def create_parsed(rows, columns=None) -> ParsedData:
    """Create ParsedData from plain dict rows."""
    if columns is None:
        columns = list(rows[0].keys()) if rows else []
    return ParsedData.create(columns=columns, rows=rows, file_name="test.json", file_type="json")


def create_summary(numeric=(), categorical=(), date=()) -> DataSummary:
    return DataSummary(
        classification=ColumnClassification(
            numeric=tuple(numeric),
            categorical=tuple(categorical),
            date=tuple(date),
        )
    )


@pytest.fixture
def selector():
    return ChartSelector(ChartSettings(unknown_label="Unknown"))


@pytest.fixture
def profiler():
    return DataProfiler(ColumnClassifier(ProfilingSettings(sample_size=100, type_threshold=0.7)))


class TestCategoryTotals:
    """Tests for the numeric + categorical rule."""

    def test_bar_and_pie_over_sums(self, selector, profiler):
        parsed = create_parsed([{"city": "NY", "pop": 8}, {"city": "LA", "pop": 4}])
        charts = selector.select(parsed, profiler.summarize(parsed))

        assert [chart.id for chart in charts] == ["bar-chart-1", "pie-chart-1"]
        bar, pie = charts
        assert bar.type is ChartType.BAR
        assert pie.type is ChartType.PIE
        assert [dict(record) for record in bar.data] == [
            {"name": "NY", "value": 8.0},
            {"name": "LA", "value": 4.0},
        ]
        assert bar.data == pie.data
        assert dict(bar.config) == {"xAxis": "city", "yAxis": "pop"}
        assert dict(pie.config) == {"nameKey": "name", "valueKey": "value"}
        assert bar.title == "pop by city"

    def test_sums_repeated_categories(self, selector):
        parsed = create_parsed([
            {"city": "NY", "pop": "3"},
            {"city": "LA", "pop": "4"},
            {"city": "NY", "pop": "5"},
        ])
        charts = selector.select(parsed, create_summary(numeric=["pop"], categorical=["city"]))

        assert [dict(record) for record in charts[0].data] == [
            {"name": "NY", "value": 8.0},
            {"name": "LA", "value": 4.0},
        ]

    def test_missing_category_and_value(self, selector):
        parsed = create_parsed([
            {"city": "", "pop": "3"},
            {"city": None, "pop": "n/a"},
            {"city": "LA", "pop": ""},
        ])
        charts = selector.select(parsed, create_summary(numeric=["pop"], categorical=["city"]))

        assert [dict(record) for record in charts[0].data] == [
            {"name": "Unknown", "value": 3.0},
            {"name": "LA", "value": 0.0},
        ]

    def test_custom_unknown_label(self):
        selector = ChartSelector(ChartSettings(unknown_label="(blank)"))
        parsed = create_parsed([{"city": "", "pop": 1}])
        charts = selector.select(parsed, create_summary(numeric=["pop"], categorical=["city"]))

        assert charts[0].data[0]["name"] == "(blank)"

    def test_uses_all_rows_not_sample(self, selector):
        parsed = create_parsed([{"g": "a", "v": 1}] * 150)
        charts = selector.select(parsed, create_summary(numeric=["v"], categorical=["g"]))

        assert charts[0].data[0]["value"] == 150.0


class TestTimeSeries:
    """Tests for the date + numeric rule."""

    def test_daily_mean_sorted(self, selector):
        parsed = create_parsed([
            {"day": "2024-01-02", "sales": "10"},
            {"day": "2024-01-01", "sales": "4"},
            {"day": "2024-01-02 18:00", "sales": "20"},
        ])
        charts = selector.select(parsed, create_summary(numeric=["sales"], date=["day"]))

        assert [chart.id for chart in charts] == ["line-chart-1", "area-chart-1"]
        line, area = charts
        assert [dict(record) for record in line.data] == [
            {"date": "2024-01-01", "value": 4.0},
            {"date": "2024-01-02", "value": 15.0},
        ]
        assert line.data == area.data
        assert dict(line.config) == {"xAxis": "date", "yAxis": "value"}
        assert line.title == "sales Trends Over Time"

    def test_unparseable_dates_skipped(self, selector):
        parsed = create_parsed([
            {"day": "2024-01-01", "sales": 2},
            {"day": "someday", "sales": 100},
            {"day": "", "sales": 100},
        ])
        charts = selector.select(parsed, create_summary(numeric=["sales"], date=["day"]))

        assert [dict(record) for record in charts[0].data] == [{"date": "2024-01-01", "value": 2.0}]

    def test_relative_date_words_skipped(self, selector):
        """Words pandas reads relative to the clock never create a bucket."""
        rows = [{"when": f"2024-01-0{day}", "amount": str(day)} for day in range(1, 9)]
        rows += [{"when": "today", "amount": "100"}, {"when": "now", "amount": "200"}]
        parsed = create_parsed(rows)
        charts = selector.select(parsed, create_summary(numeric=["amount"], date=["when"]))

        dates = [record["date"] for record in charts[0].data]
        assert dates == [f"2024-01-0{day}" for day in range(1, 9)]
        assert charts[0].data[-1]["value"] == 8.0

    def test_relative_date_words_deterministic(self, selector):
        parsed = create_parsed([
            {"when": "2024-01-01", "amount": "1"},
            {"when": "2024-01-02", "amount": "2"},
            {"when": "2024-01-03", "amount": "3"},
            {"when": "now", "amount": "4"},
        ])
        summary = create_summary(numeric=["amount"], date=["when"])

        first = [chart.to_dict() for chart in selector.select(parsed, summary)]
        second = [chart.to_dict() for chart in selector.select(parsed, summary)]

        assert first == second
        assert [record["date"] for record in first[0]["data"]] == ["2024-01-01", "2024-01-02", "2024-01-03"]

    def test_non_numeric_values_count_as_zero(self, selector):
        parsed = create_parsed([
            {"day": "2024-01-01", "sales": "6"},
            {"day": "2024-01-01", "sales": "-"},
        ])
        charts = selector.select(parsed, create_summary(numeric=["sales"], date=["day"]))

        assert charts[0].data[0]["value"] == 3.0

    def test_native_dates(self, selector):
        parsed = create_parsed([
            {"day": datetime.date(2024, 5, 1), "sales": 1},
            {"day": datetime.datetime(2024, 4, 30, 9), "sales": 3},
        ])
        charts = selector.select(parsed, create_summary(numeric=["sales"], date=["day"]))

        assert [record["date"] for record in charts[0].data] == ["2024-04-30", "2024-05-01"]

    def test_no_dates_parse(self, selector):
        parsed = create_parsed([{"day": "never", "sales": 1}])
        charts = selector.select(parsed, create_summary(numeric=["sales"], date=["day"]))

        assert charts == []


class TestScatter:
    """Tests for the two-numeric rule."""

    def test_first_two_numeric_columns(self, selector):
        parsed = create_parsed([
            {"h": "1", "w": "2", "z": "9"},
            {"h": "3", "w": "x", "z": "9"},
            {"h": "5", "w": "6", "z": "9"},
        ])
        charts = selector.select(parsed, create_summary(numeric=["h", "w", "z"]))

        assert [chart.id for chart in charts] == ["scatter-plot-1"]
        scatter = charts[0]
        assert scatter.type is ChartType.SCATTER
        assert [dict(record) for record in scatter.data] == [{"x": 1.0, "y": 2.0}, {"x": 5.0, "y": 6.0}]
        assert dict(scatter.config) == {"xAxis": "h", "yAxis": "w"}
        assert scatter.title == "h vs w"


class TestFrequency:
    """Tests for the categorical-only rule."""

    def test_column_and_donut(self, selector, profiler):
        parsed = create_parsed([{"status": "open"}, {"status": "open"}, {"status": "closed"}])
        charts = selector.select(parsed, profiler.summarize(parsed))

        assert [chart.type for chart in charts] == [ChartType.COLUMN, ChartType.DONUT]
        assert [chart.id for chart in charts] == ["column-chart-1", "donut-chart-1"]
        assert [dict(record) for record in charts[0].data] == [
            {"name": "open", "value": 2},
            {"name": "closed", "value": 1},
        ]
        assert dict(charts[0].config) == {"xAxis": "name", "yAxis": "value"}
        assert dict(charts[1].config) == {"nameKey": "name", "valueKey": "value"}

    def test_not_emitted_when_numeric_present(self, selector):
        parsed = create_parsed([{"status": "open", "n": 1}])
        charts = selector.select(parsed, create_summary(numeric=["n"], categorical=["status"]))

        assert ChartType.COLUMN not in [chart.type for chart in charts]
        assert ChartType.DONUT not in [chart.type for chart in charts]


class TestSelect:
    """Tests for rule ordering and edge cases."""

    def test_all_rules_in_order(self, selector):
        parsed = create_parsed([
            {"region": "N", "day": "2024-01-01", "sales": "10", "units": "2"},
            {"region": "S", "day": "2024-01-02", "sales": "20", "units": "4"},
        ])
        summary = create_summary(numeric=["sales", "units"], categorical=["region"], date=["day"])
        charts = selector.select(parsed, summary)

        assert [chart.type for chart in charts] == [
            ChartType.BAR,
            ChartType.PIE,
            ChartType.LINE,
            ChartType.AREA,
            ChartType.SCATTER,
        ]
        assert len({chart.id for chart in charts}) == len(charts)

    def test_single_numeric_column_yields_nothing(self, selector):
        parsed = create_parsed([{"v": 1}, {"v": 2}])
        charts = selector.select(parsed, create_summary(numeric=["v"]))

        assert charts == []

    def test_date_only_yields_nothing(self, selector):
        parsed = create_parsed([{"d": "2024-01-01"}])
        charts = selector.select(parsed, create_summary(date=["d"]))

        assert charts == []

    def test_empty_column_name_still_selected(self, selector):
        parsed = create_parsed([{"": "a", "n": 1}])
        charts = selector.select(parsed, create_summary(numeric=["n"], categorical=[""]))

        assert [chart.id for chart in charts] == ["bar-chart-1", "pie-chart-1"]

    def test_deterministic(self, selector):
        parsed = create_parsed([{"g": "b", "v": 1}, {"g": "a", "v": 2}])
        summary = create_summary(numeric=["v"], categorical=["g"])

        first = [chart.to_dict() for chart in selector.select(parsed, summary)]
        second = [chart.to_dict() for chart in selector.select(parsed, summary)]

        assert first == second

    def test_to_dict(self, selector):
        parsed = create_parsed([{"g": "a", "v": 2}])
        chart = selector.select(parsed, create_summary(numeric=["v"], categorical=["g"]))[0]

        assert chart.to_dict() == {
            "id": "bar-chart-1",
            "title": "v by g",
            "description": "Bar chart showing v values grouped by g",
            "type": "bar",
            "data": [{"name": "a", "value": 2.0}],
            "config": {"xAxis": "g", "yAxis": "v"},
        }


class TestCategoryLabel:
    """Tests for category_label."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("NY", "NY"),
            ("", "Unknown"),
            (None, "Unknown"),
            (float("nan"), "Unknown"),
            (0, "0"),
            (2.0, "2"),
            (2.5, "2.5"),
            (False, "false"),
            (True, "true"),
            (datetime.date(2024, 1, 2), "2024-01-02"),
            ({"b": 1, "a": 2}, '{"a": 2, "b": 1}'),
            ([1, 2], "[1, 2]"),
        ],
    )
    def test_labels(self, value, expected):
        assert category_label(value) == expected
