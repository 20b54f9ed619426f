"""Profiling pipeline: parse, summarize, select charts.

Orchestrates:
- File parsing (CSV/JSON)
- Column classification and statistics
- Chart selection

Each run works on fresh objects and keeps no state between uploads.
"""

import logging
import time
from typing import Optional

from datawhisper.setting import DataWhisperSettings, get_settings

from .chart_selector import ChartSelector
from .classifier import ColumnClassifier
from .parser import Content, TabularParser
from .profiler import DataProfiler
from .types import PipelineOutput

logger = logging.getLogger(__name__)


class ProfilingPipeline:
    """Runs one upload through every stage."""

    def __init__(
        self,
        parser: Optional[TabularParser] = None,
        profiler: Optional[DataProfiler] = None,
        selector: Optional[ChartSelector] = None,
        settings: Optional[DataWhisperSettings] = None,
    ):
        """Initialize the pipeline.

        Args:
            parser: Tabular parser
            profiler: Statistics engine (wraps the column classifier)
            selector: Chart selector
            settings: Settings used to build any stage not passed in
        """
        settings = settings or get_settings()
        self._parser = parser or TabularParser(settings.parser)
        self._profiler = profiler or DataProfiler(ColumnClassifier(settings.profiling))
        self._selector = selector or ChartSelector(settings.charts)

    def run(self, file_name: str, content: Content) -> PipelineOutput:
        """Profile one uploaded file.

        Args:
            file_name: Original file name
            content: Raw file content

        Returns:
            PipelineOutput with parsed data, summary and charts

        Raises:
            ParseError: If the file cannot be parsed. Later stages do not raise.
        """
        timings = {}

        # Step 1: Parse
        t1 = time.time()
        parsed = self._parser.parse(file_name, content)
        timings["1_parse_ms"] = int((time.time() - t1) * 1000)

        # Step 2: Classify and compute statistics
        t2 = time.time()
        summary = self._profiler.summarize(parsed)
        timings["2_summarize_ms"] = int((time.time() - t2) * 1000)

        # Step 3: Select charts
        t3 = time.time()
        charts = self._selector.select(parsed, summary)
        timings["3_charts_ms"] = int((time.time() - t3) * 1000)

        logger.debug(f"Pipeline timings for {file_name}: {timings}")
        logger.info(
            f"Pipeline complete for {file_name}: {parsed.row_count} rows, "
            f"{len(parsed.columns)} columns, {len(charts)} charts"
        )

        return PipelineOutput(parsed=parsed, summary=summary, charts=tuple(charts))


def profile(file_name: str, content: Content) -> PipelineOutput:
    """Run the default pipeline on one file.

    Raises:
        ParseError: If the file cannot be parsed.
    """
    return ProfilingPipeline().run(file_name, content)
