"""
Sampling profilers with line-oriented text output.

Two tools are supported, sharing one analysis path:

- xperf (Windows Performance Toolkit). xperf cannot follow a single process,
  so the recording is started before the trial and stopped after it, and
  samples are filtered by the PID of the measured process.
- perf (Linux). The benchmark command is wrapped by ``perf record``;
  ``perf script`` turns the recording into text.

Both produce samples with a code address, which are attributed to symbols
and summarized as sample counts, samples per operation and hottest symbols.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..aggregation import compute_sample_results
from ..models.config import AnalysisConfig, ToolsConfig
from ..models.results import ScalarResult
from ..models.trial import TrialWindow
from ..parsers.formats import TraceFormat
from ..parsers.line_reader import read_line_events
from ..system import tools
from ..validation import ProfilerError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class LineTraceProfiler:
    """
    Analysis of a line-oriented trace over a trial's measured window.

    Args:
        trace_format: Format of the text trace
        events: Events to analyze
        analysis: Window selection and summary settings
    """

    def __init__(
        self,
        trace_format: TraceFormat,
        events: Sequence[str],
        analysis: Optional[AnalysisConfig] = None,
    ):
        if not trace_format.is_line_oriented:
            raise ValueError(f"{trace_format.value} is not a line-oriented trace format")
        self.trace_format = trace_format
        self.events = list(events)
        self.analysis = analysis or AnalysisConfig()

    def read_window(self, window: TrialWindow) -> Tuple[float, float]:
        """Window of the trace to read, as (from, to) in milliseconds."""
        skip_ms = self.analysis.delay_ms
        if skip_ms == -1:
            skip_ms = window.measurement_delay_ms
        length_ms = self.analysis.length_ms
        if length_ms == -1:
            length_ms = window.measured_time_ms
        return float(skip_ms), float(skip_ms + length_ms)

    def process_results(self, window: TrialWindow, pid: int, trace_path: PathLike) -> List[ScalarResult]:
        """
        Read ``trace_path`` and summarize the samples of ``pid``.

        Returns:
            Per-event results; empty when no sample fell in the window

        Raises:
            OSError: If the trace cannot be read
        """
        read_from_ms, read_to_ms = self.read_window(window)
        perf_events = read_line_events(
            trace_path, self.trace_format, self.events, pid, read_from_ms, read_to_ms,
        )

        if perf_events.total_all() == 0:
            logger.warning(f"No samples of process {pid} in ({read_from_ms}, {read_to_ms}) ms")
            return []

        ops_in_window = None
        if window.ops_throughput is not None:
            ops_in_window = window.ops_throughput * (read_to_ms - read_from_ms)

        results = compute_sample_results(
            perf_events,
            ops_in_window=ops_in_window,
            hot_symbols=self.analysis.hot_symbols,
            hot_threshold_pct=self.analysis.hot_threshold_pct,
        )
        logger.info(f"Computed {len(results)} results from {perf_events.total_all()} samples")
        return results


class WinPerfProfiler(LineTraceProfiler):
    """
    Windows profiler based on ``xperf``; counts ``SampledProfile`` events.

    The ``loader``, ``proc_thread`` and ``profile`` providers are required for
    sample events to be generated at all.
    """

    def __init__(self, tools_config: Optional[ToolsConfig] = None, analysis: Optional[AnalysisConfig] = None):
        self.tools = tools_config or ToolsConfig()
        self.xperf = tools.xperf_command(self.tools.xperf_dir)
        super().__init__(TraceFormat.XPERF, [self.tools.xperf_event], analysis)

    def check_tool(self) -> None:
        if not tools.is_tool_installed(self.xperf):
            raise ProfilerError(f"xperf was not found at '{self.xperf}'. Install the Windows Performance Toolkit.")

    def before_trial(self) -> None:
        tools.xperf_start(self.xperf, self.tools.xperf_providers)

    def after_trial(self, window: TrialWindow, pid: int, work_dir: PathLike) -> List[ScalarResult]:
        """
        Stop the recording, convert it to text and analyze it.

        Files with the ``.etl`` extension can be opened by Windows
        Performance Analyzer right away, so the recording is kept in
        ``work_dir``.
        """
        if pid == 0:
            raise ProfilerError("xperf analysis needs the PID of the measured process, but it is not initialized.")

        work_dir = Path(work_dir)
        etl_file = work_dir / "perf.etl"
        text_file = work_dir / "perf.txt"

        tools.xperf_stop(self.xperf, etl_file)
        tools.xperf_dump(self.xperf, etl_file, text_file, self.tools.symbol_dir or None)
        return self.process_results(window, pid, text_file)


class LinuxPerfProfiler(LineTraceProfiler):
    """Linux profiler based on ``perf record`` and ``perf script``."""

    def __init__(self, tools_config: Optional[ToolsConfig] = None, analysis: Optional[AnalysisConfig] = None):
        self.tools = tools_config or ToolsConfig()
        super().__init__(TraceFormat.PERF_SCRIPT, self.tools.perf_events, analysis)

    def check_tool(self) -> None:
        if not tools.is_tool_installed(self.tools.perf_path):
            raise ProfilerError(f"perf was not found at '{self.tools.perf_path}'.")

    def record_command(self, data_file: PathLike) -> List[str]:
        return tools.perf_record_command(self.tools.perf_path, self.tools.perf_events, data_file)

    def after_trial(self, window: TrialWindow, pid: int, data_file: PathLike) -> List[ScalarResult]:
        text_file = Path(data_file).with_suffix(".txt")
        tools.perf_script(self.tools.perf_path, data_file, text_file)
        return self.process_results(window, pid, text_file)
