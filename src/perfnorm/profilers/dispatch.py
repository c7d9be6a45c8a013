"""
Entry point that selects the analysis path from the trace format.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..models.config import AppConfig
from ..models.results import ScalarResult
from ..models.trial import TrialWindow
from ..parsers.formats import TraceFormat
from .line_trace import LineTraceProfiler
from .xctrace_norm import XCTraceNormProfiler

logger = logging.getLogger(__name__)


def default_events(trace_format: TraceFormat, config: AppConfig) -> List[str]:
    if trace_format == TraceFormat.XPERF:
        return [config.tools.xperf_event]
    return list(config.tools.perf_events)


def analyze_trial(
    trace_format: TraceFormat,
    window: TrialWindow,
    trace_path: Union[str, Path],
    pid: Optional[int] = None,
    toc_path: Optional[Union[str, Path]] = None,
    events: Optional[Sequence[str]] = None,
    config: Optional[AppConfig] = None,
    arch: Optional[str] = None,
) -> List[ScalarResult]:
    """
    Analyze an exported trace artifact of one trial.

    Args:
        trace_format: Tool output the artifact is in
        window: Trial timing reported by the harness
        trace_path: Text trace, or the exported counters table for xctrace
        pid: Measured process (line-oriented formats)
        toc_path: Exported table of contents (xctrace)
        events: Events to analyze (line-oriented formats); defaults from config
        config: Settings; defaults to built-in values
        arch: Architecture of the recording host (xctrace)

    Returns:
        The trial's results, possibly empty

    Raises:
        ValueError: If a format-specific argument is missing
    """
    config = config or AppConfig()
    logger.info(f"Analyzing {trace_format.value} trace {trace_path}")

    if trace_format == TraceFormat.XCTRACE:
        if toc_path is None:
            raise ValueError("xctrace analysis needs the exported table of contents")
        profiler = XCTraceNormProfiler(config.analysis, config.tools, arch=arch)
        return profiler.process_results(window, toc_path, trace_path)

    if pid is None:
        raise ValueError(f"{trace_format.value} analysis needs the PID of the measured process")
    requested = list(events) if events else default_events(trace_format, config)
    profiler = LineTraceProfiler(trace_format, requested, config.analysis)
    return profiler.process_results(window, pid, trace_path)
