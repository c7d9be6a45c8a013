"""
Trace formats understood by the engine.
"""

from enum import Enum


class TraceFormat(Enum):
    """
    The external tool output a trace artifact was exported as.

    Line-oriented formats carry one sample per text row with a code address;
    the structured format carries counter deltas per row of an XML table.
    """

    XPERF = "xperf"
    PERF_SCRIPT = "perf-script"
    XCTRACE = "xctrace"

    @property
    def is_line_oriented(self) -> bool:
        return self in (TraceFormat.XPERF, TraceFormat.PERF_SCRIPT)

    @property
    def has_absolute_timestamps(self) -> bool:
        """perf script reports a system clock; xperf is relative to trace start."""
        return self == TraceFormat.PERF_SCRIPT
