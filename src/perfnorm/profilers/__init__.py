"""
Trial-level drivers for the supported external profilers.

Each driver turns one trial's trace artifact into a list of ScalarResult
objects; ``analyze_trial`` picks the driver from the trace format.
"""

from .dispatch import analyze_trial, default_events
from .line_trace import LineTraceProfiler, LinuxPerfProfiler, WinPerfProfiler
from .xctrace_norm import XCTraceNormProfiler

__all__ = [
    "analyze_trial",
    "default_events",
    "LineTraceProfiler",
    "LinuxPerfProfiler",
    "WinPerfProfiler",
    "XCTraceNormProfiler",
]
