"""
Accumulation of parsed samples and derived metric computation.

- line_events: address multisets and symbol ranges for line-oriented traces
- events: windowed counter totals for structured traces
- metrics: CPI/IPC, branch miss ratio and instruction density metrics
"""

from .events import AggregatedEvents, CounterValue
from .line_events import LineEventsAccumulator, PerfEvents, UNKNOWN_ADDRESS
from .metrics import (
    BRANCH_EVENT_NAMES,
    BRANCH_MISS_EVENT_NAMES,
    CYCLES_EVENT_NAMES,
    INSTRUCTIONS_EVENT_NAMES,
    compute_aggregates,
    compute_common_metrics,
    compute_density_metrics,
    compute_event_results,
    compute_sample_results,
)

__all__ = [
    "AggregatedEvents",
    "CounterValue",
    "LineEventsAccumulator",
    "PerfEvents",
    "UNKNOWN_ADDRESS",
    "BRANCH_EVENT_NAMES",
    "BRANCH_MISS_EVENT_NAMES",
    "CYCLES_EVENT_NAMES",
    "INSTRUCTIONS_EVENT_NAMES",
    "compute_aggregates",
    "compute_common_metrics",
    "compute_density_metrics",
    "compute_event_results",
    "compute_sample_results",
]
