"""
Derived metrics over aggregated counters.

Counter names differ between CPU vendors and operating systems, so every
metric input is resolved from an ordered list of aliases; the first alias
present on the host wins. The resolved names are written into each result's
unit so readers can tell which counters were actually used.
"""

import logging
import platform
from typing import List, Optional

from ..models.results import AggregationPolicy, ScalarResult
from ..models.samples import TableDescriptor, TriggerType
from .events import AggregatedEvents
from .line_events import PerfEvents

logger = logging.getLogger(__name__)

CYCLES_EVENT_NAMES = (
    "CORE_ACTIVE_CYCLE", "Cycles", "FIXED_CYCLES", "CPU_CLK_UNHALTED.THREAD", "CPU_CLK_UNHALTED.THREAD_P",
)
INSTRUCTIONS_EVENT_NAMES = (
    "INST_ALL", "Instructions", "FIXED_INSTRUCTIONS", "INST_RETIRED.ANY", "INST_RETIRED.ANY_P",
)
BRANCH_EVENT_NAMES = (
    "INST_BRANCH", "BR_INST_RETIRED.ALL_BRANCHES", "BR_INST_RETIRED.ALL_BRANCHES_PEBS",
)
BRANCH_MISS_EVENT_NAMES = (
    "BRANCH_MISPRED_NONSPEC", "BR_MISP_RETIRED.ALL_BRANCHES", "BR_MISP_RETIRED.ALL_BRANCHES_PS",
)

# Instruction-class counters of Apple silicon are named INST_<class>; INST_ALL is the total.
INSTRUCTION_CLASS_PREFIX = "INST_"
TOTAL_INSTRUCTIONS_EVENT = "INST_ALL"
DENSITY_ARCHITECTURES = ("aarch64", "arm64")

PER_OP_UNIT = "#/op"
UNKNOWN_SYMBOL = "<unknown>"


def compute_common_metrics(aggregator: AggregatedEvents) -> List[ScalarResult]:
    """CPI, IPC and branch miss ratio, for whichever inputs the host provides."""
    results: List[ScalarResult] = []

    cycles = aggregator.get_any_of(CYCLES_EVENT_NAMES, nonzero=True)
    insts = aggregator.get_any_of(INSTRUCTIONS_EVENT_NAMES, nonzero=True)
    if cycles is not None and insts is not None:
        results.append(ScalarResult(
            "CPI", cycles.value / insts.value,
            f"{cycles.name}/{insts.name}", AggregationPolicy.AVG,
        ))
        results.append(ScalarResult(
            "IPC", insts.value / cycles.value,
            f"{insts.name}/{cycles.name}", AggregationPolicy.AVG,
        ))

    branches = aggregator.get_any_of(BRANCH_EVENT_NAMES, nonzero=True)
    missed_branches = aggregator.get_any_of(BRANCH_MISS_EVENT_NAMES)
    if branches is not None and missed_branches is not None:
        results.append(ScalarResult(
            "Branch miss ratio", missed_branches.value / branches.value,
            f"{missed_branches.name}/{branches.name}", AggregationPolicy.AVG,
        ))

    return results


def compute_density_metrics(aggregator: AggregatedEvents) -> List[ScalarResult]:
    """
    Share of each instruction class in all retired instructions.

    See the Apple Silicon CPU Optimization Guide for the definitions.
    """
    insts = aggregator.get_any_of(INSTRUCTIONS_EVENT_NAMES, nonzero=True)
    if insts is None:
        return []

    results: List[ScalarResult] = []
    for event in aggregator.event_names:
        if not event.startswith(INSTRUCTION_CLASS_PREFIX) or event == TOTAL_INSTRUCTIONS_EVENT:
            continue
        value = aggregator.get_count(event)
        if not value:
            continue
        results.append(ScalarResult(
            f"{event} density (of instructions)", value / insts.value,
            f"{event}/{insts.name}", AggregationPolicy.AVG,
        ))
    return results


def compute_aggregates(aggregator: AggregatedEvents, arch: Optional[str] = None) -> List[ScalarResult]:
    """
    All derived metrics available for ``arch`` (defaults to the host).
    """
    arch = (arch or platform.machine()).lower()
    results = compute_common_metrics(aggregator)
    if arch in DENSITY_ARCHITECTURES:
        results.extend(compute_density_metrics(aggregator))
    logger.debug(f"Computed {len(results)} derived metrics for {arch}")
    return results


def compute_event_results(aggregator: AggregatedEvents, table_desc: TableDescriptor) -> List[ScalarResult]:
    """
    One per-operation result per counter, plus the trigger event for PMI tables.
    """
    values = aggregator.event_values
    results = [
        ScalarResult(event, values[i], PER_OP_UNIT, AggregationPolicy.AVG)
        for i, event in enumerate(table_desc.pmc_events)
    ]
    if table_desc.trigger_type == TriggerType.PMI:
        results.append(ScalarResult(
            table_desc.trigger_event(), values[-1], PER_OP_UNIT, AggregationPolicy.AVG,
        ))
    return results


def compute_sample_results(
    perf_events: PerfEvents,
    ops_in_window: Optional[float] = None,
    hot_symbols: int = 10,
    hot_threshold_pct: float = 1.0,
) -> List[ScalarResult]:
    """
    Results of a line-oriented trace.

    For every requested event with samples: the raw sample count, the samples
    per operation when the number of operations in the window is known, and
    the share of the hottest symbols down to ``hot_threshold_pct``.
    """
    results: List[ScalarResult] = []
    for event in perf_events.event_names:
        total = perf_events.total(event)
        if total == 0:
            continue

        results.append(ScalarResult(event, float(total), "#", AggregationPolicy.SUM))
        if ops_in_window:
            results.append(ScalarResult(
                f"{event} per op", total / ops_in_window, PER_OP_UNIT, AggregationPolicy.AVG,
            ))

        for symbol, count in perf_events.hot_symbols(event, hot_symbols):
            share = 100.0 * count / total
            if share < hot_threshold_pct:
                break
            name = str(symbol) if symbol is not None else UNKNOWN_SYMBOL
            results.append(ScalarResult(
                f"{event} @ {name}", share, "%", AggregationPolicy.AVG,
            ))
    return results
