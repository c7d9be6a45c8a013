"""
Sample and trace metadata models.

This module defines the value types that flow from the trace parsers into the
aggregation layer:

- Symbol: identity of an attributable unit of code (name + module)
- LineSample: one row of a line-oriented trace (xperf dumper, perf script)
- XCTraceSample: one row of an xctrace counters table
- TableDescriptor / TableOfContents: what a structured trace contains

Samples are ephemeral; they are consumed by the aggregators as soon as they
are produced and never retained.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Symbol:
    """A code symbol and the module (library, executable) that owns it."""

    name: str
    module: str

    def __str__(self) -> str:
        if self.module:
            return f"{self.module}!{self.name}"
        return self.name


@dataclass(frozen=True)
class LineSample:
    """
    One parsed row of a line-oriented trace.

    ``address`` is None when the row's address could not be represented as a
    signed 64-bit value (kernel addresses, garbage); such samples are counted
    but never attributed to a symbol.
    """

    event: str
    timestamp_ms: float
    pid: int
    address: Optional[int]
    module: str
    symbol: str


class TriggerType(Enum):
    """What makes the CPU Counters instrument take a sample."""

    # Fixed timer interrupts.
    TIME = "time"
    # Performance monitor interrupts after a counter threshold.
    PMI = "pmi"


class ProfilingTableType(Enum):
    """Result tables an xctrace recording may contain."""

    CPU_PROFILE = "cpu-profile"
    TIME_PROFILE = "time-profile"
    COUNTERS_PROFILE = "counters-profile"

    @property
    def table_name(self) -> str:
        return self.value

    @classmethod
    def from_schema(cls, schema: str) -> Optional["ProfilingTableType"]:
        for table_type in cls:
            if table_type.value == schema:
                return table_type
        return None


# Pseudo-event that carries the timer period of time-triggered tables.
TIME_TRIGGER_EVENT = "TIME_MICRO_SEC"


@dataclass(frozen=True)
class TableDescriptor:
    """
    Describes one result table of a structured trace.

    Attributes:
        table_type: Kind of table
        pmc_events: Counter names, in the order row values are reported
        trigger_type: Timer or PMI driven sampling
        pmi_event: Counter whose overflow triggers a sample (PMI only)
        trigger_threshold: Timer period (us) or PMI threshold, when known
    """

    table_type: ProfilingTableType
    pmc_events: Tuple[str, ...] = ()
    trigger_type: TriggerType = TriggerType.TIME
    pmi_event: Optional[str] = None
    trigger_threshold: Optional[int] = None

    def trigger_event(self) -> str:
        """Name of the pseudo-event that carries each sample's weight."""
        if self.trigger_type == TriggerType.PMI and self.pmi_event:
            return self.pmi_event
        return TIME_TRIGGER_EVENT


@dataclass
class TableOfContents:
    """Tables found in a trace and the wall-clock time the recording started."""

    record_start_ms: int
    tables: List[TableDescriptor] = field(default_factory=list)

    def find(self, table_type: ProfilingTableType) -> Optional[TableDescriptor]:
        for table in self.tables:
            if table.table_type == table_type:
                return table
        return None


@dataclass(frozen=True)
class XCTraceSample:
    """One row of a counters table: timestamp, trigger weight and counter deltas."""

    time_from_start_ns: int
    weight: int
    pmc_values: Tuple[int, ...]
