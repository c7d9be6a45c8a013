"""
Aggregation of structured counter samples.

AggregatedEvents sums the per-counter deltas of every sample inside the
measured window and keeps the trigger weight of the most recent sample in a
trailing pseudo-event slot. Filtering samples by time is the caller's job.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..models.samples import TableDescriptor, XCTraceSample
from ..validation import ProfilerError

logger = logging.getLogger(__name__)

NS_PER_SECOND = 1e9


@dataclass(frozen=True)
class CounterValue:
    """A counter value together with the exact event name it was read from."""

    name: str
    value: float


class AggregatedEvents:
    """
    Running per-event totals for one trial.

    Event order is the table's PMC event order followed by the trigger event.
    """

    def __init__(self, table_desc: TableDescriptor):
        names = list(table_desc.pmc_events)
        names.append(table_desc.trigger_event())
        self._event_names: Tuple[str, ...] = tuple(names)
        self._event_values: List[float] = [0.0] * len(names)
        self._events_count = 0
        self._min_timestamp_ns: Optional[int] = None
        self._max_timestamp_ns: Optional[int] = None

    @property
    def event_names(self) -> Tuple[str, ...]:
        return self._event_names

    @property
    def event_values(self) -> Tuple[float, ...]:
        return tuple(self._event_values)

    @property
    def events_count(self) -> int:
        return self._events_count

    @property
    def min_timestamp_ns(self) -> Optional[int]:
        return self._min_timestamp_ns

    @property
    def max_timestamp_ns(self) -> Optional[int]:
        return self._max_timestamp_ns

    def add(self, sample: XCTraceSample) -> None:
        counters = sample.pmc_values
        if len(counters) > len(self._event_values) - 1:
            raise ValueError(
                f"Sample carries {len(counters)} counters, table has {len(self._event_values) - 1}"
            )
        for i, delta in enumerate(counters):
            self._event_values[i] += delta
        # The weight is a sampling rate rather than a delta: latest wins.
        self._event_values[-1] = sample.weight

        timestamp = sample.time_from_start_ns
        if self._min_timestamp_ns is None or timestamp < self._min_timestamp_ns:
            self._min_timestamp_ns = timestamp
        if self._max_timestamp_ns is None or timestamp > self._max_timestamp_ns:
            self._max_timestamp_ns = timestamp
        self._events_count += 1

    def add_all(self, samples: Iterable[XCTraceSample]) -> None:
        for sample in samples:
            self.add(sample)

    def normalize_by_throughput(self, throughput: float) -> None:
        """
        Turn totals into counts per operation.

        Each total is divided by the sampled time span in seconds and by the
        throughput in operations per millisecond.

        Raises:
            ProfilerError: If the samples do not span any time
        """
        if self._min_timestamp_ns is None or self._max_timestamp_ns == self._min_timestamp_ns:
            raise ProfilerError("Min and max timestamps are the same.")
        if not throughput:
            raise ProfilerError("Cannot normalize by a zero throughput.")

        time_span_s = (self._max_timestamp_ns - self._min_timestamp_ns) / NS_PER_SECOND
        self._event_values = [
            value / time_span_s / throughput for value in self._event_values
        ]
        logger.debug(
            f"Normalized {self._events_count} samples over {time_span_s:.6f}s "
            f"at {throughput:.3f} ops/ms"
        )

    def get_count(self, event: str) -> Optional[float]:
        try:
            idx = self._event_names.index(event)
        except ValueError:
            return None
        return self._event_values[idx]

    def get_any_of(self, events: Iterable[str], nonzero: bool = False) -> Optional[CounterValue]:
        """
        Resolve the first of ``events`` that is present.

        With ``nonzero`` set, present but zero counters are passed over. The
        first match wins even if a later alias would be more precise.
        """
        for event in events:
            value = self.get_count(event)
            if value is None:
                continue
            if nonzero and value == 0.0:
                continue
            return CounterValue(event, value)
        return None
