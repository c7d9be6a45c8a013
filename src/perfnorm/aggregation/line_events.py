"""
Accumulation of line-oriented samples.

The accumulator is threaded through a single parse pass: every in-window
sample is added once, then ``build()`` freezes the per-event address
multisets and derives the symbol interval map from the addresses observed
for each symbol.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..models.samples import LineSample, Symbol
from ..symbols import Deduplicator, IntervalMap

logger = logging.getLogger(__name__)

# Address recorded for samples whose real address could not be represented.
UNKNOWN_ADDRESS = 0


@dataclass
class PerfEvents:
    """
    Result of reading a line-oriented trace.

    Attributes:
        event_names: Requested events, in request order
        events: Per-event multiset of sampled addresses
        methods: Address ranges of the symbols seen in the window
    """

    event_names: List[str]
    events: Dict[str, Counter]
    methods: IntervalMap

    def total(self, event: str) -> int:
        counts = self.events.get(event)
        if counts is None:
            return 0
        return sum(counts.values())

    def total_all(self) -> int:
        return sum(self.total(event) for event in self.event_names)

    def hot_symbols(self, event: str, top: Optional[int] = None) -> List[Tuple[Optional[Symbol], int]]:
        """
        Sample counts per symbol, hottest first.

        Samples at the unknown address, or at addresses outside every symbol
        range, are reported under ``None``.
        """
        counts = self.events.get(event)
        if not counts:
            return []

        per_symbol: Counter = Counter()
        for address, count in counts.items():
            symbol = None
            if address != UNKNOWN_ADDRESS:
                symbol = self.methods.lookup(address)
            per_symbol[symbol] += count
        return per_symbol.most_common(top)


class LineEventsAccumulator:
    """Builder for PerfEvents; single writer, single pass."""

    def __init__(self, event_names: Sequence[str]):
        self._event_names = list(event_names)
        self._events: Dict[str, Counter] = {name: Counter() for name in self._event_names}
        self._dedup: Deduplicator[Symbol] = Deduplicator()
        # Distinct (symbol, address) pairs, in first-seen order.
        self._observed: Dict[Tuple[Symbol, int], None] = {}
        self._samples = 0

    @property
    def samples(self) -> int:
        return self._samples

    def add(self, sample: LineSample) -> None:
        counts = self._events.get(sample.event)
        if counts is None:
            raise KeyError(f"Event '{sample.event}' was not requested")
        self._samples += 1

        if sample.address is None:
            counts[UNKNOWN_ADDRESS] += 1
            return

        counts[sample.address] += 1
        symbol = self._dedup.dedup(Symbol(sample.symbol, sample.module))
        self._observed[(symbol, sample.address)] = None

    def build(self) -> PerfEvents:
        methods: IntervalMap[Symbol] = IntervalMap.from_observations(self._observed)
        logger.debug(
            f"Accumulated {self._samples} samples over {len(self._dedup)} symbols"
        )
        return PerfEvents(
            event_names=list(self._event_names),
            events=self._events,
            methods=methods,
        )
