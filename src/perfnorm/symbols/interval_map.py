"""
Address range to symbol lookup.

Address-based traces only tell us which addresses each symbol was sampled at.
The map approximates a symbol's code range by the lowest and highest sampled
address and answers "which symbol covers this address" from those ranges.
"""

import heapq
import logging
from bisect import bisect_right
from typing import Dict, Generic, Iterable, List, NamedTuple, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class IntervalEntry(NamedTuple):
    low: int
    high: int
    value: object


class IntervalMap(Generic[T]):
    """
    Maps inclusive ``[low, high]`` address ranges to values.

    Ranges of different values may overlap, since they are built from observed
    samples rather than from symbol tables. When several ranges contain an
    address, the one registered first wins, so identical input order always
    yields identical answers.

    The ranges are flattened into sorted, non-overlapping segments on the
    first lookup after a change, so a lookup is a binary search.
    """

    def __init__(self) -> None:
        self._entries: List[IntervalEntry] = []
        self._starts: Optional[List[int]] = None
        self._owners: List[Optional[T]] = []

    def add(self, value: T, low: int, high: int) -> None:
        if low > high:
            raise ValueError(f"Interval low bound {low:#x} exceeds high bound {high:#x}")
        self._entries.append(IntervalEntry(low, high, value))
        self._starts = None

    def lookup(self, address: int) -> Optional[T]:
        """Return the first registered value whose range contains ``address``."""
        if self._starts is None:
            self._flatten()
        index = bisect_right(self._starts, address) - 1
        if index < 0:
            return None
        return self._owners[index]

    def _flatten(self) -> None:
        # Segment i spans [starts[i], starts[i + 1]) and is owned by the
        # lowest-index entry covering it.
        entries = self._entries
        by_low = sorted(range(len(entries)), key=lambda i: entries[i].low)
        starts = sorted({e.low for e in entries} | {e.high + 1 for e in entries})

        owners: List[Optional[T]] = []
        active: List[int] = []
        pending = 0
        for start in starts:
            while pending < len(by_low) and entries[by_low[pending]].low <= start:
                heapq.heappush(active, by_low[pending])
                pending += 1
            while active and entries[active[0]].high < start:
                heapq.heappop(active)
            owners.append(entries[active[0]].value if active else None)

        self._starts = starts
        self._owners = owners

    def entries(self) -> List[IntervalEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_observations(cls, observations: Iterable[Tuple[T, int]]) -> "IntervalMap[T]":
        """
        Build one interval per distinct value from ``(value, address)`` pairs.

        Intervals are registered in the order each value was first observed.
        """
        bounds: Dict[T, List[int]] = {}
        for value, address in observations:
            found = bounds.get(value)
            if found is None:
                bounds[value] = [address, address]
            elif address < found[0]:
                found[0] = address
            elif address > found[1]:
                found[1] = address

        interval_map: IntervalMap[T] = cls()
        for value, (low, high) in bounds.items():
            interval_map.add(value, low, high)
        logger.debug(f"Built interval map with {len(interval_map)} ranges")
        return interval_map
