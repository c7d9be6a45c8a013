"""
Identity interning for parsed symbols.

A trace with millions of samples references the same few thousand symbols
over and over. Interning keeps exactly one instance per distinct value so
that later stages can key dictionaries on the instances themselves.
"""

from typing import Dict, Generic, Hashable, TypeVar

T = TypeVar("T", bound=Hashable)


class Deduplicator(Generic[T]):
    """
    Returns a canonical instance for every value it has seen.

    The first instance passed for a given value becomes the canonical one.
    Entries are never evicted; the deduplicator lives for one parse pass.
    """

    def __init__(self) -> None:
        self._canonical: Dict[T, T] = {}

    def dedup(self, candidate: T) -> T:
        existing = self._canonical.get(candidate)
        if existing is None:
            self._canonical[candidate] = candidate
            return candidate
        return existing

    def __len__(self) -> int:
        return len(self._canonical)
