"""
Symbol attribution for address-based traces.
"""

from .deduplicator import Deduplicator
from .interval_map import IntervalEntry, IntervalMap

__all__ = [
    "Deduplicator",
    "IntervalEntry",
    "IntervalMap",
]
