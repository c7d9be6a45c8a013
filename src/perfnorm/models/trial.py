"""
Trial timing model.

The benchmark harness reports when a trial's process was started, when the
measured iterations began and ended, and how many operations were measured.
Profilers use it to pick the part of a trace that belongs to measurement and
to normalize counters per operation.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class TrialWindow:
    """
    Timing of a single trial, all timestamps in epoch milliseconds.
    """

    # When the measured process was launched.
    start_time_ms: int
    # When the first measured (non-warmup) iteration started.
    measurement_time_ms: int
    # When the last measured iteration finished.
    stop_time_ms: int
    # Number of operations completed during measurement.
    measurement_ops: int

    @property
    def measurement_delay_ms(self) -> int:
        """Time spent before measurement started (forking, warmup)."""
        return self.measurement_time_ms - self.start_time_ms

    @property
    def measured_time_ms(self) -> int:
        return self.stop_time_ms - self.measurement_time_ms

    @property
    def ops_throughput(self) -> Optional[float]:
        """Measured operations per millisecond, None for an empty measurement."""
        if self.measured_time_ms == 0:
            return None
        return self.measurement_ops / float(self.measured_time_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_time_ms": self.start_time_ms,
            "measurement_time_ms": self.measurement_time_ms,
            "stop_time_ms": self.stop_time_ms,
            "measurement_ops": self.measurement_ops,
        }
