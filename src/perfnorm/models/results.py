"""
Result data models.

A trial's analysis ends with a list of ScalarResult objects. Each one is a
named scalar with a unit and a policy telling the harness how values from
several forks are combined.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class AggregationPolicy(Enum):
    """How values of the same result from different forks are merged."""
    AVG = "avg"
    SUM = "sum"
    MIN = "min"
    MAX = "max"


@dataclass(frozen=True)
class ScalarResult:
    """
    One derived metric.

    The unit of ratio metrics is written as ``numerator/denominator`` using
    the exact counter names that were resolved on the host, e.g.
    ``CPU_CLK_UNHALTED.THREAD/INST_RETIRED.ANY``.
    """

    label: str
    value: float
    unit: str
    policy: AggregationPolicy = AggregationPolicy.AVG

    def to_row(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "value": float(self.value),
            "unit": self.unit,
            "policy": self.policy.value,
        }

    def __str__(self) -> str:
        return f"{self.label}: {self.value:.3f} {self.unit}"
