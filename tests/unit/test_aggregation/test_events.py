"""
Unit tests for structured counter aggregation.
"""

import pytest

from perfnorm.aggregation import AggregatedEvents, CounterValue
from perfnorm.models.samples import (
    ProfilingTableType,
    TableDescriptor,
    TriggerType,
    XCTraceSample,
)
from perfnorm.validation import ProfilerError


def make_table(events=("Cycles", "Instructions"), trigger=TriggerType.TIME, pmi_event=None):
    return TableDescriptor(
        table_type=ProfilingTableType.COUNTERS_PROFILE,
        pmc_events=tuple(events),
        trigger_type=trigger,
        pmi_event=pmi_event,
    )


@pytest.mark.unit
class TestAggregatedEvents:
    """Test cases for AggregatedEvents accumulation."""

    def test_event_names_end_with_trigger(self):
        assert AggregatedEvents(make_table()).event_names == ("Cycles", "Instructions", "TIME_MICRO_SEC")

        pmi = make_table(("INST_ALL",), TriggerType.PMI, "CORE_ACTIVE_CYCLE")
        assert AggregatedEvents(pmi).event_names == ("INST_ALL", "CORE_ACTIVE_CYCLE")

    def test_counters_sum_and_weight_latest_wins(self):
        aggregator = AggregatedEvents(make_table())
        aggregator.add(XCTraceSample(100, 1000, (10, 20)))
        aggregator.add(XCTraceSample(300, 1200, (5, 7)))
        aggregator.add(XCTraceSample(200, 900, (1, 1)))

        assert aggregator.event_values == (16.0, 28.0, 900)
        assert aggregator.events_count == 3
        assert aggregator.min_timestamp_ns == 100
        assert aggregator.max_timestamp_ns == 300

    def test_too_many_counters(self):
        aggregator = AggregatedEvents(make_table(("Cycles",)))

        with pytest.raises(ValueError):
            aggregator.add(XCTraceSample(100, 1000, (1, 2)))

    def test_normalize_by_throughput(self):
        aggregator = AggregatedEvents(make_table())
        aggregator.add_all([
            XCTraceSample(1_000_000, 0, (60, 30)),
            XCTraceSample(3_000_000, 0, (40, 20)),
        ])

        # 2 ms between the samples, 10 ops per ms.
        aggregator.normalize_by_throughput(10.0)

        assert aggregator.event_values[0] == pytest.approx(5000.0)
        assert aggregator.event_values[1] == pytest.approx(2500.0)

    def test_normalize_single_timestamp_fails(self):
        aggregator = AggregatedEvents(make_table())
        aggregator.add(XCTraceSample(100, 0, (1, 1)))
        aggregator.add(XCTraceSample(100, 0, (1, 1)))

        with pytest.raises(ProfilerError, match="Min and max timestamps are the same."):
            aggregator.normalize_by_throughput(1.0)

    def test_normalize_without_samples_fails(self):
        with pytest.raises(ProfilerError):
            AggregatedEvents(make_table()).normalize_by_throughput(1.0)

    def test_normalize_zero_throughput_fails(self):
        aggregator = AggregatedEvents(make_table())
        aggregator.add_all([XCTraceSample(1, 0, (1, 1)), XCTraceSample(2, 0, (1, 1))])

        with pytest.raises(ProfilerError):
            aggregator.normalize_by_throughput(0.0)


@pytest.mark.unit
class TestEventLookup:
    """Test cases for get_count and get_any_of."""

    def test_get_count(self):
        aggregator = AggregatedEvents(make_table())
        aggregator.add(XCTraceSample(1, 0, (3, 4)))

        assert aggregator.get_count("Instructions") == 4
        assert aggregator.get_count("Missing") is None

    def test_first_present_alias_wins(self):
        aggregator = AggregatedEvents(make_table(("B", "A")))
        aggregator.add(XCTraceSample(1, 0, (2, 1)))

        assert aggregator.get_any_of(["A", "B"]) == CounterValue("A", 1)
        assert aggregator.get_any_of(["X", "B"]) == CounterValue("B", 2)
        assert aggregator.get_any_of(["X", "Y"]) is None

    def test_nonzero_skips_zero_counters(self):
        aggregator = AggregatedEvents(make_table(("A", "B")))
        aggregator.add(XCTraceSample(1, 0, (0, 5)))

        assert aggregator.get_any_of(["A", "B"]) == CounterValue("A", 0)
        assert aggregator.get_any_of(["A", "B"], nonzero=True) == CounterValue("B", 5)
