"""
Unit tests for the windowed line trace reader.
"""

import pytest

from perfnorm.aggregation import UNKNOWN_ADDRESS
from perfnorm.models.samples import Symbol
from perfnorm.parsers import TraceFormat, get_line_parser, read_line_events

JVM_INTERPRETER = Symbol("Interpreter", "jvm.dll")
JAVA_MAIN = Symbol("main", "java.exe")


@pytest.mark.unit
class TestReadXperf:
    """Test cases for reading xperf dumper output."""

    def test_window_and_pid_filter(self, xperf_trace):
        events = read_line_events(xperf_trace, TraceFormat.XPERF, ["SampledProfile"], 7424, 1.0, 5.0)

        counts = events.events["SampledProfile"]
        assert events.total("SampledProfile") == 4
        assert counts[0x00007FFB4A4C1000] == 1
        assert counts[0x00007FFB4A4C1040] == 1
        assert counts[0x0000000140001000] == 1
        # Kernel address, not representable
        assert counts[UNKNOWN_ADDRESS] == 1

    def test_window_bounds_are_exclusive(self, xperf_trace):
        events = read_line_events(xperf_trace, TraceFormat.XPERF, ["SampledProfile"], 7424, 1.5, 3.5)

        assert events.total("SampledProfile") == 1
        assert events.events["SampledProfile"][0x00007FFB4A4C1040] == 1

    def test_symbols_attributed_by_range(self, xperf_trace):
        events = read_line_events(xperf_trace, TraceFormat.XPERF, ["SampledProfile"], 7424, 1.0, 5.0)

        assert events.methods.lookup(0x00007FFB4A4C1020) == JVM_INTERPRETER
        assert events.methods.lookup(0x0000000140001000) == JAVA_MAIN
        assert events.methods.lookup(0x00007FFB4A4C1041) is None
        assert len(events.methods) == 2

    def test_hot_symbols(self, xperf_trace):
        events = read_line_events(xperf_trace, TraceFormat.XPERF, ["SampledProfile"], 7424, 1.0, 5.0)

        assert events.hot_symbols("SampledProfile") == [
            (JVM_INTERPRETER, 2),
            (JAVA_MAIN, 1),
            (None, 1),
        ]

    def test_other_process(self, xperf_trace):
        events = read_line_events(xperf_trace, TraceFormat.XPERF, ["SampledProfile"], 912, 0.0, 100.0)

        assert events.total_all() == 1
        assert events.hot_symbols("SampledProfile") == [(Symbol("RtlWait", "ntdll.dll"), 1)]

    def test_empty_window(self, xperf_trace):
        events = read_line_events(xperf_trace, TraceFormat.XPERF, ["SampledProfile"], 7424, 5.0, 9.0)

        assert events.total_all() == 0
        assert events.hot_symbols("SampledProfile") == []
        assert len(events.methods) == 0

    def test_xperf_takes_a_single_event(self, xperf_trace):
        with pytest.raises(ValueError):
            read_line_events(xperf_trace, TraceFormat.XPERF, ["SampledProfile", "CSwitch"], 7424, 0.0, 1.0)

    def test_missing_file(self, temp_dir):
        with pytest.raises(OSError):
            read_line_events(temp_dir / "absent.txt", TraceFormat.XPERF, ["SampledProfile"], 1, 0.0, 1.0)


@pytest.mark.unit
class TestReadPerfScript:
    """Test cases for reading perf script output."""

    def test_timestamps_rebased_to_first_sample(self, perf_script_trace):
        events = read_line_events(perf_script_trace, TraceFormat.PERF_SCRIPT, ["cycles"], 4242, 1.0, 5.0)

        assert events.total("cycles") == 3

    def test_symbols(self, perf_script_trace):
        events = read_line_events(perf_script_trace, TraceFormat.PERF_SCRIPT, ["cycles"], 4242, 1.0, 5.0)

        interpreter = Symbol("Interpreter", "libjvm.so")
        assert events.hot_symbols("cycles") == [(interpreter, 2), (Symbol("main", "java"), 1)]
        # Only in-window samples define the range.
        assert events.methods.lookup(0x7F2B9C4E8000) is None
        assert events.methods.lookup(0x7F2B9C4E8080) == interpreter

    def test_several_events(self, perf_script_trace):
        events = read_line_events(
            perf_script_trace, TraceFormat.PERF_SCRIPT, ["cycles", "instructions"], 4242, -1.0, 10.0,
        )

        assert events.event_names == ["cycles", "instructions"]
        assert events.total("cycles") == 4
        assert events.total("instructions") == 1


@pytest.mark.unit
def test_structured_format_has_no_line_parser():
    with pytest.raises(ValueError):
        get_line_parser(TraceFormat.XCTRACE)
