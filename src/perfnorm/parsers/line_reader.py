"""
Windowed reader for line-oriented traces.

Both line formats go through the same pass: parse a row, keep it only if it
belongs to a requested event, to the profiled process and to the time window,
and feed it to a LineEventsAccumulator. Unparsable rows are skipped; only
I/O errors abort the pass.
"""

import logging
from pathlib import Path
from typing import Callable, Collection, Dict, Optional, Sequence, Union

from ..aggregation.line_events import LineEventsAccumulator, PerfEvents
from ..models.samples import LineSample
from ..validation import handle_file_error
from .formats import TraceFormat
from .perf_script import parse_perf_script_line
from .xperf import parse_xperf_line

logger = logging.getLogger(__name__)

LineParser = Callable[[str, Collection[str]], Optional[LineSample]]

LINE_PARSERS: Dict[TraceFormat, LineParser] = {
    TraceFormat.XPERF: parse_xperf_line,
    TraceFormat.PERF_SCRIPT: parse_perf_script_line,
}


def get_line_parser(trace_format: TraceFormat) -> LineParser:
    parser = LINE_PARSERS.get(trace_format)
    if parser is None:
        raise ValueError(f"{trace_format.value} is not a line-oriented trace format")
    return parser


def read_line_events(
    path: Union[str, Path],
    trace_format: TraceFormat,
    requested_events: Sequence[str],
    pid: int,
    read_from_ms: float,
    read_to_ms: float,
) -> PerfEvents:
    """
    Read the samples of one process inside a time window.

    Args:
        path: Text trace exported by the profiler
        trace_format: Which line format the file is in
        requested_events: Events to keep; xperf traces take exactly one
        pid: Process to keep samples for
        read_from_ms: Window start, milliseconds from the start of the trace
        read_to_ms: Window end, milliseconds from the start of the trace

    Returns:
        PerfEvents with per-event address multisets and the symbol map

    Raises:
        ValueError: If the format is not line-oriented or xperf is asked for
            more than one event
        OSError: If the trace cannot be read
    """
    parse_line = get_line_parser(trace_format)
    if trace_format == TraceFormat.XPERF and len(requested_events) != 1:
        raise ValueError(
            f"xperf traces carry a single event kind, got {list(requested_events)}"
        )

    events = frozenset(requested_events)
    accumulator = LineEventsAccumulator(requested_events)
    origin_ms: Optional[float] = None
    skipped = 0
    foreign = 0
    outside = 0

    try:
        reader = open(path, "r", encoding="utf-8", errors="replace")
    except OSError as e:
        handle_file_error(e, f"opening trace {path}", reraise=True, logger=logger)
        raise

    with reader:
        for line in reader:
            sample = parse_line(line, events)
            if sample is None:
                skipped += 1
                continue

            timestamp_ms = sample.timestamp_ms
            if trace_format.has_absolute_timestamps:
                if origin_ms is None:
                    origin_ms = timestamp_ms
                timestamp_ms -= origin_ms

            if sample.pid != pid:
                foreign += 1
                continue

            if timestamp_ms <= read_from_ms or timestamp_ms >= read_to_ms:
                outside += 1
                continue

            accumulator.add(sample)

    logger.debug(
        f"Read {path}: {accumulator.samples} samples kept, {outside} outside window, "
        f"{foreign} from other processes, {skipped} other rows"
    )
    return accumulator.build()
