"""
Trace parsers.

Each supported tool output is handled by a format-specific parser; the format
tag selects which one runs:

- TraceFormat.XPERF / TraceFormat.PERF_SCRIPT: text rows with a sampled
  address, read through ``read_line_events``
- TraceFormat.XCTRACE: XML table of contents plus a counters table, read
  through ``parse_table_of_contents`` and ``iter_table_samples``
"""

from .formats import TraceFormat
from .line_reader import LINE_PARSERS, get_line_parser, read_line_events
from .perf_script import parse_perf_script_line
from .xctrace import (
    find_table_description,
    iter_table_samples,
    parse_table_of_contents,
)
from .xperf import parse_xperf_line

__all__ = [
    "TraceFormat",
    "LINE_PARSERS",
    "get_line_parser",
    "read_line_events",
    "parse_perf_script_line",
    "parse_xperf_line",
    "find_table_description",
    "iter_table_samples",
    "parse_table_of_contents",
]
