"""
Parser for ``perf script -F pid,time,event,ip,sym,dso`` output.

Rows look like::

    31337 86231.571022:     cycles:u:      7f2b9c4e81a0 Interpreter+0x1a0 (/opt/jdk/lib/server/libjvm.so)

The timestamp is in seconds of the system clock; the reader rebases it to the
first sample of the file. Event names may carry a modifier (``cycles:u``),
which matches a request for either ``cycles:u`` or ``cycles``.
"""

import os
import re
from typing import Collection, Optional

from ..models.samples import LineSample
from .addresses import parse_address

SAMPLE_LINE = re.compile(
    r"^\s*(?P<pid>\d+)\s+"
    r"(?P<time>\d+(?:\.\d+)?):\s+"
    r"(?:(?P<period>\d+)\s+)?"
    r"(?P<event>\S+?):\s+"
    r"(?P<ip>[0-9a-fA-Fx]+)\s+"
    r"(?P<sym>.*?)\s*"
    r"\((?P<dso>[^()]*)\)\s*$"
)

SYMBOL_OFFSET = re.compile(r"\+0x[0-9a-fA-F]+$")


def _match_event(event: str, events: Collection[str]) -> Optional[str]:
    if event in events:
        return event
    base = event.split(":", 1)[0]
    if base in events:
        return base
    return None


def parse_perf_script_line(line: str, events: Collection[str]) -> Optional[LineSample]:
    """
    Parse one ``perf script`` row into a LineSample.

    Returns None for rows of other events and for rows that do not match the
    expected field layout (headers, stack continuation lines, comments).
    """
    match = SAMPLE_LINE.match(line)
    if match is None:
        return None

    event = _match_event(match.group("event"), events)
    if event is None:
        return None

    symbol = SYMBOL_OFFSET.sub("", match.group("sym").strip())
    dso = match.group("dso").strip()

    return LineSample(
        event=event,
        timestamp_ms=float(match.group("time")) * 1000.0,
        pid=int(match.group("pid")),
        address=parse_address(match.group("ip")),
        module=os.path.basename(dso) if dso else "",
        symbol=symbol,
    )
