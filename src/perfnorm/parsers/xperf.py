"""
Parser for text dumps produced by ``xperf -i trace.etl -symbols -a dumper``.

Sample rows look like::

    SampledProfile,  1523042,  java.exe (7424),  5204,  0x00007ffb4a4c1b00,  1,  Unknown,  jvm.dll!JVM_Foo, ...

Fields are separated by a comma followed by whitespace. The fields used are
the event name (0), the timestamp in microseconds from the start of the
trace (1), ``process name (PID)`` (2), the sampled address (4) and
``module!symbol`` (7). Every other event kind, the header rows and rows
that do not follow this layout are ignored.
"""

import re
from typing import Collection, Optional

from ..models.samples import LineSample
from .addresses import parse_address, split_module_symbol

FIELD_SEPARATOR = re.compile(r",\s+")

EVENT_FIELD = 0
TIMESTAMP_FIELD = 1
PROCESS_FIELD = 2
ADDRESS_FIELD = 4
SYMBOL_FIELD = 7


def parse_pid(process_field: str) -> Optional[int]:
    """Extract the PID from ``name (PID)``; None when the parentheses are missing."""
    open_idx = process_field.find("(")
    close_idx = process_field.find(")")
    if open_idx == -1 or close_idx == -1 or close_idx < open_idx:
        return None
    try:
        return int(process_field[open_idx + 1:close_idx].strip())
    except ValueError:
        return None


def parse_xperf_line(line: str, events: Collection[str]) -> Optional[LineSample]:
    """
    Parse one dumper row into a LineSample.

    Args:
        line: Raw text row
        events: Event names to keep

    Returns:
        The parsed sample, or None if the row belongs to another event or is
        malformed. An unrepresentable address still yields a sample, with
        ``address`` set to None.
    """
    elems = FIELD_SEPARATOR.split(line.strip())

    event = elems[0].strip()
    if event not in events:
        return None
    if len(elems) <= SYMBOL_FIELD:
        return None

    pid = parse_pid(elems[PROCESS_FIELD])
    if pid is None:
        # Malformed PID, probably the header.
        return None

    try:
        timestamp_ms = float(elems[TIMESTAMP_FIELD].strip()) / 1000.0
    except ValueError:
        return None

    module, symbol = split_module_symbol(elems[SYMBOL_FIELD])

    return LineSample(
        event=event,
        timestamp_ms=timestamp_ms,
        pid=pid,
        address=parse_address(elems[ADDRESS_FIELD]),
        module=module,
        symbol=symbol,
    )
