"""
Parsers for documents exported by ``xctrace export``.

Analysis of an Instruments recording takes two documents:

1. The table of contents (``xctrace export --toc``). It tells when the
   recording started and which result tables it holds. A CPU Counters
   table is described by attributes of its ``<table>`` element::

       <table schema="counters-profile" trigger="pmi" pmi-event="CORE_ACTIVE_CYCLE"
              pmi-threshold="1000000" pmc-events="INST_ALL INST_BRANCH"/>

2. The table itself (``xctrace export --xpath ...``). Every ``<row>`` holds
   a ``<sample-time>`` in nanoseconds from the start of the recording, the
   sample ``<weight>`` and the space-separated counter deltas in
   ``<pmc-events>``. Repeated values are interned by xctrace: the first
   occurrence carries an ``id`` attribute, later ones only ``ref="<id>"``.

Unlike line-oriented traces, a structured document is either valid as a
whole or rejected: any malformed row raises TraceFormatError.
"""

import logging
import shlex
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from ..models.samples import (
    ProfilingTableType,
    TableDescriptor,
    TableOfContents,
    TriggerType,
    XCTraceSample,
)
from ..validation import TraceFormatError

logger = logging.getLogger(__name__)

# Row elements the table parser reads.
SAMPLE_TIME = "sample-time"
WEIGHT = "weight"
PMC_EVENTS = "pmc-events"
_ROW_VALUES = (SAMPLE_TIME, WEIGHT, PMC_EVENTS)


def parse_record_start(text: str, path: Union[str, Path] = "") -> int:
    """Convert an ISO-8601 ``<start-date>`` into epoch milliseconds."""
    try:
        start = datetime.fromisoformat(text.strip())
    except ValueError as e:
        raise TraceFormatError(f"Unparsable recording start date '{text}': {e}", str(path))
    return int(round(start.timestamp() * 1000))


def parse_pmc_event_names(value: Optional[str]) -> Tuple[str, ...]:
    """Split the ``pmc-events`` attribute; names may be quoted."""
    if not value:
        return ()
    try:
        names = shlex.split(value)
    except ValueError:
        # Unbalanced quotes
        names = value.replace('"', " ").split()
    return tuple(name for name in names if name)


def _parse_threshold(value: Optional[str], path: Union[str, Path]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise TraceFormatError(f"Invalid trigger threshold '{value}'", str(path))


def _parse_table(element: ET.Element, path: Union[str, Path]) -> Optional[TableDescriptor]:
    table_type = ProfilingTableType.from_schema(element.get("schema", ""))
    if table_type is None:
        return None
    if table_type != ProfilingTableType.COUNTERS_PROFILE:
        return TableDescriptor(table_type=table_type)

    trigger = element.get("trigger")
    if trigger is None:
        raise TraceFormatError(f"Table '{table_type.table_name}' has no trigger attribute", str(path))
    try:
        trigger_type = TriggerType(trigger.strip().lower())
    except ValueError:
        raise TraceFormatError(f"Unknown trigger type '{trigger}'", str(path))

    pmi_event = None
    if trigger_type == TriggerType.PMI:
        pmi_names = parse_pmc_event_names(element.get("pmi-event"))
        if not pmi_names:
            raise TraceFormatError("PMI triggered table has no pmi-event attribute", str(path))
        pmi_event = pmi_names[0]
        threshold = _parse_threshold(element.get("pmi-threshold"), path)
    else:
        threshold = _parse_threshold(element.get("sample-rate-micro-seconds"), path)

    return TableDescriptor(
        table_type=table_type,
        pmc_events=parse_pmc_event_names(element.get("pmc-events")),
        trigger_type=trigger_type,
        pmi_event=pmi_event,
        trigger_threshold=threshold,
    )


def parse_table_of_contents(path: Union[str, Path]) -> TableOfContents:
    """
    Parse the table of contents of a recording.

    Args:
        path: XML document produced by ``xctrace export --toc``

    Returns:
        The recording start time and the descriptors of known tables

    Raises:
        TraceFormatError: If the document is not valid XML or has no start date
        OSError: If the file cannot be read
    """
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise TraceFormatError(f"Malformed table of contents {path}: {e}", str(path))

    start_date = root.find(".//start-date")
    if start_date is None or not (start_date.text or "").strip():
        raise TraceFormatError(f"Table of contents {path} has no recording start date", str(path))

    toc = TableOfContents(record_start_ms=parse_record_start(start_date.text, path))
    for element in root.iter("table"):
        table = _parse_table(element, path)
        if table is not None:
            toc.tables.append(table)

    logger.debug(
        f"Table of contents {path}: start={toc.record_start_ms}, "
        f"tables={[t.table_type.table_name for t in toc.tables]}"
    )
    return toc


def find_table_description(
    toc: TableOfContents,
    table_type: ProfilingTableType = ProfilingTableType.COUNTERS_PROFILE,
) -> TableDescriptor:
    """
    Select the table to analyze.

    Raises:
        TraceFormatError: If the table is absent, or has neither counters nor
            a PMI trigger, so there is nothing to aggregate
    """
    table_desc = toc.find(table_type)
    if table_desc is None:
        raise TraceFormatError(f'Table "{table_type.table_name}" was not found in the trace results.')
    if not table_desc.pmc_events and table_desc.trigger_type == TriggerType.TIME:
        raise TraceFormatError("Results does not contain any events.")
    return table_desc


def _resolve_text(element: ET.Element, interned: Dict[str, str], path: Union[str, Path]) -> str:
    ref = element.get("ref")
    if ref is not None:
        text = interned.get(ref)
        if text is None:
            raise TraceFormatError(f"Reference to unknown element id {ref}", str(path))
        return text
    return (element.text or "").strip()


def _parse_int(text: str, what: str, path: Union[str, Path]) -> int:
    try:
        return int(text)
    except ValueError:
        raise TraceFormatError(f"Invalid {what} value '{text}'", str(path))


def iter_table_samples(
    path: Union[str, Path],
    table_type: ProfilingTableType = ProfilingTableType.COUNTERS_PROFILE,
    pmc_count: Optional[int] = None,
) -> Iterator[XCTraceSample]:
    """
    Stream the rows of an exported table as samples.

    The document is parsed incrementally so that large tables are never held
    in memory at once.

    Args:
        path: XML document produced by ``xctrace export --xpath``
        table_type: Expected table schema
        pmc_count: Number of counter values each row must carry, if known

    Yields:
        One XCTraceSample per row, in document order

    Raises:
        TraceFormatError: On malformed XML, a schema mismatch or a malformed row
        OSError: If the file cannot be read
    """
    interned: Dict[str, str] = {}
    # Open elements; the last one is the parent of the element just closed.
    ancestors: List[ET.Element] = []
    rows = 0
    try:
        for event, element in ET.iterparse(str(path), events=("start", "end")):
            if event == "start":
                ancestors.append(element)
                continue
            ancestors.pop()
            tag = element.tag

            if tag in _ROW_VALUES:
                element_id = element.get("id")
                if element_id is not None:
                    interned[element_id] = (element.text or "").strip()
                continue

            if tag == "schema":
                schema = element.get("name")
                if schema is not None and schema != table_type.table_name:
                    raise TraceFormatError(
                        f"Expected table '{table_type.table_name}', found '{schema}'", str(path)
                    )
                element.clear()
                continue

            if tag != "row":
                continue

            values: Dict[str, str] = {}
            for child in element:
                if child.tag in _ROW_VALUES:
                    values[child.tag] = _resolve_text(child, interned, path)
            element.clear()
            if ancestors:
                ancestors[-1].remove(element)

            if SAMPLE_TIME not in values:
                raise TraceFormatError(f"Row {rows} has no {SAMPLE_TIME}", str(path))
            if PMC_EVENTS not in values:
                raise TraceFormatError(f"Row {rows} has no {PMC_EVENTS}", str(path))

            pmc_values = tuple(
                _parse_int(v, PMC_EVENTS, path) for v in values[PMC_EVENTS].split()
            )
            if pmc_count is not None and len(pmc_values) != pmc_count:
                raise TraceFormatError(
                    f"Row {rows} has {len(pmc_values)} counter values, expected {pmc_count}",
                    str(path),
                )

            rows += 1
            yield XCTraceSample(
                time_from_start_ns=_parse_int(values[SAMPLE_TIME], SAMPLE_TIME, path),
                weight=_parse_int(values[WEIGHT], WEIGHT, path) if WEIGHT in values else 0,
                pmc_values=pmc_values,
            )
    except ET.ParseError as e:
        raise TraceFormatError(f"Malformed table {path}: {e}", str(path))

    logger.debug(f"Parsed {rows} rows from {path}")

