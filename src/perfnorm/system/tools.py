"""
Command lines of the external profilers.

Only command construction, invocation and artifact discovery live here; the
produced traces are parsed by ``perfnorm.parsers``.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..models.samples import ProfilingTableType
from ..validation import ProfilerError
from .commands import is_tool_installed, run_checked, run_command

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

MSG_XPERF_UNABLE_START = (
    "Unable to start the profiler. Try running as Administrator, and ensure that "
    "previous profiling session is stopped. Use 'xperf -stop' to stop the active profiling session."
)
MSG_XPERF_UNABLE_STOP = "Unable to stop the profiler. Please try running as Administrator."

# Fields the perf-script parser expects, in this order.
PERF_SCRIPT_FIELDS = "pid,time,event,ip,sym,dso"

XCTRACE_VERSION = re.compile(r"xctrace version (\d+)")


# --- xctrace ---


def xctrace_command(xctrace_path: str = "") -> List[str]:
    """Program prefix used to invoke xctrace."""
    if xctrace_path:
        return [xctrace_path]
    return ["xcrun", "xctrace"]


def check_xctrace_version(xctrace: Sequence[str], min_major: int) -> int:
    """
    Ensure xctrace is at least ``min_major``; counters tables need 13+.

    Raises:
        ProfilerError: If xctrace is missing or too old
    """
    stdout = run_checked([*xctrace, "version"], "Unable to query xctrace version")
    match = XCTRACE_VERSION.search(stdout)
    if match is None:
        raise ProfilerError(f"Unrecognized xctrace version output: {stdout.strip()}")
    major = int(match.group(1))
    if major < min_major:
        raise ProfilerError(f"xctrace {min_major} or newer is required, found {major}")
    return major


def xctrace_record_command(xctrace: Sequence[str], output_dir: PathLike, template: str) -> List[str]:
    """Prefix that makes xctrace launch and record the benchmark command."""
    return [
        *xctrace, "record",
        "--template", template,
        "--output", str(output_dir),
        "--target-stdout", "-",
        "--launch", "--",
    ]


def find_trace_file(directory: PathLike) -> Path:
    """
    Locate the single ``.trace`` bundle written into ``directory``.

    Raises:
        ProfilerError: If there is no trace or more than one
    """
    traces = sorted(Path(directory).glob("*.trace"))
    if not traces:
        raise ProfilerError(f"No trace file found in {directory}")
    if len(traces) > 1:
        raise ProfilerError(f"Multiple trace files found in {directory}: {[t.name for t in traces]}")
    return traces[0]


def export_table_of_contents(xctrace: Sequence[str], trace_file: PathLike, output: PathLike) -> None:
    run_checked(
        [*xctrace, "export", "--input", str(trace_file), "--output", str(output), "--toc"],
        "Failed to export the table of contents",
    )


def export_table(
    xctrace: Sequence[str],
    trace_file: PathLike,
    output: PathLike,
    table_type: ProfilingTableType,
) -> None:
    xpath = f'/trace-toc/run[@number="1"]/data/table[@schema="{table_type.table_name}"]'
    run_checked(
        [*xctrace, "export", "--input", str(trace_file), "--output", str(output), "--xpath", xpath],
        f"Failed to export table {table_type.table_name}",
    )


# --- xperf ---


def xperf_command(xperf_dir: str = "") -> str:
    if xperf_dir:
        return str(Path(xperf_dir) / "xperf")
    return "xperf"


def xperf_start(xperf: str, providers: str) -> None:
    run_checked([xperf, "-on", providers], MSG_XPERF_UNABLE_START)


def xperf_stop(xperf: str, etl_file: PathLike) -> None:
    run_checked([xperf, "-d", str(etl_file)], MSG_XPERF_UNABLE_STOP)


def xperf_dump(xperf: str, etl_file: PathLike, output: PathLike, symbol_dir: Optional[str] = None) -> None:
    """Convert a binary ``.etl`` recording into dumper text."""
    env = {"_NT_SYMBOL_PATH": symbol_dir} if symbol_dir else None
    code, _, _ = run_command(
        [xperf, "-i", str(etl_file), "-symbols", "-a", "dumper"],
        env=env,
        output_path=output,
    )
    if code != 0:
        raise ProfilerError(f"Failed to convert {etl_file} to text (exit code {code})")


# --- perf ---


def perf_record_command(perf: str, events: Sequence[str], data_file: PathLike) -> List[str]:
    return [perf, "record", "-e", ",".join(events), "-o", str(data_file), "--"]


def perf_script(perf: str, data_file: PathLike, output: PathLike) -> None:
    code, _, _ = run_command(
        [perf, "script", "-i", str(data_file), "-F", PERF_SCRIPT_FIELDS],
        output_path=output,
    )
    if code != 0:
        raise ProfilerError(f"Failed to convert {data_file} with perf script (exit code {code})")
