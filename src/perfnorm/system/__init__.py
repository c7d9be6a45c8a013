"""
System interaction: running the external profilers and finding their output.
"""

from .commands import is_tool_installed, run_checked, run_command
from .tools import (
    check_xctrace_version,
    export_table,
    export_table_of_contents,
    find_trace_file,
    perf_record_command,
    perf_script,
    xctrace_command,
    xctrace_record_command,
    xperf_command,
    xperf_dump,
    xperf_start,
    xperf_stop,
)

__all__ = [
    "is_tool_installed",
    "run_checked",
    "run_command",
    "check_xctrace_version",
    "export_table",
    "export_table_of_contents",
    "find_trace_file",
    "perf_record_command",
    "perf_script",
    "xctrace_command",
    "xctrace_record_command",
    "xperf_command",
    "xperf_dump",
    "xperf_start",
    "xperf_stop",
]
