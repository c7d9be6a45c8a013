"""
Command-line interface for perfnorm.

Analyzes a trace artifact exported by an external profiler for one benchmark
trial and prints the derived metrics. One sub-command per trace format:

    perfnorm xctrace --toc toc.xml --table table.xml --start ... --ops ...
    perfnorm xperf --trace perf.txt --pid 1234 --start ... --ops ...
    perfnorm perf-script --trace perf.txt --pid 1234 --events cycles ...
"""

import argparse
import logging
import sys
import time
import tomllib
from pathlib import Path
from typing import List, Optional

from ..config import get_config, set_config_path
from ..models.trial import TrialWindow
from ..parsers.formats import TraceFormat
from ..profilers import analyze_trial
from ..storage import ResultStorageManager
from ..validation import (
    ProfilerError,
    ValidationError,
    handle_cli_error,
    validate_event_names,
    validate_path_exists,
    validate_positive_integer,
)

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def _add_window_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("trial window")
    group.add_argument("--start", type=int, required=True,
                       help="Epoch milliseconds when the benchmark process was started.")
    group.add_argument("--measurement", type=int, required=True,
                       help="Epoch milliseconds when the measured part began.")
    group.add_argument("--stop", type=int, required=True,
                       help="Epoch milliseconds when the measured part ended.")
    group.add_argument("--ops", type=int, required=True,
                       help="Operations completed during the measured part.")


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, help="Path to config.toml.")
    parser.add_argument("--output-dir", type=Path,
                        help="Save the results to this directory in the configured storage format.")
    parser.add_argument("--name", type=str,
                        help="Base name of the saved result files (default: <format>_<timestamp>).")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="perfnorm",
        description="Normalize external profiler traces into per-operation benchmark metrics.",
    )
    subparsers = parser.add_subparsers(dest="format", required=True)

    xctrace = subparsers.add_parser(TraceFormat.XCTRACE.value, help="Exported xctrace (Instruments) XML.")
    xctrace.add_argument("--toc", type=Path, required=True, help="Exported table of contents.")
    xctrace.add_argument("--table", type=Path, required=True, help="Exported counters table.")
    xctrace.add_argument("--arch", type=str,
                         help="Architecture of the recording host (default: this machine).")
    _add_window_arguments(xctrace)
    _add_common_arguments(xctrace)

    for trace_format, help_text in (
        (TraceFormat.XPERF, "Text dump of an xperf recording."),
        (TraceFormat.PERF_SCRIPT, "Output of 'perf script -F pid,time,event,ip,sym,dso'."),
    ):
        sub = subparsers.add_parser(trace_format.value, help=help_text)
        sub.add_argument("--trace", type=Path, required=True, help="Text trace to analyze.")
        sub.add_argument("--pid", type=int, required=True, help="PID of the measured process.")
        sub.add_argument("--events", type=str,
                         help="Comma-separated events to count (default: from config).")
        _add_window_arguments(sub)
        _add_common_arguments(sub)

    return parser


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line entry point.

    Raises:
        SystemExit: On configuration errors, invalid arguments or analysis failures.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    trace_format = TraceFormat(args.format)

    if args.config:
        set_config_path(args.config)
    try:
        app_config = get_config()
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            include_traceback=True,
            logger=logger,
        )
    logging.getLogger().setLevel(app_config.logging.level)

    try:
        window = TrialWindow(
            start_time_ms=validate_positive_integer(args.start, min_value=0, field_name="--start"),
            measurement_time_ms=validate_positive_integer(args.measurement, min_value=0, field_name="--measurement"),
            stop_time_ms=validate_positive_integer(args.stop, min_value=0, field_name="--stop"),
            measurement_ops=validate_positive_integer(args.ops, min_value=0, field_name="--ops"),
        )
        if trace_format == TraceFormat.XCTRACE:
            trace_path = Path(validate_path_exists(args.table, field_name="--table"))
            toc_path = Path(validate_path_exists(args.toc, field_name="--toc"))
            pid = None
            events = None
        else:
            trace_path = Path(validate_path_exists(args.trace, field_name="--trace"))
            toc_path = None
            pid = validate_positive_integer(args.pid, min_value=0, field_name="--pid")
            events = validate_event_names(args.events, field_name="--events") if args.events else None
    except (ValidationError, ValueError) as e:
        handle_cli_error(
            error=e,
            context="argument validation",
            exit_code=2,
            include_traceback=False,
            logger=logger,
        )

    try:
        results = analyze_trial(
            trace_format,
            window,
            trace_path,
            pid=pid,
            toc_path=toc_path,
            events=events,
            config=app_config,
            arch=getattr(args, "arch", None),
        )
    except (ProfilerError, ValidationError, OSError) as e:
        handle_cli_error(
            error=e,
            context=f"{trace_format.value} analysis",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    if not results:
        logger.warning("No results were produced for this trial")
    for result in results:
        print(result)

    if args.output_dir:
        name = args.name or f"{trace_format.value}_{time.strftime('%Y%m%d_%H%M%S')}"
        manager = ResultStorageManager(args.output_dir, app_config.storage)
        manager.save_results(results, name, window=window, trace_format=trace_format.value)
