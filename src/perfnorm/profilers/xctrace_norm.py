"""
macOS PMU counter statistics from xctrace (Instruments), normalized by
operation count.

The profiling process consists of several steps:

1. the benchmark is launched under ``xctrace record`` with a template that
   contains the CPU Counters instrument; the result is a ``.trace`` bundle
   that may contain several tables;
2. the bundle's table of contents is exported to find the counters table and
   the events it carries;
3. the table is exported and its rows are aggregated over the measured part
   of the trial.

The table of contents also gives the time the recording actually started.
The harness measures its delays from the moment it forked the benchmark,
which is earlier, so the measurement delay is corrected by the difference
unless ``fix_start_time`` is disabled.
"""

import logging
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..aggregation import AggregatedEvents, compute_aggregates, compute_event_results
from ..models.config import AnalysisConfig, ToolsConfig
from ..models.results import ScalarResult
from ..models.samples import ProfilingTableType, TableDescriptor, TableOfContents
from ..models.trial import TrialWindow
from ..parsers.xctrace import find_table_description, iter_table_samples, parse_table_of_contents
from ..system import tools
from ..validation import ValidationError

logger = logging.getLogger(__name__)

# Older versions support CPU Counters in some way, but lack the counters-profile table.
XCTRACE_VERSION_WITH_COUNTERS_PROFILE_TABLE = 13

NS_PER_MS = 1_000_000

PathLike = Union[str, Path]


class XCTraceNormProfiler:
    """
    Turns an xctrace CPU Counters recording into per-operation metrics.

    Args:
        analysis: Window selection settings
        tools_config: Location of xctrace
        arch: CPU architecture the trace was recorded on; defaults to the host
    """

    def __init__(
        self,
        analysis: Optional[AnalysisConfig] = None,
        tools_config: Optional[ToolsConfig] = None,
        arch: Optional[str] = None,
    ):
        self.analysis = analysis or AnalysisConfig()
        self.tools = tools_config or ToolsConfig()
        self.arch = arch

        table_type = ProfilingTableType.from_schema(self.analysis.table_type)
        if table_type is None:
            raise ValidationError(
                f"Unsupported table type: {self.analysis.table_type}",
                field_name="analysis.table_type",
                value=self.analysis.table_type,
            )
        self.table_type = table_type
        self.xctrace = tools.xctrace_command(self.tools.xctrace_path)

    def check_tool(self) -> int:
        return tools.check_xctrace_version(self.xctrace, XCTRACE_VERSION_WITH_COUNTERS_PROFILE_TABLE)

    def record_command(self, output_dir: PathLike, template: str) -> List[str]:
        """Command prefix to launch the benchmark under xctrace."""
        return tools.xctrace_record_command(self.xctrace, output_dir, template)

    def compute_window(self, window: TrialWindow, record_start_ms: int) -> Tuple[int, int]:
        """
        Window of the trace to aggregate, as (skip, duration) in nanoseconds.
        """
        time_correction_ms = 0
        if self.analysis.fix_start_time:
            time_correction_ms = record_start_ms - window.start_time_ms

        skip_ms = self.analysis.delay_ms
        if skip_ms == -1:
            skip_ms = window.measurement_delay_ms
        skip_ms -= time_correction_ms

        duration_ms = self.analysis.length_ms
        if duration_ms == -1:
            duration_ms = window.measured_time_ms

        return skip_ms * NS_PER_MS, duration_ms * NS_PER_MS

    def after_trial(self, window: TrialWindow, recording_dir: PathLike) -> List[ScalarResult]:
        """
        Export the recording found in ``recording_dir`` and analyze it.
        """
        if window.ops_throughput is None:
            return []

        trace_file = tools.find_trace_file(recording_dir)
        with tempfile.TemporaryDirectory(prefix="perfnorm-xctrace-") as tmp:
            toc_path = Path(tmp) / "toc.xml"
            table_path = Path(tmp) / "table.xml"

            tools.export_table_of_contents(self.xctrace, trace_file, toc_path)
            toc = parse_table_of_contents(toc_path)
            # Fail before the (slow) table export if there is nothing to read.
            table_desc = find_table_description(toc, self.table_type)
            tools.export_table(self.xctrace, trace_file, table_path, self.table_type)

            return self._analyze(window, toc, table_desc, table_path)

    def process_results(
        self,
        window: TrialWindow,
        toc_path: PathLike,
        table_path: PathLike,
    ) -> List[ScalarResult]:
        """
        Analyze an already exported table of contents and counters table.

        Returns:
            Derived metrics followed by per-event counts per operation; empty
            when the measurement took no time or no sample fell in the window

        Raises:
            TraceFormatError: If a document is malformed or lacks the table
            ProfilerError: If the in-window samples span no time
        """
        if window.ops_throughput is None:
            logger.info("Measurement took no time, skipping counter analysis")
            return []

        toc = parse_table_of_contents(toc_path)
        table_desc = find_table_description(toc, self.table_type)
        return self._analyze(window, toc, table_desc, table_path)

    def _analyze(
        self,
        window: TrialWindow,
        toc: TableOfContents,
        table_desc: TableDescriptor,
        table_path: PathLike,
    ) -> List[ScalarResult]:
        skip_ns, duration_ns = self.compute_window(window, toc.record_start_ms)
        logger.debug(f"Aggregating samples in ({skip_ns}, {skip_ns + duration_ns}] ns")

        aggregator = AggregatedEvents(table_desc)
        samples = iter_table_samples(table_path, table_desc.table_type, len(table_desc.pmc_events))
        for sample in samples:
            if sample.time_from_start_ns <= skip_ns or sample.time_from_start_ns > skip_ns + duration_ns:
                continue
            aggregator.add(sample)

        if aggregator.events_count == 0:
            logger.warning("No counter samples fell into the measured window")
            return []

        aggregator.normalize_by_throughput(window.ops_throughput)

        results = compute_aggregates(aggregator, self.arch)
        results.extend(compute_event_results(aggregator, table_desc))
        logger.info(f"Computed {len(results)} results from {aggregator.events_count} samples")
        return results
