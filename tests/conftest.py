"""
Pytest configuration and shared fixtures for the perfnorm test suite.

Trace fixtures write small but realistic profiler outputs into a temporary
directory: an xperf dumper text file, a ``perf script`` text file and an
exported xctrace table of contents plus counters table.
"""

import shutil
import sys
import tempfile
from pathlib import Path

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from perfnorm.config import clear_config_cache  # noqa: E402
from perfnorm.config import manager as config_manager  # noqa: E402
from perfnorm.models.trial import TrialWindow  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_config():
    """Make every test start without a cached configuration at the default path."""
    saved_path = config_manager._CONFIG_FILE_PATH
    clear_config_cache()
    yield
    config_manager._CONFIG_FILE_PATH = saved_path
    clear_config_cache()


# ============================================================================
# Trace Fixtures
# ============================================================================

XPERF_TRACE = """\
   SampledProfile,  TimeStamp,     Process Name ( PID),   ThreadID,           PrgrmCtr,  CPU,   ThreadStartImage!Function,    Image!Function, Count, SampledProfile type
   SampledProfile,       500,      java.exe (7424),       5204,  0x00007ffb4a4c1000,    1,   Unknown,  jvm.dll!Interpreter,     1,  Unbatched
   SampledProfile,      1500,      java.exe (7424),       5204,  0x00007ffb4a4c1000,    1,   Unknown,  jvm.dll!Interpreter,     1,  Unbatched
   SampledProfile,      2500,      java.exe (7424),       5204,  0x00007ffb4a4c1040,    1,   Unknown,  jvm.dll!Interpreter,     1,  Unbatched
   SampledProfile,      3500,      java.exe (7424),       5204,  0x0000000140001000,    2,   Unknown,  java.exe!main,     1,  Unbatched
   SampledProfile,      4500,      java.exe (7424),       5204,  0xffffffff810c1b00,    2,   Unknown,  ntoskrnl.exe!KiSwap,     1,  Unbatched
   SampledProfile,      5500,      svchost.exe (912),     1000,  0x00007ffb4a4c1000,    0,   Unknown,  ntdll.dll!RtlWait,     1,  Unbatched
            CSwitch,      6000,      java.exe (7424),       5204,  0x00007ffb4a4c1000,    1,   Unknown,  jvm.dll!Interpreter,     1,  Unbatched
   SampledProfile,     10000,      java.exe (7424),       5204,  0x00007ffb4a4c1000,    1,   Unknown,  jvm.dll!Interpreter,     1,  Unbatched
"""

PERF_SCRIPT_TRACE = """\
# ========
# captured on: Thu Oct  1 10:00:00 2026
# ========
   4242 100.000000:     cycles:u:      7f2b9c4e8000 Interpreter+0x0 (/opt/jdk/lib/server/libjvm.so)
   4242 100.001500:     cycles:u:      7f2b9c4e8100 Interpreter+0x100 (/opt/jdk/lib/server/libjvm.so)
   4242 100.002500:     cycles:u:      7f2b9c4e8040 Interpreter+0x40 (/opt/jdk/lib/server/libjvm.so)
   4242 100.003500:     cycles:u:      55d0c0001000 main+0x10 (/usr/bin/java)
   4343 100.004000:     cycles:u:      7f2b9c4e8000 Interpreter+0x0 (/opt/jdk/lib/server/libjvm.so)
   4242 100.004500: instructions:u:    7f2b9c4e8000 Interpreter+0x0 (/opt/jdk/lib/server/libjvm.so)
"""

TOC_TEMPLATE = """<?xml version="1.0"?>
<trace-toc>
  <run number="1">
    <info>
      <target>
        <device platform="macOS" model="MacBook Pro" name="bench-host"/>
      </target>
      <summary>
        <start-date>{start_date}</start-date>
        <end-date>1970-01-01T00:00:02.000+00:00</end-date>
        <duration>0.9</duration>
      </summary>
    </info>
    <data>
      <table schema="time-profile"/>
      {counters_table}
    </data>
  </run>
</trace-toc>
"""

COUNTERS_TABLE = (
    '<table schema="counters-profile" trigger="time" '
    'sample-rate-micro-seconds="1000" pmc-events="FIXED_INSTRUCTIONS FIXED_CYCLES"/>'
)

ROW_TEMPLATE = """    <row>
      <sample-time id="{tid}" fmt="{fmt}">{time_ns}</sample-time>
      <thread ref="2"/>
      <weight id="{wid}" fmt="1.00 ms">{weight}</weight>
      <pmc-events id="{pid}" fmt="{counters}">{counters}</pmc-events>
    </row>
"""

TABLE_TEMPLATE = """<?xml version="1.0"?>
<trace-query-result>
  <node xpath='//trace-toc[1]/run[1]/data[1]/table[8]'>
    <schema name="{schema}">
      <col><mnemonic>time</mnemonic><name>Sample Time</name><engineering-type>sample-time</engineering-type></col>
      <col><mnemonic>thread</mnemonic><name>Thread</name><engineering-type>thread</engineering-type></col>
      <col><mnemonic>weight</mnemonic><name>Weight</name><engineering-type>weight</engineering-type></col>
      <col><mnemonic>pmc-events</mnemonic><name>PMC Events</name><engineering-type>pmc-events</engineering-type></col>
    </schema>
{rows}  </node>
</trace-query-result>
"""


def write_toc(path: Path, start_date: str = "1970-01-01T00:00:01.100+00:00",
              counters_table: str = COUNTERS_TABLE) -> Path:
    path.write_text(TOC_TEMPLATE.format(start_date=start_date, counters_table=counters_table))
    return path


def write_table(path: Path, rows, schema: str = "counters-profile") -> Path:
    """
    Write a counters table; ``rows`` are ``(time_ns, weight, counters)`` tuples.
    """
    parts = []
    next_id = 10
    for time_ns, weight, counters in rows:
        text = " ".join(str(c) for c in counters)
        parts.append(ROW_TEMPLATE.format(
            tid=next_id, fmt=f"{time_ns} ns", time_ns=time_ns,
            wid=next_id + 1, weight=weight,
            pid=next_id + 2, counters=text,
        ))
        next_id += 3
    path.write_text(TABLE_TEMPLATE.format(schema=schema, rows="".join(parts)))
    return path


@pytest.fixture
def xperf_trace(temp_dir):
    path = temp_dir / "perf.txt"
    path.write_text(XPERF_TRACE)
    return path


@pytest.fixture
def perf_script_trace(temp_dir):
    path = temp_dir / "perf-script.txt"
    path.write_text(PERF_SCRIPT_TRACE)
    return path


@pytest.fixture
def counters_samples():
    """Two rows before, two inside and one after a (100 ms, 300 ms] window."""
    return [
        (50_000_000, 1000, (999, 999)),
        (100_000_000, 1000, (999, 999)),
        (150_000_000, 1000, (100, 400)),
        (250_000_000, 1200, (100, 400)),
        (350_000_000, 1000, (999, 999)),
    ]


@pytest.fixture
def xctrace_export(temp_dir, counters_samples):
    """Exported table of contents and counters table, as (toc, table) paths."""
    toc = write_toc(temp_dir / "toc.xml")
    table = write_table(temp_dir / "table.xml", counters_samples)
    return toc, table


@pytest.fixture
def trial_window():
    """
    A trial whose recording started 100 ms after the process was launched.

    Measurement starts 200 ms after launch and lasts 200 ms with 1000 ops,
    i.e. 5 ops/ms.
    """
    return TrialWindow(
        start_time_ms=1000,
        measurement_time_ms=1200,
        stop_time_ms=1400,
        measurement_ops=1000,
    )


@pytest.fixture
def toc_writer():
    return write_toc


@pytest.fixture
def table_writer():
    return write_table


@pytest.fixture
def raw_table_writer():
    """Write a counters table from literal ``<row>`` markup."""
    def _write(path: Path, rows: str, schema: str = "counters-profile") -> Path:
        path.write_text(TABLE_TEMPLATE.format(schema=schema, rows=rows))
        return path
    return _write
