"""
Unit tests for command execution and profiler command lines.
"""

import subprocess
from unittest.mock import Mock, patch

import pytest

from perfnorm.models.samples import ProfilingTableType
from perfnorm.system import tools
from perfnorm.system.commands import run_checked, run_command
from perfnorm.validation import ProfilerError


def completed(returncode=0, stdout="", stderr=""):
    return Mock(returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.mark.unit
class TestRunCommand:
    """Test cases for run_command and run_checked."""

    @patch("perfnorm.system.commands.subprocess.run")
    def test_captures_output(self, mock_run):
        mock_run.return_value = completed(0, "out", "err")

        assert run_command(["perf", "--version"]) == (0, "out", "err")
        assert mock_run.call_args.kwargs["capture_output"] is True

    @patch("perfnorm.system.commands.subprocess.run")
    def test_output_to_file(self, mock_run, temp_dir):
        mock_run.return_value = completed(0)

        code, stdout, stderr = run_command(["xperf", "-i", "a.etl"], output_path=temp_dir / "out.txt")

        assert (code, stdout, stderr) == (0, "", "")
        assert mock_run.call_args.kwargs["stderr"] == subprocess.STDOUT
        assert (temp_dir / "out.txt").exists()

    @patch("perfnorm.system.commands.subprocess.run")
    def test_extra_environment(self, mock_run):
        mock_run.return_value = completed(0)

        run_command(["xperf"], env={"_NT_SYMBOL_PATH": "C:\\symbols"})

        env = mock_run.call_args.kwargs["env"]
        assert env["_NT_SYMBOL_PATH"] == "C:\\symbols"
        assert "PATH" in env

    @patch("perfnorm.system.commands.subprocess.run", side_effect=FileNotFoundError("no such file"))
    def test_missing_program(self, mock_run):
        code, _, stderr = run_command(["xctrace"])

        assert code == -1
        assert "xctrace" in stderr

    @patch("perfnorm.system.commands.subprocess.run")
    def test_run_checked_failure(self, mock_run):
        mock_run.return_value = completed(1, "", "access denied")

        with pytest.raises(ProfilerError, match="access denied"):
            run_checked(["xperf", "-on", "profile"], "Unable to start")


@pytest.mark.unit
class TestXctraceTools:
    """Test cases for xctrace helpers."""

    def test_command_prefix(self):
        assert tools.xctrace_command() == ["xcrun", "xctrace"]
        assert tools.xctrace_command("/opt/xctrace") == ["/opt/xctrace"]

    @patch("perfnorm.system.tools.run_checked", return_value="xctrace version 15.0 (15A240d)\n")
    def test_version(self, mock_run):
        assert tools.check_xctrace_version(["xctrace"], 13) == 15

    @patch("perfnorm.system.tools.run_checked", return_value="xctrace version 12.5 (12E262)\n")
    def test_version_too_old(self, mock_run):
        with pytest.raises(ProfilerError, match="13 or newer"):
            tools.check_xctrace_version(["xctrace"], 13)

    def test_find_trace_file(self, temp_dir):
        with pytest.raises(ProfilerError, match="No trace file"):
            tools.find_trace_file(temp_dir)

        (temp_dir / "a.trace").mkdir()
        assert tools.find_trace_file(temp_dir) == temp_dir / "a.trace"

        (temp_dir / "b.trace").mkdir()
        with pytest.raises(ProfilerError, match="Multiple trace files"):
            tools.find_trace_file(temp_dir)

    @patch("perfnorm.system.tools.run_checked")
    def test_export_table_xpath(self, mock_run):
        tools.export_table(["xctrace"], "rec.trace", "out.xml", ProfilingTableType.COUNTERS_PROFILE)

        command = mock_run.call_args.args[0]
        assert command[-1] == '/trace-toc/run[@number="1"]/data/table[@schema="counters-profile"]'
        assert command[:2] == ["xctrace", "export"]


@pytest.mark.unit
class TestLineTraceTools:
    """Test cases for xperf and perf helpers."""

    @patch("perfnorm.system.tools.run_command", return_value=(0, "", ""))
    def test_xperf_dump_symbol_path(self, mock_run):
        tools.xperf_dump("xperf", "perf.etl", "perf.txt", "C:\\symbols")

        assert mock_run.call_args.kwargs["env"] == {"_NT_SYMBOL_PATH": "C:\\symbols"}
        assert mock_run.call_args.kwargs["output_path"] == "perf.txt"

    @patch("perfnorm.system.tools.run_command", return_value=(2, "", ""))
    def test_xperf_dump_failure(self, mock_run):
        with pytest.raises(ProfilerError):
            tools.xperf_dump("xperf", "perf.etl", "perf.txt")

    def test_perf_record_command(self):
        assert tools.perf_record_command("perf", ["cycles", "instructions"], "perf.data") == [
            "perf", "record", "-e", "cycles,instructions", "-o", "perf.data", "--",
        ]

    @patch("perfnorm.system.tools.run_command", return_value=(0, "", ""))
    def test_perf_script_fields(self, mock_run):
        tools.perf_script("perf", "perf.data", "perf.txt")

        command = mock_run.call_args.args[0]
        assert command[-2:] == ["-F", "pid,time,event,ip,sym,dso"]
