"""
Unit tests for configuration validation functionality.
"""

import pytest

from perfnorm.config.validators import (
    validate_analysis_config,
    validate_app_config,
    validate_logging_config,
    validate_storage_config,
    validate_tools_config,
)
from perfnorm.models.config import AnalysisConfig, ToolsConfig
from perfnorm.validation import ValidationError


@pytest.fixture
def sample_config_data():
    return {
        "analysis": {
            "delay_ms": 500,
            "length_ms": -1,
            "fix_start_time": False,
            "table_type": "counters-profile",
            "hot_symbols": 5,
            "hot_threshold_pct": 2.5,
        },
        "tools": {
            "xctrace_path": "/Applications/Xcode.app/Contents/Developer/usr/bin/xctrace",
            "perf_events": ["cycles", "instructions", "cycles"],
        },
        "storage": {"format": "json", "compression": "zstd"},
        "logging": {"level": "debug"},
    }


@pytest.mark.unit
class TestAnalysisConfigValidation:
    """Test cases for the [analysis] section."""

    def test_success(self, sample_config_data):
        config = validate_analysis_config(sample_config_data["analysis"])

        assert config.delay_ms == 500
        assert config.length_ms == -1
        assert config.fix_start_time is False
        assert config.hot_symbols == 5
        assert config.hot_threshold_pct == 2.5

    def test_defaults(self):
        assert validate_analysis_config({}) == AnalysisConfig()

    @pytest.mark.parametrize("key,value", [
        ("delay_ms", -2),
        ("length_ms", "long"),
        ("fix_start_time", "yes"),
        ("table_type", "system-trace"),
        ("hot_symbols", -1),
        ("hot_threshold_pct", 101),
    ])
    def test_invalid_values(self, key, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_analysis_config({key: value})

        assert key in str(exc_info.value)


@pytest.mark.unit
class TestToolsConfigValidation:
    """Test cases for the [tools] section."""

    def test_events_deduplicated(self, sample_config_data):
        config = validate_tools_config(sample_config_data["tools"])

        assert config.perf_events == ["cycles", "instructions"]
        assert config.xctrace_path.endswith("xctrace")
        assert config.xperf_event == "SampledProfile"

    def test_comma_separated_events(self):
        assert validate_tools_config({"perf_events": "cycles, branch-misses"}).perf_events == [
            "cycles", "branch-misses",
        ]

    def test_defaults(self):
        assert validate_tools_config({}) == ToolsConfig()

    @pytest.mark.parametrize("key,value", [
        ("perf_events", []),
        ("perf_path", ""),
        ("xperf_dir", 3),
    ])
    def test_invalid_values(self, key, value):
        with pytest.raises(ValidationError):
            validate_tools_config({key: value})


@pytest.mark.unit
class TestOtherSections:
    """Test cases for [storage], [logging] and the whole document."""

    def test_storage(self):
        config = validate_storage_config({"format": "parquet", "compression": "gzip"})
        assert (config.format, config.compression) == ("parquet", "gzip")

    def test_storage_invalid_format(self):
        with pytest.raises(ValidationError, match="storage.format"):
            validate_storage_config({"format": "csv"})

    def test_logging_level_case_insensitive(self):
        assert validate_logging_config({"level": "warning"}).level == "WARNING"

    def test_app_config(self, sample_config_data):
        config = validate_app_config(sample_config_data)

        assert config.analysis.delay_ms == 500
        assert config.storage.format == "json"
        assert config.logging.level == "DEBUG"

    def test_section_must_be_a_table(self):
        with pytest.raises(ValidationError):
            validate_app_config({"analysis": 5})
