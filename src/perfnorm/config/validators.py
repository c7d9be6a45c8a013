"""
Configuration validation utilities.

Each ``[section]`` of config.toml has a validator that checks the raw values
and builds the corresponding dataclass. Missing keys take the dataclass
defaults.
"""

import logging
from typing import Any, Dict

from ..models.config import (
    SUPPORTED_COMPRESSIONS,
    SUPPORTED_STORAGE_FORMATS,
    AnalysisConfig,
    AppConfig,
    LoggingConfig,
    StorageConfig,
    ToolsConfig,
)
from ..models.samples import ProfilingTableType
from ..validation import (
    ValidationError,
    validate_enum_choice,
    validate_event_names,
    validate_positive_float,
    validate_positive_integer,
    validate_window_override,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _validate_string(value: Any, field_name: str, allow_empty: bool = True) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string", field_name=field_name, value=value)
    if not allow_empty and not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string", field_name=field_name, value=value)
    return value


def validate_analysis_config(analysis_data: Dict[str, Any]) -> AnalysisConfig:
    """
    Validate and create an AnalysisConfig from the ``[analysis]`` section.

    Raises:
        ValidationError: If validation fails
    """
    defaults = AnalysisConfig()

    delay_ms = validate_window_override(
        analysis_data.get("delay_ms", defaults.delay_ms),
        field_name="analysis.delay_ms",
    )
    length_ms = validate_window_override(
        analysis_data.get("length_ms", defaults.length_ms),
        field_name="analysis.length_ms",
    )

    fix_start_time = analysis_data.get("fix_start_time", defaults.fix_start_time)
    if not isinstance(fix_start_time, bool):
        raise ValidationError(
            "analysis.fix_start_time must be a boolean",
            field_name="analysis.fix_start_time",
            value=fix_start_time,
        )

    table_type = validate_enum_choice(
        analysis_data.get("table_type", defaults.table_type),
        valid_choices=[t.table_name for t in ProfilingTableType],
        field_name="analysis.table_type",
    )

    hot_symbols = validate_positive_integer(
        analysis_data.get("hot_symbols", defaults.hot_symbols),
        min_value=0,
        max_value=1000,
        field_name="analysis.hot_symbols",
    )

    hot_threshold_pct = validate_positive_float(
        analysis_data.get("hot_threshold_pct", defaults.hot_threshold_pct),
        min_value=0.0,
        max_value=100.0,
        field_name="analysis.hot_threshold_pct",
    )

    return AnalysisConfig(
        delay_ms=delay_ms,
        length_ms=length_ms,
        fix_start_time=fix_start_time,
        table_type=table_type,
        hot_symbols=hot_symbols,
        hot_threshold_pct=hot_threshold_pct,
    )


def validate_tools_config(tools_data: Dict[str, Any]) -> ToolsConfig:
    """
    Validate and create a ToolsConfig from the ``[tools]`` section.

    Raises:
        ValidationError: If validation fails
    """
    defaults = ToolsConfig()

    return ToolsConfig(
        xctrace_path=_validate_string(tools_data.get("xctrace_path", defaults.xctrace_path), "tools.xctrace_path"),
        perf_path=_validate_string(tools_data.get("perf_path", defaults.perf_path), "tools.perf_path", allow_empty=False),
        xperf_dir=_validate_string(tools_data.get("xperf_dir", defaults.xperf_dir), "tools.xperf_dir"),
        xperf_providers=_validate_string(
            tools_data.get("xperf_providers", defaults.xperf_providers), "tools.xperf_providers", allow_empty=False
        ),
        symbol_dir=_validate_string(tools_data.get("symbol_dir", defaults.symbol_dir), "tools.symbol_dir"),
        xperf_event=_validate_string(
            tools_data.get("xperf_event", defaults.xperf_event), "tools.xperf_event", allow_empty=False
        ),
        perf_events=validate_event_names(
            tools_data.get("perf_events", defaults.perf_events), field_name="tools.perf_events"
        ),
    )


def validate_storage_config(storage_data: Dict[str, Any]) -> StorageConfig:
    """Validate and create a StorageConfig from the ``[storage]`` section."""
    format_type = validate_enum_choice(
        storage_data.get("format", "parquet"),
        valid_choices=list(SUPPORTED_STORAGE_FORMATS),
        field_name="storage.format",
    )
    compression = validate_enum_choice(
        storage_data.get("compression", "snappy"),
        valid_choices=list(SUPPORTED_COMPRESSIONS),
        field_name="storage.compression",
    )
    return StorageConfig.from_dict({"format": format_type, "compression": compression})


def validate_logging_config(logging_data: Dict[str, Any]) -> LoggingConfig:
    level = validate_enum_choice(
        logging_data.get("level", "INFO"),
        valid_choices=LOG_LEVELS,
        field_name="logging.level",
        case_sensitive=False,
    )
    return LoggingConfig(level=level)


def validate_app_config(config_data: Dict[str, Any]) -> AppConfig:
    """
    Validate every section of a parsed config.toml.

    Args:
        config_data: Parsed TOML document

    Returns:
        Validated AppConfig instance

    Raises:
        ValidationError: If any section fails validation
    """
    for section in ("analysis", "tools", "storage", "logging"):
        if not isinstance(config_data.get(section, {}), dict):
            raise ValidationError(f"[{section}] must be a table", field_name=section)

    unknown = set(config_data) - {"analysis", "tools", "storage", "logging"}
    if unknown:
        logger.warning(f"Ignoring unknown configuration sections: {sorted(unknown)}")

    return AppConfig(
        analysis=validate_analysis_config(config_data.get("analysis", {})),
        tools=validate_tools_config(config_data.get("tools", {})),
        storage=validate_storage_config(config_data.get("storage", {})),
        logging=validate_logging_config(config_data.get("logging", {})),
    )
