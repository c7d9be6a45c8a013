"""
Configuration data models.

This module contains the configuration structures for window selection,
external profiler tools, result storage and logging.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal

SUPPORTED_STORAGE_FORMATS = ("parquet", "json")
SUPPORTED_COMPRESSIONS = ("snappy", "gzip", "brotli", "lz4", "zstd")


@dataclass
class AnalysisConfig:
    """
    How trial windows are selected and how results are summarized, loaded from
    the ``[analysis]`` section of ``config.toml``.
    """

    # Skip this many milliseconds from the start of the trace; -1 derives it from the trial.
    delay_ms: int = -1
    # Analyze this many milliseconds after the skipped part; -1 derives it from the trial.
    length_ms: int = -1
    # Shift the window by the difference between the recording start and the trial start.
    fix_start_time: bool = True
    # Structured result table to analyze.
    table_type: str = "counters-profile"
    # How many of the hottest symbols to report for line-oriented traces.
    hot_symbols: int = 10
    # Hot symbols below this share of samples (percent) are not reported.
    hot_threshold_pct: float = 1.0


@dataclass
class ToolsConfig:
    """
    Locations and options of the external profilers, loaded from ``[tools]``.
    """

    # Path to xctrace; empty means "xcrun xctrace".
    xctrace_path: str = ""
    perf_path: str = "perf"
    # Directory holding xperf.exe; empty means it is expected on PATH.
    xperf_dir: str = ""
    xperf_providers: str = "loader+proc_thread+profile"
    # Optional directory with debug symbols, exported as _NT_SYMBOL_PATH.
    symbol_dir: str = ""
    # The only event kind xperf sampling produces.
    xperf_event: str = "SampledProfile"
    perf_events: List[str] = field(default_factory=lambda: ["cycles"])


@dataclass
class StorageConfig:
    """
    Configuration model for result storage settings.

    Attributes:
        format: Primary storage format for result tables
            - 'parquet': columnar format, compressed
            - 'json': human-readable records
        compression: Compression algorithm for the Parquet format

    Note:
        Compression only applies to Parquet. Trial metadata is always written
        as plain JSON next to the result table.
    """

    format: Literal["parquet", "json"] = "parquet"
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageConfig":
        """
        Create a StorageConfig instance from a dictionary.

        Raises:
            ValueError: If invalid configuration values are provided
        """
        format_type = config_dict.get("format", "parquet")
        compression = config_dict.get("compression", "snappy")

        if format_type not in SUPPORTED_STORAGE_FORMATS:
            raise ValueError(f"Unsupported storage format: {format_type}")

        if format_type == "parquet" and compression not in SUPPORTED_COMPRESSIONS:
            raise ValueError(f"Unsupported compression algorithm: {compression}")

        return cls(format=format_type, compression=compression)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "compression": self.compression,
        }


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
