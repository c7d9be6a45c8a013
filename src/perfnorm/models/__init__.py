"""
Data models and structures for the analysis engine.

Configuration Models:
- Window selection and summary settings
- External profiler tool locations
- Storage and logging parameters

Sample Models:
- Symbols, line-oriented samples and structured table samples
- Table descriptors and tables of contents of structured traces

Trial and Result Models:
- Trial timing reported by the benchmark harness
- Derived scalar metrics and their aggregation policy
"""

from .config import AnalysisConfig, AppConfig, LoggingConfig, StorageConfig, ToolsConfig
from .results import AggregationPolicy, ScalarResult
from .samples import (
    LineSample,
    ProfilingTableType,
    Symbol,
    TableDescriptor,
    TableOfContents,
    TIME_TRIGGER_EVENT,
    TriggerType,
    XCTraceSample,
)
from .trial import TrialWindow

__all__ = [
    # Configuration
    "AnalysisConfig",
    "AppConfig",
    "LoggingConfig",
    "StorageConfig",
    "ToolsConfig",
    # Results
    "AggregationPolicy",
    "ScalarResult",
    # Samples
    "LineSample",
    "ProfilingTableType",
    "Symbol",
    "TableDescriptor",
    "TableOfContents",
    "TIME_TRIGGER_EVENT",
    "TriggerType",
    "XCTraceSample",
    # Trial
    "TrialWindow",
]
