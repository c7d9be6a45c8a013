"""
perfnorm: turns traces of external profilers (xctrace, xperf, perf) into
per-operation benchmark metrics.
"""

__version__ = "0.1.0"
