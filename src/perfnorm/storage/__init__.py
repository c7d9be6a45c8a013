"""
Storage for analysis results.

Result tables are Polars DataFrames written as Parquet (default) or JSON;
trial metadata is always written as JSON next to them.
"""

from .base import ResultStorage
from .data_manager import ResultStorageManager, results_to_dataframe
from .factory import create_storage
from .json_storage import JsonStorage
from .parquet_storage import ParquetStorage

__all__ = [
    "ResultStorage",
    "ResultStorageManager",
    "results_to_dataframe",
    "create_storage",
    "JsonStorage",
    "ParquetStorage",
]
