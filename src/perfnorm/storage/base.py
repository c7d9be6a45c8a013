"""
Abstract base class for result storage implementations.

Backends store two kinds of data: result tables (one row per derived metric)
as Polars DataFrames, and small dictionaries such as trial metadata.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import polars as pl


class ResultStorage(ABC):
    """Abstract base class for result storage implementations."""

    #: File extension used for result tables, without the dot.
    extension: str = ""

    @abstractmethod
    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """
        Save a Polars DataFrame to the specified path.

        Args:
            df: Polars DataFrame to save
            path: File path to save to
        """
        pass

    @abstractmethod
    def load_dataframe(
        self, path: str, columns: Optional[List[str]] = None
    ) -> pl.DataFrame:
        """
        Load a Polars DataFrame from the specified path.

        Args:
            path: File path to load from
            columns: Optional list of columns to load

        Returns:
            Loaded Polars DataFrame
        """
        pass

    @abstractmethod
    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        pass

    @abstractmethod
    def load_dict(self, path: str) -> Dict[str, Any]:
        pass

    def file_exists(self, path: str) -> bool:
        return Path(path).exists()
