"""
JSON storage implementation for small, human-readable result sets.
"""

import logging
from typing import List, Optional

import polars as pl

from .parquet_storage import ParquetStorage

logger = logging.getLogger(__name__)


class JsonStorage(ParquetStorage):
    """
    Stores result tables as a JSON document of records.

    Dictionaries are handled exactly like in ParquetStorage.
    """

    extension = "json"

    def __init__(self):
        super().__init__()

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        self.save_dict({"records": df.to_dicts()}, path)
        logger.debug(f"Saved {len(df)} records to {path}")

    def load_dataframe(self, path: str, columns: Optional[List[str]] = None) -> pl.DataFrame:
        df = pl.DataFrame(self.load_dict(path).get("records", []))
        if columns:
            df = df.select(columns)
        return df
