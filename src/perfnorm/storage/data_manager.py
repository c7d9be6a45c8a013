"""
Result storage manager.

Saves the results of one trial as a table in the configured format, next to
a JSON file describing the trial window and the trace it came from.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import polars as pl

from ..models.config import StorageConfig
from ..models.results import ScalarResult
from ..models.trial import TrialWindow
from .factory import create_storage

logger = logging.getLogger(__name__)

RESULT_SCHEMA = {
    "label": pl.Utf8,
    "value": pl.Float64,
    "unit": pl.Utf8,
    "policy": pl.Utf8,
}


def results_to_dataframe(results: Sequence[ScalarResult]) -> pl.DataFrame:
    """One row per result, in result order."""
    return pl.DataFrame([r.to_row() for r in results], schema=RESULT_SCHEMA)


class ResultStorageManager:
    """
    High-level storage for analysis results.

    Args:
        output_dir: Directory where result files are written
        storage_config: Format and compression; defaults to Parquet with snappy
    """

    def __init__(self, output_dir: Path, storage_config: Optional[StorageConfig] = None):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        storage_config = storage_config or StorageConfig()
        self.storage_format = storage_config.format
        self.compression = storage_config.compression
        self.storage = create_storage(self.storage_format, self.compression)

        logger.debug(f"Initialized ResultStorageManager with format: {self.storage_format}")

    def results_path(self, name: str) -> Path:
        return self.output_dir / f"{name}.{self.storage.extension}"

    def metadata_path(self, name: str) -> Path:
        return self.output_dir / f"{name}.meta.json"

    def save_results(
        self,
        results: List[ScalarResult],
        name: str,
        window: Optional[TrialWindow] = None,
        trace_format: Optional[str] = None,
    ) -> Optional[Path]:
        """
        Save a trial's results and metadata.

        Returns:
            Path of the result table, or None when there was nothing to save
        """
        if not results:
            logger.warning(f"No results to save for {name}")
            return None

        df = results_to_dataframe(results)
        path = self.results_path(name)
        self.storage.save_dataframe(df, str(path))

        metadata: Dict[str, Any] = {
            "name": name,
            "saved_at": datetime.now().isoformat(timespec="seconds"),
            "trace_format": trace_format,
            "result_count": len(results),
            "window": window.to_dict() if window else None,
        }
        self.storage.save_dict(metadata, str(self.metadata_path(name)))

        logger.info(f"Saved {len(results)} results to: {path}")
        return path

    def load_results(self, name: str, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """
        Load a saved result table.

        Raises:
            FileNotFoundError: If no results were saved under ``name``
        """
        path = self.results_path(name)
        if not self.storage.file_exists(str(path)):
            raise FileNotFoundError(f"No results named {name} in {self.output_dir}")
        return self.storage.load_dataframe(str(path), columns)

    def load_metadata(self, name: str) -> Dict[str, Any]:
        return self.storage.load_dict(str(self.metadata_path(name)))
