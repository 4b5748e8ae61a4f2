"""Persist query results to Parquet or JSON files."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import polars as pl

from .config import settings

logger = logging.getLogger(__name__)


def data_path(*parts: str) -> Path:
    """Path under PARQUET_DATA_DIR, e.g. ``data_path("dune", "123.parquet")``."""
    return Path(settings.data_dir, *parts)


def save_records(
    records: List[Dict[str, Any]], output_path: Union[str, Path]
) -> str:
    """
    Write records to ``output_path``; the suffix picks the format.

    ``.parquet`` files are appended to when they already exist, keeping only
    unique rows. ``.json`` files are overwritten. An empty ``records`` list
    writes nothing.

    Args:
        records: List of flat dicts
        output_path: Destination file

    Returns:
        Path of the written file
    """
    output_path = Path(output_path)
    if output_path.suffix not in (".json", ".parquet"):
        raise ValueError(f"Unsupported output format: {output_path.suffix}")
    if not records:
        logger.info(f"{output_path}: No new records to append")
        return str(output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_path.suffix == ".json":
        with output_path.open("w") as f:
            json.dump(records, f, indent=2, default=str)
        logger.info(f"{output_path}: wrote {len(records)} records")
        return str(output_path)

    try:
        new_lazy = pl.LazyFrame(records)

        if output_path.exists():
            existing_lazy = pl.scan_parquet(output_path)

            # Ensure column order matches between existing and new data
            existing_columns = existing_lazy.collect_schema().names()
            new_lazy = new_lazy.select(existing_columns)

            combined = pl.concat([existing_lazy, new_lazy]).unique().collect()
            existing_count = existing_lazy.select(pl.len()).collect().item()

            if combined.height != existing_count:
                combined.write_parquet(output_path)
                logger.info(
                    f"{output_path}: Existing count: {existing_count}, added: {combined.height - existing_count}"
                )
            else:
                logger.info(f"{output_path}: No new records to append")
        else:
            new_lazy.collect().write_parquet(output_path)
            logger.info(f"{output_path}: Created new file with {len(records)} records")

        return str(output_path)

    except Exception as e:
        logger.error(f"Failed to save records to {output_path}: {e}")
        raise
