"""
Parquet writer for layout catalogs.

Writes the fields of one or more layouts to Parquet so that scan
layouts can be collected into a queryable catalog.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pyarrow as pa
import pyarrow.parquet as pq

from nxassembler.models.layout import NxDataLayout

from .schemas import FIELD_SCHEMA, LAYOUT_SCHEMA
from .serializers import field_records, layout_record

logger = logging.getLogger(__name__)


class ParquetWriter:
    """
    Writes layouts to Parquet files.

    Example:
        writer = ParquetWriter("/data/catalog")
        paths = writer.write_layout(layout, title="Polar angle scan")
        print(paths["fields"])
    """

    def __init__(self, output_dir: str | Path, compression: str = "snappy"):
        """
        Initialize the writer with an output directory.

        Args:
            output_dir: Directory for output files
            compression: Parquet compression codec
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.compression = compression

    def write_layout(
        self,
        layout: NxDataLayout,
        name: str = "layout",
        title: Optional[str] = None,
    ) -> dict[str, Path]:
        """
        Write one layout as a fields table and a layouts table.

        Args:
            layout: The layout to write
            name: File stem; tables are written as ``<name>_fields.parquet``
                and ``<name>_layouts.parquet``
            title: Optional scan title stored on every row

        Returns:
            Dict mapping table names to written file paths
        """
        return self.write_layouts([(layout, title)], name=name)

    def write_layouts(
        self,
        layouts: list[tuple[NxDataLayout, Optional[str]]],
        name: str = "catalog",
    ) -> dict[str, Path]:
        """
        Write several layouts into shared tables.

        Args:
            layouts: Pairs of (layout, scan title)
            name: File stem for the output tables

        Returns:
            Dict mapping table names to written file paths
        """
        field_rows = []
        layout_rows = []
        for layout, title in layouts:
            field_rows.extend(field_records(layout, title))
            layout_rows.append(layout_record(layout, title))

        paths = {
            "fields": self._write_table(field_rows, FIELD_SCHEMA, f"{name}_fields.parquet"),
            "layouts": self._write_table(layout_rows, LAYOUT_SCHEMA, f"{name}_layouts.parquet"),
        }
        logger.info(
            f"Wrote {len(field_rows)} field row(s) from {len(layouts)} layout(s) "
            f"to {self.output_dir}"
        )
        return paths

    def _write_table(self, rows: list[dict], schema: pa.Schema, filename: str) -> Path:
        table = pa.Table.from_pylist(rows, schema=schema)
        output_path = self.output_dir / filename
        pq.write_table(table, output_path, compression=self.compression)
        return output_path
