"""
Writers module for outputting assembled layouts.

This module provides functionality to materialize an NxDataLayout as an
NXdata group in a NeXus file, or to export it as JSON or as a Parquet
field catalog.

Module structure:
- schemas.py: PyArrow schema definitions for catalog tables
- serializers.py: Layout-to-record conversion utilities
- nexus_writer.py: NexusWriter class for HDF5/NeXus output
- parquet_writer.py: ParquetWriter class for catalog output
- json_writer.py: JSONWriter class for JSON output
"""

from pathlib import Path
from typing import Optional

from nxassembler.models.layout import NxDataLayout

# Re-export writer classes
from .json_writer import JSONWriter
from .nexus_writer import DEFAULT_DATA_GROUP, NexusWriter, write_layout_to_nexus
from .parquet_writer import ParquetWriter

# Re-export schemas
from .schemas import FIELD_SCHEMA, LAYOUT_SCHEMA, get_schema

# Re-export serializers
from .serializers import field_records, field_role, layout_record, layout_to_document

__all__ = [
    # Schemas
    "FIELD_SCHEMA",
    "LAYOUT_SCHEMA",
    "get_schema",
    # Serializers
    "field_role",
    "field_records",
    "layout_record",
    "layout_to_document",
    # Writers
    "NexusWriter",
    "ParquetWriter",
    "JSONWriter",
    "DEFAULT_DATA_GROUP",
    # Convenience functions
    "write_layout_to_nexus",
    "write_layout",
]

FORMATS = ("nexus", "json", "parquet")


def write_layout(
    layout: NxDataLayout,
    output: str | Path,
    fmt: str = "nexus",
    title: Optional[str] = None,
    group_path: str = DEFAULT_DATA_GROUP,
) -> dict[str, Path]:
    """
    Convenience function to write a layout in one of the supported formats.

    Args:
        layout: The layout to write
        output: NeXus file path for "nexus"; output directory otherwise
        fmt: "nexus", "json" or "parquet"
        title: Optional scan title stored with JSON and Parquet output
        group_path: NXdata group path for "nexus"

    Returns:
        Dict mapping output kinds to written file paths

    Example:
        layout = assemble(primary, *axes)

        paths = write_layout(layout, "/data/scan_0001.nxs")
        print(f"Wrote NXdata to: {paths['nexus']}")
    """
    if fmt == "nexus":
        return {"nexus": write_layout_to_nexus(layout, output, group_path=group_path)}
    if fmt == "json":
        writer = JSONWriter(output)
        return {
            "layout": writer.write_layout(layout, title=title),
            "fields": writer.write_fields(layout, title=title),
        }
    if fmt == "parquet":
        return ParquetWriter(output).write_layout(layout, title=title)
    raise ValueError(f"Unknown output format '{fmt}'; expected one of {FORMATS}")
