"""
JSON writer for assembled layouts.

Writes the NXdata layout (signal, axes, per-field indices and targets)
as a JSON document, for consumers that do not read HDF5.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import numpy as np

from nxassembler.enums import AxisPlaceholder
from nxassembler.models.layout import NxDataLayout

from .serializers import field_records, layout_to_document


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for numpy values, placeholders, and Path objects."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, AxisPlaceholder):
            return obj.value
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


class JSONWriter:
    """
    Writes layouts to JSON files.

    Example:
        writer = JSONWriter("/data/layouts")
        path = writer.write_layout(layout, name="scan_0001")
    """

    def __init__(self, output_dir: str | Path):
        """
        Initialize the JSON writer.

        Args:
            output_dir: Directory for output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write_layout(
        self,
        layout: NxDataLayout,
        name: str = "layout",
        title: Optional[str] = None,
    ) -> Path:
        """
        Write a layout as a nested JSON document.

        Args:
            layout: The layout to write
            name: File stem for the output
            title: Optional scan title stored in the document

        Returns:
            Path to the written JSON file
        """
        output_path = self.output_dir / f"{name}.json"

        with open(output_path, "w") as f:
            json.dump(layout_to_document(layout, title), f, cls=JSONEncoder, indent=2)

        return output_path

    def write_fields(
        self,
        layout: NxDataLayout,
        name: str = "fields",
        title: Optional[str] = None,
    ) -> Path:
        """
        Write the per-field records of a layout as a JSON list.

        Args:
            layout: The layout to write
            name: File stem for the output
            title: Optional scan title stored on every record

        Returns:
            Path to the written JSON file
        """
        output_path = self.output_dir / f"{name}.json"

        with open(output_path, "w") as f:
            json.dump(field_records(layout, title), f, cls=JSONEncoder, indent=2)

        return output_path
