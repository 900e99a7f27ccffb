"""
Serialization utilities for converting layouts to flat records.

Used by the JSON and Parquet writers so both formats carry the same
columns.
"""

from typing import Any, Optional

from nxassembler.models.layout import NxDataLayout

SIGNAL_ROLE = "signal"
AXIS_ROLE = "axis"
AUXILIARY_ROLE = "auxiliary"


def field_role(layout: NxDataLayout, field_name: str) -> tuple[str, Optional[int]]:
    """
    Classify a field of a layout.

    Returns:
        Tuple of (role, axis dimension); the dimension is None unless
        the field occupies a default axes slot
    """
    if field_name == layout.signal_name:
        return SIGNAL_ROLE, None
    for dim, slot in enumerate(layout.default_axes):
        if slot == field_name:
            return AXIS_ROLE, dim
    return AUXILIARY_ROLE, None


def field_records(layout: NxDataLayout, title: Optional[str] = None) -> list[dict[str, Any]]:
    """
    Convert a layout to one flat record per field.

    Args:
        layout: The layout to convert
        title: Scan title stored on every record

    Returns:
        List of dicts with keys matching FIELD_SCHEMA
    """
    records = []
    for name, entry in layout.fields.items():
        role, dim = field_role(layout, name)
        records.append(
            {
                "scan_title": title,
                "signal_name": layout.signal_name,
                "field_name": name,
                "shape": list(entry.shape.extents),
                "indices": list(entry.indices),
                "target_path": entry.target_path,
                "role": role,
                "axis_dimension": dim,
            }
        )
    return records


def layout_record(layout: NxDataLayout, title: Optional[str] = None) -> dict[str, Any]:
    """
    Convert a layout to a single summary record.

    Returns:
        Dict with keys matching LAYOUT_SCHEMA
    """
    return {
        "scan_title": title,
        "signal_name": layout.signal_name,
        "signal_shape": list(layout.signal_shape.extents),
        "axes": layout.rendered_axes(),
        "num_fields": len(layout.fields),
    }


def layout_to_document(layout: NxDataLayout, title: Optional[str] = None) -> dict[str, Any]:
    """
    Convert a layout to a nested JSON-ready document.

    The document mirrors the NXdata attributes: ``signal``, ``axes``
    (placeholders rendered as '.') and one entry per field with its
    ``indices`` and ``target``.
    """
    document: dict[str, Any] = {
        "signal": layout.signal_name,
        "axes": layout.rendered_axes(),
        "fields": {
            name: {
                "shape": list(entry.shape.extents),
                "indices": list(entry.indices),
                "target": entry.target_path,
            }
            for name, entry in layout.fields.items()
        },
    }
    if title is not None:
        document = {"title": title, **document}
    return document
