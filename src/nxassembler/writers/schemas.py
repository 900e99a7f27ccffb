"""
PyArrow schema definitions for layout catalog tables.

One row per emitted field, so layouts from many scans can be queried
together (e.g., "which scans have polar_angle as a default axis").
"""

import pyarrow as pa

# Schema for the field catalog
FIELD_SCHEMA = pa.schema(
    [
        # Layout identity
        ("scan_title", pa.string()),
        ("signal_name", pa.string()),
        # Field description
        ("field_name", pa.string()),
        ("shape", pa.list_(pa.int64())),
        ("indices", pa.list_(pa.int32())),
        ("target_path", pa.string()),
        pa.field(
            "role",
            pa.string(),
            metadata={b"description": b"signal, axis or auxiliary"},
        ),
        pa.field(
            "axis_dimension",
            pa.int32(),
            metadata={b"description": b"Signal dimension this field is the default axis for"},
        ),
    ],
)

# Schema for the layout table (one row per layout)
LAYOUT_SCHEMA = pa.schema(
    [
        ("scan_title", pa.string()),
        ("signal_name", pa.string()),
        ("signal_shape", pa.list_(pa.int64())),
        ("axes", pa.list_(pa.string())),
        ("num_fields", pa.int32()),
    ],
)


def get_schema(table_name: str) -> pa.Schema:
    """
    Get the PyArrow schema for a table.

    Args:
        table_name: "fields" or "layouts"

    Returns:
        The corresponding PyArrow schema

    Raises:
        ValueError: If the table name is unknown
    """
    schemas = {
        "fields": FIELD_SCHEMA,
        "layouts": LAYOUT_SCHEMA,
    }
    if table_name not in schemas:
        raise ValueError(f"Unknown table: {table_name}")
    return schemas[table_name]
