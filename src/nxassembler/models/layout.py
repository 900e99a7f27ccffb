"""
Layout models produced by the axis assembler.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Union

import numpy as np
from pydantic import Field, field_serializer, field_validator

from nxassembler.enums import AxisPlaceholder
from nxassembler.models.base import LayoutModel
from nxassembler.models.shape import ShapeInfo

AxisSlot = Union[AxisPlaceholder, str]


class FieldEntry(LayoutModel):
    """
    One field of an NXdata group.

    Attributes:
        shape: Extents of the field
        indices: Signal dimension for each of the field's own dimensions
        target_path: Location the field links back to
    """

    shape: ShapeInfo = Field(
        ...,
        description="Extents of the field",
    )

    indices: tuple[int, ...] = Field(
        ...,
        description="Signal dimension for each field dimension",
    )

    target_path: str = Field(
        ...,
        description="Location the field links back to",
    )


class NxDataLayout(LayoutModel):
    """
    A complete, validated NXdata layout.

    Attributes:
        signal_name: Name of the signal field
        default_axes: One slot per signal dimension, holding an axis field
            name or AxisPlaceholder.NONE
        fields: Every emitted field keyed by name, signal first (read-only)
    """

    signal_name: str = Field(
        ...,
        description="Name of the signal field",
    )

    default_axes: tuple[AxisSlot, ...] = Field(
        ...,
        description="Default axis per signal dimension",
    )

    fields: Mapping[str, FieldEntry] = Field(
        ...,
        description="Emitted fields keyed by name",
    )

    @field_validator("default_axes")
    @classmethod
    def normalize_placeholders(cls, v: tuple[AxisSlot, ...]) -> tuple[AxisSlot, ...]:
        """Store every "." slot as AxisPlaceholder.NONE."""
        return tuple(AxisPlaceholder.NONE if slot == AxisPlaceholder.NONE.value else slot for slot in v)

    @field_validator("fields")
    @classmethod
    def freeze_fields(cls, v: Mapping[str, FieldEntry]) -> Mapping[str, FieldEntry]:
        return MappingProxyType(dict(v))

    @field_serializer("fields")
    def serialize_fields(self, v: Mapping[str, FieldEntry]) -> dict[str, FieldEntry]:
        return dict(v)

    def __hash__(self) -> int:
        return hash((self.signal_name, self.default_axes, tuple(self.fields)))

    @property
    def signal(self) -> FieldEntry:
        return self.fields[self.signal_name]

    @property
    def signal_shape(self) -> ShapeInfo:
        return self.signal.shape

    @property
    def rank(self) -> int:
        return self.signal_shape.rank

    @property
    def axis_names(self) -> list[str]:
        """Names of the fields that occupy a default axes slot."""
        return [slot for slot in self.default_axes if not isinstance(slot, AxisPlaceholder)]

    @property
    def auxiliary_fields(self) -> list[str]:
        """Fields other than the signal that hold no default axes slot."""
        axes = set(self.axis_names)
        return [
            name for name in self.fields if name != self.signal_name and name not in axes
        ]

    def rendered_axes(self) -> list[str]:
        """Default axes with placeholders rendered as '.'."""
        return [str(slot) for slot in self.default_axes]

    def attributes(self) -> dict[str, Any]:
        """
        NXdata group attributes for this layout.

        Returns:
            Dict with 'signal', 'axes' and '<field>_indices' for every field
        """
        attrs: dict[str, Any] = {
            "signal": self.signal_name,
            "axes": self.rendered_axes(),
        }
        for name, entry in self.fields.items():
            attrs[f"{name}_indices"] = np.array(entry.indices, dtype=np.int32)
        return attrs

    def summary(self) -> str:
        """Generate a human-readable summary."""
        lines = ["Layout Summary:"]
        lines.append(f"  Signal: {self.signal_name} {self.signal_shape}")
        lines.append(f"  Axes: [{', '.join(self.rendered_axes())}]")
        lines.append(f"  Fields ({len(self.fields)}):")
        for name, entry in self.fields.items():
            indices = ", ".join(str(i) for i in entry.indices)
            lines.append(f"    {name}: shape={entry.shape} indices=[{indices}] -> {entry.target_path}")
        return "\n".join(lines)
