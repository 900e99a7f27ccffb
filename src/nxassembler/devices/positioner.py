"""
Positioner field providers.

A simple NXpositioner writes its positions to ``value``. Motors that
record both the requested and the read-back position write several
named fields, with the demand position as the default.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from nxassembler.models.shape import ShapeInfo

from .base import DeviceRegistry, FieldProvider

VALUE_FIELD = "value"
DEMAND_FIELD = "demand"


@DeviceRegistry.register
class Positioner(FieldProvider):
    """Provider for an NXpositioner with a single ``value`` field."""

    type_name = "positioner"
    aliases = ["NXpositioner"]
    nx_class = "NXpositioner"

    def __init__(self, name: str, *shape: int):
        super().__init__(name)
        self.shape = ShapeInfo(extents=shape)

    @property
    def default_field_name(self) -> str:
        return VALUE_FIELD

    def field_shapes(self) -> dict[str, ShapeInfo]:
        return {VALUE_FIELD: self.shape}

    @classmethod
    def create(
        cls,
        name: str,
        shape: Optional[Sequence[int]] = None,
        fields: Optional[dict[str, Sequence[int]]] = None,
        default_field: Optional[str] = None,
    ) -> Positioner:
        if shape is None:
            raise ValueError(f"Positioner '{name}' needs a shape")
        if fields:
            raise ValueError(
                f"Positioner '{name}' does not take named fields; "
                f"use type 'multi_positioner'"
            )
        return cls(name, *shape)


@DeviceRegistry.register
class MultiFieldPositioner(FieldProvider):
    """
    Provider for an NXpositioner with several named fields.

    Example:
        # Polar angle demanded per outer scan point, read back at every point
        polar = MultiFieldPositioner(
            "polar_angle",
            {"rbv": (50, 5), "demand": (50,)},
            default_field="demand",
        )
    """

    type_name = "multi_positioner"
    aliases = ["multi-positioner"]
    nx_class = "NXpositioner"

    def __init__(
        self,
        name: str,
        fields: dict[str, Sequence[int]],
        default_field: str = DEMAND_FIELD,
    ):
        super().__init__(name)
        if not fields:
            raise ValueError(f"Positioner '{name}' needs at least one field")
        if default_field not in fields:
            raise ValueError(
                f"Default field '{default_field}' is not one of {list(fields)} "
                f"for positioner '{name}'"
            )
        self.shapes = {field_name: ShapeInfo(extents=shape) for field_name, shape in fields.items()}
        self._default_field = default_field

    @property
    def default_field_name(self) -> str:
        return self._default_field

    def field_shapes(self) -> dict[str, ShapeInfo]:
        return dict(self.shapes)

    @classmethod
    def create(
        cls,
        name: str,
        shape: Optional[Sequence[int]] = None,
        fields: Optional[dict[str, Sequence[int]]] = None,
        default_field: Optional[str] = None,
    ) -> MultiFieldPositioner:
        if not fields:
            raise ValueError(f"Positioner '{name}' needs named fields")
        if shape is not None:
            raise ValueError(f"Positioner '{name}' takes named fields, not a shape")
        return cls(name, fields, default_field=default_field or DEMAND_FIELD)
