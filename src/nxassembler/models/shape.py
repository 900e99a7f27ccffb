"""
Shape model for field extents.
"""

import operator
from collections.abc import Iterator, Sequence
from typing import Any

from pydantic import Field, field_validator, model_validator

from nxassembler.models.base import LayoutModel


class ShapeInfo(LayoutModel):
    """
    Rank and per-dimension size of a field.

    Compares equal to a plain tuple of the same extents, so
    ``ShapeInfo.of(100, 512) == (100, 512)`` holds.

    Attributes:
        extents: Size of each dimension, outermost first
    """

    extents: tuple[int, ...] = Field(
        default=(),
        description="Size of each dimension, outermost first",
    )

    @model_validator(mode="before")
    @classmethod
    def coerce_sequence(cls, data: Any) -> Any:
        """Allow a bare sequence of extents in place of the model dict."""
        if isinstance(data, ShapeInfo):
            return {"extents": data.extents}
        if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
            return {"extents": tuple(data)}
        return data

    @field_validator("extents", mode="before")
    @classmethod
    def validate_extents(cls, v: Any) -> tuple[int, ...]:
        """Convert integer-like extents (including numpy scalars) and reject extents below 1."""
        extents = tuple(operator.index(extent) for extent in v)
        for dim, extent in enumerate(extents):
            if extent < 1:
                raise ValueError(f"Extent at dimension {dim} must be >= 1, got {extent}")
        return extents

    @classmethod
    def of(cls, *extents: int) -> "ShapeInfo":
        """Create a shape from positional extents."""
        return cls(extents=extents)

    @property
    def rank(self) -> int:
        """Number of dimensions."""
        return len(self.extents)

    def __len__(self) -> int:
        return len(self.extents)

    def __iter__(self) -> Iterator[int]:  # type: ignore[override]
        return iter(self.extents)

    def __getitem__(self, dim: int) -> int:
        return self.extents[dim]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ShapeInfo):
            return self.extents == other.extents
        if isinstance(other, (tuple, list)):
            return self.extents == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.extents)

    def __str__(self) -> str:
        return "(" + ", ".join(str(extent) for extent in self.extents) + ")"
