"""
Detector field provider.

An NXdetector writes its frames to a single ``data`` field. Time-of-flight
detectors also write a ``time_of_flight`` field spanning the last
dimension of the data; that field carries its own indices.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from nxassembler.models.shape import ShapeInfo

from .base import DeviceRegistry, FieldProvider

DATA_FIELD = "data"
TIME_OF_FLIGHT_FIELD = "time_of_flight"


@DeviceRegistry.register
class Detector(FieldProvider):
    """
    Provider for an NXdetector.

    Example:
        detector = Detector("det", 100, 512, 1000)
        detector.include_time_of_flight()
        device = detector.to_device()
        # fields: det_data (100, 512, 1000), det_time_of_flight (1000)
    """

    type_name = "detector"
    aliases = ["NXdetector"]
    nx_class = "NXdetector"

    def __init__(self, name: str, *shape: int):
        super().__init__(name)
        self.shape = ShapeInfo(extents=shape)
        self.has_time_of_flight = False

    @property
    def default_field_name(self) -> str:
        return DATA_FIELD

    def include_time_of_flight(self) -> None:
        """Also write a time-of-flight field over the last data dimension."""
        if self.shape.rank == 0:
            raise ValueError(f"Detector '{self.name}' has no dimension for time of flight")
        self.has_time_of_flight = True

    @property
    def time_of_flight_dimension(self) -> Optional[int]:
        """Data dimension the time-of-flight field spans, if present."""
        if not self.has_time_of_flight:
            return None
        return self.shape.rank - 1

    def field_indices(self) -> dict[str, tuple[int, ...]]:
        dim = self.time_of_flight_dimension
        if dim is None:
            return {}
        return {TIME_OF_FLIGHT_FIELD: (dim,)}

    def field_shapes(self) -> dict[str, ShapeInfo]:
        shapes = {DATA_FIELD: self.shape}
        if self.has_time_of_flight:
            shapes[TIME_OF_FLIGHT_FIELD] = ShapeInfo.of(self.shape[-1])
        return shapes

    @classmethod
    def create(
        cls,
        name: str,
        shape: Optional[Sequence[int]] = None,
        fields: Optional[dict[str, Sequence[int]]] = None,
        default_field: Optional[str] = None,
    ) -> Detector:
        if shape is None:
            raise ValueError(f"Detector '{name}' needs a shape")
        if fields:
            raise ValueError(f"Detector '{name}' does not take named fields")
        return cls(name, *shape)
