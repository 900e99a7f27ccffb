"""
Device field providers for NXdata assembly.

Each kind of instrument device has its own conventions for:
- NeXus base class (NXdetector, NXpositioner)
- Field names (data, value, rbv/demand)
- Which field represents the device

Providers turn these conventions into plain Device records for the
assembler.
"""

from .base import DeviceRegistry, FieldProvider
from .detector import Detector
from .positioner import MultiFieldPositioner, Positioner

__all__ = [
    "FieldProvider",
    "DeviceRegistry",
    "Detector",
    "Positioner",
    "MultiFieldPositioner",
]
