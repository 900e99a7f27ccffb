"""
Pydantic models for NXdata layout assembly.

These models cover:
- ShapeInfo
- FieldDescriptor / Device / DeviceBinding
- FieldEntry / NxDataLayout
"""

from nxassembler.enums import AxisPlaceholder, Role
from nxassembler.models.base import LayoutModel
from nxassembler.models.device import Device, DeviceBinding, FieldDescriptor
from nxassembler.models.layout import FieldEntry, NxDataLayout
from nxassembler.models.shape import ShapeInfo

__all__ = [
    "LayoutModel",
    "ShapeInfo",
    "FieldDescriptor",
    "Device",
    "DeviceBinding",
    "FieldEntry",
    "NxDataLayout",
    "AxisPlaceholder",
    "Role",
]
