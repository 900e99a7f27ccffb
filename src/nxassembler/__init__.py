"""
NXdata Assembler - Axis layout assembly for NeXus scan files.

This package combines a primary device (usually a detector) and the
devices scanned against it into an NXdata group layout: the signal
field, the default axis for each signal dimension, and the signal
dimensions every field maps onto.
"""

__version__ = "0.1.0"

from nxassembler.enums import AxisPlaceholder, Role
from nxassembler.errors import (
    AlreadyBuilt,
    AssemblerFailed,
    DuplicateDefaultAxis,
    DuplicateFieldName,
    IndexMappingError,
    InvalidPrimary,
    InvalidTargetPath,
    LayoutError,
    MissingIndexMapping,
    PrimaryNotSet,
    ShapeMismatch,
)
from nxassembler.models import (
    Device,
    DeviceBinding,
    FieldDescriptor,
    FieldEntry,
    NxDataLayout,
    ShapeInfo,
)
from nxassembler.validation import LayoutValidator, ValidationResult
from nxassembler.workflow import AssemblyResult, AxisAssembler, assemble, assemble_from_file
from nxassembler.writers import NexusWriter, write_layout_to_nexus

__all__ = [
    # Models
    "ShapeInfo",
    "FieldDescriptor",
    "Device",
    "DeviceBinding",
    "FieldEntry",
    "NxDataLayout",
    "AxisPlaceholder",
    "Role",
    # Errors
    "LayoutError",
    "PrimaryNotSet",
    "InvalidPrimary",
    "AlreadyBuilt",
    "AssemblerFailed",
    "MissingIndexMapping",
    "ShapeMismatch",
    "IndexMappingError",
    "DuplicateDefaultAxis",
    "DuplicateFieldName",
    "InvalidTargetPath",
    # Workflow
    "AxisAssembler",
    "AssemblyResult",
    "assemble",
    "assemble_from_file",
    # Validation
    "LayoutValidator",
    "ValidationResult",
    # Writers
    "NexusWriter",
    "write_layout_to_nexus",
]
