"""
Workflow module for NXdata layout assembly.

This module provides the axis-indexing engine that combines a primary
device and axis devices into an NxDataLayout.

Module structure:
- naming.py: Emitted field names and collision tracking
- targets.py: Target path resolution
- assembler.py: Main AxisAssembler class
- result.py: AssemblyResult dataclass for file-driven assemblies
"""

import logging
from pathlib import Path

from nxassembler.enums import AxisPlaceholder
from nxassembler.errors import LayoutError

# Re-export assembler
from .assembler import AxisAssembler, assemble

# Re-export naming and target helpers
from .naming import NameRegistry, emitted_field_name, emitted_field_names
from .result import AssemblyResult
from .targets import (
    DEFAULT_BASE_PATH,
    conventional_path,
    normalize_path,
    resolve_target_path,
)

logger = logging.getLogger(__name__)

__all__ = [
    # Main classes
    "AxisAssembler",
    "AssemblyResult",
    "assemble",
    # Naming
    "NameRegistry",
    "emitted_field_name",
    "emitted_field_names",
    # Targets
    "DEFAULT_BASE_PATH",
    "conventional_path",
    "normalize_path",
    "resolve_target_path",
    # Convenience function
    "assemble_from_file",
]


def assemble_from_file(scan_path: str | Path) -> AssemblyResult:
    """
    Convenience function to assemble a layout from a scan description file.

    Parsing and assembly errors are collected on the result instead of
    being raised.

    Args:
        scan_path: Path to a JSON scan description

    Returns:
        AssemblyResult with the layout, or the errors that prevented it

    Example:
        result = assemble_from_file("/data/scans/scan_0001.json")

        if result.is_complete:
            print(result.layout.rendered_axes())
    """
    from nxassembler.parsers import ScanParser

    result = AssemblyResult(source_file=str(scan_path))

    try:
        scan = ScanParser().parse(scan_path)
    except LayoutError as e:
        result.errors.append(str(e))
        return result

    result.title = scan.title
    try:
        result.layout = assemble(scan.primary, *scan.axes, base_path=scan.base_path)
    except LayoutError as e:
        logger.info(f"Assembly of {scan_path} failed: {e}")
        result.errors.append(str(e))
        return result

    for dim, slot in enumerate(result.layout.default_axes):
        if slot is AxisPlaceholder.NONE:
            result.warnings.append(f"No default axis for signal dimension {dim}")

    return result
