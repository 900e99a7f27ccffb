"""
Parsers for scan descriptions and existing NeXus files.

Module structure:
- scan_parser.py: JSON scan description parser producing device bindings
- nexus_parser.py: Reads an NXdata group back into a layout
"""

from .nexus_parser import NexusParser
from .scan_parser import (
    DeviceDescription,
    ScanDescription,
    ScanDocument,
    ScanParser,
)

__all__ = [
    "NexusParser",
    "DeviceDescription",
    "ScanDescription",
    "ScanDocument",
    "ScanParser",
]
