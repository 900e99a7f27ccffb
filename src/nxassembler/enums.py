"""
Enums for device bindings and axis layouts.

These enums define the valid values for binding roles and the
placeholder used in the default axes list.
"""

from enum import Enum


class Role(str, Enum):
    """Role of a device within an NXdata assembly."""

    PRIMARY = "primary"
    AXIS = "axis"


class AxisPlaceholder(str, Enum):
    """Marker for a signal dimension that has no default axis."""

    NONE = "."

    def __str__(self) -> str:
        return self.value
