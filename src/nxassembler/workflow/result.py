"""
Assembly result dataclass.

Holds the output of assembling a layout from a scan description.
"""

from dataclasses import dataclass, field
from typing import Optional

from nxassembler.models.layout import NxDataLayout


@dataclass
class AssemblyResult:
    """
    Result of assembling a layout from a scan description.

    Attributes:
        layout: The built layout, or None if assembly failed
        title: Scan title from the description
        source_file: Path to the scan description file
        errors: Fatal issues that prevented assembly
        warnings: Non-fatal issues encountered
    """

    layout: Optional[NxDataLayout] = None

    title: Optional[str] = None
    source_file: Optional[str] = None

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """Check if the layout was built."""
        return self.layout is not None

    @property
    def has_errors(self) -> bool:
        """Check if there were any errors."""
        return len(self.errors) > 0

    def summary(self) -> str:
        """Generate a human-readable summary."""
        lines = [f"Scan: {self.title or 'Untitled'}"]
        if self.source_file:
            lines.append(f"  Source: {self.source_file}")

        if self.layout:
            lines.append(self.layout.summary())
        else:
            lines.append("Layout: Not assembled")

        if self.warnings:
            lines.append(f"\nWarnings ({len(self.warnings)}):")
            for w in self.warnings[:5]:  # Limit to first 5
                lines.append(f"  - {w}")

        if self.errors:
            lines.append(f"\nErrors ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  - {e}")

        return "\n".join(lines)
