"""
Validation utilities for assembled layouts.

Re-checks a finished NxDataLayout against the NXdata axis rules and
reports quality issues that are legal but worth a look.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from nxassembler.enums import AxisPlaceholder
from nxassembler.models.layout import NxDataLayout

logger = logging.getLogger(__name__)


@dataclass
class ValidationIssue:
    """A single validation issue."""

    field: str
    message: str
    severity: str  # "error", "warning", "info"
    value: Optional[Any] = None


@dataclass
class ValidationResult:
    """Result of validating a layout."""

    is_valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        """Get only error-level issues."""
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        """Get only warning-level issues."""
        return [i for i in self.issues if i.severity == "warning"]

    def add_error(self, field: str, message: str, value: Any = None) -> None:
        """Add an error issue."""
        self.issues.append(
            ValidationIssue(field=field, message=message, severity="error", value=value)
        )
        self.is_valid = False

    def add_warning(self, field: str, message: str, value: Any = None) -> None:
        """Add a warning issue."""
        self.issues.append(
            ValidationIssue(field=field, message=message, severity="warning", value=value)
        )

    def add_info(self, field: str, message: str, value: Any = None) -> None:
        """Add an info issue."""
        self.issues.append(
            ValidationIssue(field=field, message=message, severity="info", value=value)
        )


class LayoutValidator:
    """
    Validates an NxDataLayout.

    Validation levels:
    1. Structure - signal present, one axes slot per signal dimension
    2. Indices - every field's indices fit its own shape and the signal's
    3. Default axes - every named slot refers to a field that maps that dimension
    4. Coverage - signal dimensions without a default axis or any field

    Layouts built by AxisAssembler always pass levels 1-3; the checks
    matter for layouts loaded or constructed elsewhere.

    Usage:
        validator = LayoutValidator()
        result = validator.validate(layout)

        if not result.is_valid:
            for issue in result.errors:
                print(f"ERROR: {issue.field}: {issue.message}")
    """

    def __init__(self, check_coverage: bool = True):
        """
        Initialize the validator.

        Args:
            check_coverage: Whether to report uncovered signal dimensions
        """
        self.check_coverage = check_coverage

    def validate(self, layout: NxDataLayout) -> ValidationResult:
        """
        Validate a layout.

        Args:
            layout: The layout to validate

        Returns:
            ValidationResult with issues found
        """
        result = ValidationResult(is_valid=True)

        if layout.signal_name not in layout.fields:
            result.add_error("signal", f"Signal '{layout.signal_name}' has no field entry")
            return result

        self._validate_signal(layout, result)
        self._validate_indices(layout, result)
        self._validate_default_axes(layout, result)

        if self.check_coverage:
            self._validate_coverage(layout, result)

        auxiliary = layout.auxiliary_fields
        if auxiliary:
            result.add_info(
                "fields",
                f"{len(auxiliary)} auxiliary field(s) outside the default axes",
                auxiliary,
            )

        logger.debug(
            f"Validated layout '{layout.signal_name}': "
            f"{len(result.errors)} error(s), {len(result.warnings)} warning(s)"
        )
        return result

    def _validate_signal(self, layout: NxDataLayout, result: ValidationResult) -> None:
        signal = layout.signal
        identity = tuple(range(signal.shape.rank))
        if signal.indices != identity:
            result.add_error(
                f"{layout.signal_name}_indices",
                f"Signal indices must be {list(identity)}",
                list(signal.indices),
            )
        if len(layout.default_axes) != signal.shape.rank:
            result.add_error(
                "axes",
                f"Axes has {len(layout.default_axes)} slot(s) for a "
                f"rank-{signal.shape.rank} signal",
                layout.rendered_axes(),
            )

    def _validate_indices(self, layout: NxDataLayout, result: ValidationResult) -> None:
        signal_shape = layout.signal_shape
        for name, entry in layout.fields.items():
            key = f"{name}_indices"
            if len(entry.indices) != entry.shape.rank:
                result.add_error(
                    key,
                    f"{len(entry.indices)} indices for a rank-{entry.shape.rank} field",
                    list(entry.indices),
                )
                continue
            if len(set(entry.indices)) != len(entry.indices):
                result.add_error(key, "Signal dimension mapped more than once", list(entry.indices))
            for k, dim in enumerate(entry.indices):
                if dim >= signal_shape.rank:
                    result.add_error(
                        key, f"Index {dim} out of range for a rank-{signal_shape.rank} signal", dim
                    )
                elif entry.shape[k] != signal_shape[dim]:
                    result.add_error(
                        key,
                        f"Extent {entry.shape[k]} at position {k} doesn't match "
                        f"signal extent {signal_shape[dim]} at dimension {dim}",
                    )

    def _validate_default_axes(self, layout: NxDataLayout, result: ValidationResult) -> None:
        seen: set[str] = set()
        for dim, slot in enumerate(layout.default_axes):
            if slot is AxisPlaceholder.NONE:
                continue
            if slot in seen:
                result.add_error("axes", f"Field '{slot}' occupies more than one axes slot", slot)
            seen.add(slot)
            if slot == layout.signal_name:
                result.add_error("axes", f"Signal '{slot}' cannot be a default axis", slot)
                continue
            entry = layout.fields.get(slot)
            if entry is None:
                result.add_error("axes", f"Axis '{slot}' for dimension {dim} has no field entry")
            elif dim not in entry.indices:
                result.add_error(
                    "axes",
                    f"Axis '{slot}' for dimension {dim} does not map that dimension",
                    list(entry.indices),
                )

    def _validate_coverage(self, layout: NxDataLayout, result: ValidationResult) -> None:
        covered = {
            dim
            for name, entry in layout.fields.items()
            if name != layout.signal_name
            for dim in entry.indices
        }
        for dim, slot in enumerate(layout.default_axes):
            if slot is not AxisPlaceholder.NONE:
                continue
            if dim in covered:
                result.add_info("axes", f"Dimension {dim} has only auxiliary axes", dim)
            else:
                result.add_warning("axes", f"Dimension {dim} has no axis field", dim)


def validate_layout(layout: NxDataLayout, check_coverage: bool = True) -> ValidationResult:
    """
    Convenience function to validate a layout.

    Args:
        layout: The layout to validate
        check_coverage: Whether to report uncovered signal dimensions

    Returns:
        ValidationResult with issues found
    """
    validator = LayoutValidator(check_coverage=check_coverage)
    return validator.validate(layout)
