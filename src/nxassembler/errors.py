"""
Exceptions raised while assembling an NXdata layout.

Every failure is a distinct subclass of LayoutError and carries the
values that caused it as attributes, so callers can inspect them
instead of parsing the message.
"""

from typing import Optional


class LayoutError(Exception):
    """Base class for all layout assembly errors."""


class PrimaryNotSet(LayoutError):
    """An operation needs a primary device but none has been registered."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation}: no primary device has been set")


class InvalidPrimary(LayoutError):
    """The primary binding was rejected."""

    def __init__(self, device_name: str, reason: str):
        self.device_name = device_name
        self.reason = reason
        super().__init__(f"Invalid primary device '{device_name}': {reason}")


class AlreadyBuilt(LayoutError):
    """The assembler was mutated after build()."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation}: layout has already been built")


class AssemblerFailed(LayoutError):
    """An earlier operation on this assembler failed."""

    def __init__(self, cause: LayoutError):
        self.cause = cause
        super().__init__(f"Assembler is invalid after an earlier failure: {cause}")


class MissingIndexMapping(LayoutError):
    """The signal dimensions of a field cannot be determined."""

    def __init__(self, field_name: str, rank: int):
        self.field_name = field_name
        self.rank = rank
        super().__init__(
            f"No index mapping for field '{field_name}' (rank {rank}); "
            f"supply indices explicitly"
        )


class ShapeMismatch(LayoutError):
    """A field's extent disagrees with the signal's extent at a mapped dimension."""

    def __init__(
        self,
        field_name: str,
        dimension: Optional[int],
        expected: Optional[int],
        actual: Optional[int],
        message: Optional[str] = None,
    ):
        self.field_name = field_name
        self.dimension = dimension
        self.expected = expected
        self.actual = actual
        if message is None:
            message = (
                f"Shape mismatch for field '{field_name}' at signal dimension "
                f"{dimension}: expected extent {expected}, got {actual}"
            )
        super().__init__(message)


class IndexMappingError(ShapeMismatch):
    """An index mapping is malformed (wrong length, out of range or repeated)."""

    def __init__(
        self,
        field_name: str,
        reason: str,
        dimension: Optional[int] = None,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
    ):
        self.reason = reason
        super().__init__(
            field_name,
            dimension,
            expected,
            actual,
            message=f"Invalid index mapping for field '{field_name}': {reason}",
        )


class DuplicateDefaultAxis(LayoutError):
    """Two devices claim the same signal dimension as their default axis."""

    def __init__(self, dimension: int, existing: str, duplicate: str):
        self.dimension = dimension
        self.existing = existing
        self.duplicate = duplicate
        super().__init__(
            f"Default axis for dimension {dimension} is already '{existing}'; "
            f"cannot also assign '{duplicate}'"
        )


class DuplicateFieldName(LayoutError):
    """Two emitted field names collide."""

    def __init__(self, field_name: str, device_name: str):
        self.field_name = field_name
        self.device_name = device_name
        super().__init__(
            f"Field name '{field_name}' from device '{device_name}' is already in use"
        )


class InvalidTargetPath(LayoutError):
    """A source path cannot be used as a link target."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid target path '{path}': {reason}")


class ScanDescriptionError(LayoutError):
    """A scan description could not be read or is invalid."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid scan description {source}: {reason}")


class NexusReadError(LayoutError):
    """An NXdata group could not be read from a NeXus file."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot read NXdata group {source}: {reason}")
