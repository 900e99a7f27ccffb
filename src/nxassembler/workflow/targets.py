"""
Target path resolution for linked fields.
"""

import re
from typing import Optional

from nxassembler.errors import InvalidTargetPath

DEFAULT_BASE_PATH = "/entry/instrument"

_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_path(path: str) -> str:
    """
    Normalize a slash-separated absolute path.

    Collapses repeated slashes and strips a trailing slash.

    Raises:
        InvalidTargetPath: If the path is empty, relative, or has '.'/'..' segments
    """
    if not path or not path.strip():
        raise InvalidTargetPath(path, "path is empty")
    if not path.startswith("/"):
        raise InvalidTargetPath(path, "path must be absolute")

    normalized = _REPEATED_SLASHES.sub("/", path)
    if len(normalized) > 1:
        normalized = normalized.rstrip("/")
    if normalized == "/":
        raise InvalidTargetPath(path, "path must name a node below the root")

    segments = normalized.split("/")[1:]
    if any(segment in (".", "..") for segment in segments):
        raise InvalidTargetPath(path, "relative segments are not allowed")
    return normalized


def conventional_path(
    device_name: str,
    field_name: str,
    base_path: str = DEFAULT_BASE_PATH,
) -> str:
    """Build ``<base>/<device>/<field>``."""
    return normalize_path(f"{base_path}/{device_name}/{field_name}")


def resolve_target_path(
    device_name: str,
    field_name: str,
    source_path: Optional[str] = None,
    base_path: str = DEFAULT_BASE_PATH,
) -> str:
    """
    Resolve the target path a field links back to.

    Args:
        device_name: Name of the device owning the field
        field_name: Name of the field within the device
        source_path: Explicit source location, if the device supplies one
        base_path: Group holding device groups when no source path is given

    Returns:
        Normalized absolute target path

    Example:
        >>> resolve_target_path("x", "value")
        '/entry/instrument/x/value'
    """
    if source_path is not None:
        return normalize_path(source_path)
    return conventional_path(device_name, field_name, base_path)
