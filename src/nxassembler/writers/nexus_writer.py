"""
NeXus writer for assembled layouts.

Materializes an NxDataLayout as an NXdata group in an HDF5 file: the
group carries the ``signal``, ``axes`` and ``<field>_indices``
attributes, and every field is a soft link to its target dataset.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import h5py
import numpy as np

from nxassembler.errors import InvalidTargetPath
from nxassembler.models.layout import NxDataLayout
from nxassembler.workflow.targets import normalize_path

logger = logging.getLogger(__name__)

DEFAULT_DATA_GROUP = "/entry/data"


class NexusWriter:
    """
    Writes layouts into NeXus (HDF5) files.

    Target datasets that do not exist yet are created empty with the
    field's shape, so the writer can lay out a file before the devices
    write their data. Existing targets must have the field's shape.

    Example:
        with NexusWriter("/data/scan_0001.nxs") as writer:
            writer.write_layout(layout)
    """

    def __init__(
        self,
        file_path: str | Path,
        mode: str = "a",
        create_missing_targets: bool = True,
        dtype: str = "f8",
    ):
        """
        Initialize the writer.

        Args:
            file_path: Path to the NeXus file
            mode: h5py file mode ("a" to add to an existing file, "w" to truncate)
            create_missing_targets: Create empty target datasets that are absent
            dtype: Data type for created target datasets
        """
        self.file_path = Path(file_path)
        self.mode = mode
        self.create_missing_targets = create_missing_targets
        self.dtype = dtype
        self._file: Optional[h5py.File] = None

    def __enter__(self) -> NexusWriter:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if self._file is None:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = h5py.File(self.file_path, self.mode)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    @property
    def file(self) -> h5py.File:
        if self._file is None:
            raise RuntimeError("NexusWriter is not open; use it as a context manager")
        return self._file

    def write_layout(
        self,
        layout: NxDataLayout,
        group_path: str = DEFAULT_DATA_GROUP,
    ) -> h5py.Group:
        """
        Write a layout as an NXdata group.

        Args:
            layout: The layout to materialize
            group_path: Absolute path of the NXdata group to create

        Returns:
            The created NXdata group

        Raises:
            InvalidTargetPath: If the group already exists, or a target is
                missing, is not a dataset, or has the wrong shape
        """
        group_path = normalize_path(group_path)
        if group_path in self.file:
            raise InvalidTargetPath(group_path, "group already exists")

        # Check every target before creating anything
        for name, entry in layout.fields.items():
            self._check_target(name, entry.target_path, entry.shape.extents)

        for name, entry in layout.fields.items():
            dataset = self._require_target(entry.target_path, entry.shape.extents)
            dataset.attrs["target"] = entry.target_path

        self._require_parents(group_path)
        group = self.file.create_group(group_path)
        group.attrs["NX_class"] = "NXdata"

        for key, value in layout.attributes().items():
            if key == "axes":
                value = np.array(value, dtype=h5py.string_dtype())
            group.attrs[key] = value

        for name, entry in layout.fields.items():
            group[name] = h5py.SoftLink(entry.target_path)

        logger.info(
            f"Wrote NXdata group {group_path} with {len(layout.fields)} field(s) "
            f"to {self.file_path}"
        )
        return group

    def _check_target(self, name: str, target: str, shape: tuple[int, ...]) -> None:
        node = self.file.get(target)
        if node is None:
            if not self.create_missing_targets:
                raise InvalidTargetPath(target, f"target of field '{name}' does not exist")
            return
        if not isinstance(node, h5py.Dataset):
            raise InvalidTargetPath(target, f"target of field '{name}' is not a dataset")
        if tuple(node.shape) != shape:
            raise InvalidTargetPath(
                target,
                f"dataset shape {tuple(node.shape)} does not match field '{name}' shape {shape}",
            )

    def _require_target(self, target: str, shape: tuple[int, ...]) -> h5py.Dataset:
        node = self.file.get(target)
        if node is not None:
            return node
        self._require_parents(target)
        logger.debug(f"Creating empty target dataset {target} {shape}")
        return self.file.create_dataset(target, shape=shape, dtype=self.dtype)

    def _require_parents(self, path: str) -> None:
        """Create the groups above a path, marking /entry as NXentry."""
        parent = path.rsplit("/", 1)[0]
        if not parent or parent in self.file:
            return
        self._require_parents(parent)
        group = self.file.create_group(parent)
        if parent.count("/") == 1:
            group.attrs["NX_class"] = "NXentry"


def write_layout_to_nexus(
    layout: NxDataLayout,
    file_path: str | Path,
    group_path: str = DEFAULT_DATA_GROUP,
    mode: str = "a",
) -> Path:
    """
    Convenience function to write one layout into a NeXus file.

    Args:
        layout: The layout to write
        file_path: Path to the NeXus file
        group_path: Absolute path of the NXdata group
        mode: h5py file mode

    Returns:
        Path to the written file
    """
    with NexusWriter(file_path, mode=mode) as writer:
        writer.write_layout(layout, group_path)
    return Path(file_path)
