"""
Parser for NXdata groups in existing NeXus files.

Reads the ``signal``, ``axes`` and ``<field>_indices`` attributes of an
NXdata group back into an NxDataLayout, so that files written by other
software can be checked with the layout validator.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import h5py
import numpy as np
from pydantic import ValidationError

from nxassembler.enums import AxisPlaceholder
from nxassembler.errors import NexusReadError
from nxassembler.models.layout import AxisSlot, FieldEntry, NxDataLayout

logger = logging.getLogger(__name__)


def _as_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _as_str_list(value: Any) -> list[str]:
    """Decode a string or array-of-strings attribute."""
    if isinstance(value, (str, bytes)):
        return [_as_str(value)]
    return [_as_str(v) for v in np.atleast_1d(value)]


class NexusParser:
    """
    Parser for NXdata groups.

    Usage:
        parser = NexusParser()
        layout = parser.parse("/data/scan_0001.nxs", group_path="/entry/data")
    """

    def parse(self, file_path: str | Path, group_path: str = "/entry/data") -> NxDataLayout:
        """
        Read an NXdata group into a layout.

        Fields without an ``<field>_indices`` attribute are skipped,
        except the signal, which defaults to identity indices.

        Args:
            file_path: Path to the NeXus file
            group_path: Path of the NXdata group

        Returns:
            The layout described by the group; it is not validated

        Raises:
            NexusReadError: If the file or group cannot be read
        """
        path = Path(file_path)
        source = f"{path}:{group_path}"
        try:
            with h5py.File(path, "r") as f:
                group = f.get(group_path)
                if not isinstance(group, h5py.Group):
                    raise NexusReadError(source, "no such group")
                return self._parse_group(group, source)
        except OSError as e:
            raise NexusReadError(source, f"cannot read file: {e}") from e
        except ValidationError as e:
            raise NexusReadError(source, f"invalid field shape or indices: {e}") from e

    def _parse_group(self, group: h5py.Group, source: str) -> NxDataLayout:
        if "signal" not in group.attrs:
            raise NexusReadError(source, "group has no 'signal' attribute")
        signal_name = _as_str(group.attrs["signal"])
        if signal_name not in group:
            raise NexusReadError(source, f"signal field '{signal_name}' is missing")

        fields: dict[str, FieldEntry] = {}
        for name in group:
            node = group.get(name)
            if not isinstance(node, h5py.Dataset):
                continue
            indices = self._indices(group, name)
            if indices is None:
                if name != signal_name:
                    logger.debug(f"Skipping '{name}' in {source}: no indices attribute")
                    continue
                indices = tuple(range(node.ndim))
            fields[name] = FieldEntry(
                shape=tuple(node.shape),
                indices=indices,
                target_path=self._target(group, name, node),
            )

        if signal_name not in fields:
            raise NexusReadError(source, f"signal field '{signal_name}' is not a dataset")

        # Signal first, like assembled layouts
        ordered = {signal_name: fields.pop(signal_name), **fields}

        axes: list[AxisSlot] = []
        if "axes" in group.attrs:
            for slot in _as_str_list(group.attrs["axes"]):
                axes.append(AxisPlaceholder.NONE if slot == AxisPlaceholder.NONE.value else slot)
        else:
            axes = [AxisPlaceholder.NONE] * ordered[signal_name].shape.rank

        return NxDataLayout(signal_name=signal_name, default_axes=tuple(axes), fields=ordered)

    @staticmethod
    def _indices(group: h5py.Group, name: str) -> Optional[tuple[int, ...]]:
        key = f"{name}_indices"
        if key not in group.attrs:
            return None
        return tuple(int(i) for i in np.atleast_1d(group.attrs[key]))

    @staticmethod
    def _target(group: h5py.Group, name: str, node: h5py.Dataset) -> str:
        link = group.get(name, getlink=True)
        if isinstance(link, h5py.SoftLink):
            return link.path
        if "target" in node.attrs:
            return _as_str(node.attrs["target"])
        return node.name
