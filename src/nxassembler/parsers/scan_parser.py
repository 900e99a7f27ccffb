"""
Parser for JSON scan descriptions.

A scan description names the primary (signal) device and the axis
devices of one NXdata group, with the shapes each device writes and the
dimension hints for each axis.

Example document:

    {
      "title": "Polar angle scan",
      "primary": {"name": "det1", "type": "detector", "shape": [50, 5, 1024]},
      "axes": [
        {"name": "polar_angle", "type": "multi_positioner",
         "fields": {"rbv": [50, 5], "demand": [50]}, "default_field": "demand",
         "default_axis_dimension": 0, "indices": {"rbv": [0, 1]}},
        {"name": "frame_number", "type": "positioner", "shape": [5],
         "default_axis_dimension": 1}
      ]
    }
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from nxassembler.devices import DeviceRegistry, FieldProvider
from nxassembler.errors import LayoutError, ScanDescriptionError
from nxassembler.models.device import DeviceBinding
from nxassembler.workflow.targets import DEFAULT_BASE_PATH

logger = logging.getLogger(__name__)


class DeviceDescription(BaseModel):
    """One device entry of a scan description."""

    model_config = ConfigDict(extra="forbid")

    name: str
    type: str = Field(..., description="Registered device type, e.g. 'detector'")
    shape: Optional[list[int]] = None
    fields: Optional[dict[str, list[int]]] = None
    default_field: Optional[str] = None
    time_of_flight: bool = Field(
        default=False,
        description="Detectors only: also write a time_of_flight field",
    )
    default_axis_dimension: Optional[int] = Field(default=None, ge=0)
    indices: Optional[Union[list[int], dict[str, list[int]]]] = None

    @model_validator(mode="after")
    def check_shape_or_fields(self) -> "DeviceDescription":
        if self.shape is None and not self.fields:
            raise ValueError(f"device '{self.name}' needs 'shape' or 'fields'")
        return self


class ScanDocument(BaseModel):
    """Top level of a scan description."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    base_path: str = DEFAULT_BASE_PATH
    primary: DeviceDescription
    axes: list[DeviceDescription] = Field(default_factory=list)


@dataclass
class ScanDescription:
    """
    Parsed scan description, ready for assembly.

    Attributes:
        primary: Binding for the signal device
        axes: Bindings for the axis devices, in document order
        title: Scan title
        base_path: Group holding device groups
        file_path: Source file, if parsed from disk
    """

    primary: DeviceBinding
    axes: list[DeviceBinding] = field(default_factory=list)
    title: Optional[str] = None
    base_path: str = DEFAULT_BASE_PATH
    file_path: Optional[str] = None

    @property
    def num_devices(self) -> int:
        return 1 + len(self.axes)


class ScanParser:
    """
    Parser for JSON scan descriptions.

    Usage:
        parser = ScanParser()
        scan = parser.parse("/data/scans/scan_0001.json")

        layout = assemble(scan.primary, *scan.axes, base_path=scan.base_path)
    """

    def __init__(self, registry: type[DeviceRegistry] = DeviceRegistry):
        """
        Initialize the parser.

        Args:
            registry: Registry used to look up device types
        """
        self.registry = registry

    def parse(self, file_path: str | Path) -> ScanDescription:
        """
        Parse a scan description file.

        Args:
            file_path: Path to the JSON file

        Returns:
            ScanDescription with the device bindings

        Raises:
            ScanDescriptionError: If the file cannot be read or is invalid
        """
        path = Path(file_path)
        logger.debug(f"Parsing scan description: {path}")

        try:
            with open(path, "r") as f:
                data = json.load(f)
        except OSError as e:
            raise ScanDescriptionError(str(path), f"cannot read file: {e}") from e
        except json.JSONDecodeError as e:
            raise ScanDescriptionError(str(path), f"invalid JSON: {e}") from e

        scan = self.parse_dict(data, source=str(path))
        scan.file_path = str(path)
        return scan

    def parse_dict(self, data: Any, source: str = "<dict>") -> ScanDescription:
        """
        Parse an in-memory scan description.

        Args:
            data: Decoded JSON document
            source: Label used in error messages

        Returns:
            ScanDescription with the device bindings

        Raises:
            ScanDescriptionError: If the document is invalid
        """
        try:
            document = ScanDocument.model_validate(data)
            primary = self._primary_binding(document.primary, document.base_path)
            axes = [self._axis_binding(d, document.base_path) for d in document.axes]
        except ValidationError as e:
            raise ScanDescriptionError(source, _format_validation_error(e)) from e
        except (KeyError, ValueError) as e:
            raise ScanDescriptionError(source, str(e).strip("'\"")) from e
        except LayoutError as e:
            raise ScanDescriptionError(source, str(e)) from e

        logger.info(
            f"Parsed scan {document.title or source}: primary '{primary.device.name}', "
            f"{len(axes)} axis device(s)"
        )
        return ScanDescription(
            primary=primary,
            axes=axes,
            title=document.title,
            base_path=document.base_path,
        )

    def _provider(self, description: DeviceDescription) -> FieldProvider:
        provider_cls = self.registry.get_provider(description.type)
        provider = provider_cls.create(
            description.name,
            shape=description.shape,
            fields=description.fields,
            default_field=description.default_field,
        )
        if description.time_of_flight:
            include = getattr(provider, "include_time_of_flight", None)
            if include is None:
                raise ValueError(
                    f"device '{description.name}' of type '{description.type}' "
                    f"has no time-of-flight field"
                )
            include()
        return provider

    def _primary_binding(self, description: DeviceDescription, base_path: str) -> DeviceBinding:
        if description.default_axis_dimension is not None:
            raise ValueError(
                f"primary device '{description.name}' cannot set default_axis_dimension"
            )
        device = self._provider(description).to_device(base_path)
        return DeviceBinding(
            device=device,
            role="primary",
            index_mapping=_as_mapping(description.indices),
        )

    def _axis_binding(self, description: DeviceDescription, base_path: str) -> DeviceBinding:
        device = self._provider(description).to_device(base_path)
        return DeviceBinding(
            device=device,
            role="axis",
            default_axis_dimension=description.default_axis_dimension,
            index_mapping=_as_mapping(description.indices),
        )


def _as_mapping(
    indices: Optional[Union[list[int], dict[str, list[int]]]],
) -> Optional[Union[tuple[int, ...], dict[str, tuple[int, ...]]]]:
    if indices is None:
        return None
    if isinstance(indices, dict):
        return {name: tuple(values) for name, values in indices.items()}
    return tuple(indices)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(loc) for loc in err["loc"])
        parts.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "; ".join(parts)
