"""
Device models: fields, devices and their bindings into an assembly.

A Device is the plain ``{name, fields}`` record produced by a field
provider. A DeviceBinding says how a device takes part in one NXdata
assembly: as the primary signal, or as an axis with optional dimension
hints.
"""

from typing import Optional, Union

from pydantic import Field, field_validator, model_validator

from nxassembler.enums import Role
from nxassembler.models.base import LayoutModel
from nxassembler.models.shape import ShapeInfo

IndexList = tuple[int, ...]
IndexMapping = Union[IndexList, dict[str, IndexList]]


def _check_name(value: str, kind: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{kind} name must not be empty")
    if "/" in value:
        raise ValueError(f"{kind} name must not contain '/': {value!r}")
    if value in (".", ".."):
        raise ValueError(f"{kind} name must not be {value!r}")
    return value


class FieldDescriptor(LayoutModel):
    """
    One named field owned by a device.

    Attributes:
        name: Field name within its device (e.g., "value", "rbv")
        shape: Extents of the field's data
        source_path: Where the field's data lives (e.g., "/entry/instrument/x/value")
        is_default: Whether this is the device's representative field
        indices: Signal dimensions the field maps, when its provider knows them
    """

    name: str = Field(
        ...,
        description="Field name within its device",
    )

    shape: ShapeInfo = Field(
        ...,
        description="Extents of the field's data",
    )

    source_path: Optional[str] = Field(
        default=None,
        description="Slash-separated location of the field's data",
    )

    is_default: bool = Field(
        default=False,
        description="Whether this is the device's representative field",
    )

    indices: Optional[IndexList] = Field(
        default=None,
        description="Signal dimensions the field maps, when known by its provider",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v, "Field")

    @field_validator("indices")
    @classmethod
    def validate_indices(cls, v: Optional[IndexList]) -> Optional[IndexList]:
        if v is not None and any(index < 0 for index in v):
            raise ValueError(f"Field indices must be >= 0, got {list(v)}")
        return v

    @property
    def rank(self) -> int:
        return self.shape.rank


class Device(LayoutModel):
    """
    A named bundle of fields.

    A device with a single field treats that field as its default.
    A device with several fields must mark exactly one as default.

    Attributes:
        name: Device name (e.g., "det", "polar_angle")
        fields: Fields in declaration order
        nx_class: NeXus base class of the device (e.g., "NXpositioner")
    """

    name: str = Field(
        ...,
        description="Device name",
    )

    fields: tuple[FieldDescriptor, ...] = Field(
        default=(),
        description="Fields in declaration order",
    )

    nx_class: Optional[str] = Field(
        default=None,
        description="NeXus base class of the device",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v, "Device")

    @model_validator(mode="after")
    def validate_fields(self) -> "Device":
        """Check field names are unique and at most one field is default."""
        names = [f.name for f in self.fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Device '{self.name}' has duplicate fields: {duplicates}")

        defaults = [f.name for f in self.fields if f.is_default]
        if len(defaults) > 1:
            raise ValueError(
                f"Device '{self.name}' marks more than one default field: {defaults}"
            )
        if len(self.fields) > 1 and not defaults:
            raise ValueError(
                f"Device '{self.name}' has {len(self.fields)} fields but no default field"
            )
        return self

    @property
    def is_multi_field(self) -> bool:
        return len(self.fields) > 1

    @property
    def default_field(self) -> Optional[FieldDescriptor]:
        """The representative field, or None for a device without fields."""
        if len(self.fields) == 1:
            return self.fields[0]
        for f in self.fields:
            if f.is_default:
                return f
        return None

    def get_field(self, name: str) -> FieldDescriptor:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(f"Device '{self.name}' has no field '{name}'")

    def is_default_field(self, descriptor: FieldDescriptor) -> bool:
        default = self.default_field
        return default is not None and default.name == descriptor.name


class DeviceBinding(LayoutModel):
    """
    Binds a device into an assembly.

    Attributes:
        device: The device being bound
        role: PRIMARY for the signal device, AXIS otherwise
        default_axis_dimension: Signal dimension whose default axis is this
            device's default field, or None for an auxiliary axis
        index_mapping: Signal dimensions for each field's own dimensions.
            Either one shared sequence or a dict keyed by field name.
    """

    device: Device = Field(
        ...,
        description="The device being bound",
    )

    role: Role = Field(
        default=Role.AXIS,
        description="Role of the device in the assembly",
    )

    default_axis_dimension: Optional[int] = Field(
        default=None,
        description="Signal dimension this device is the default axis for",
        ge=0,
    )

    index_mapping: Optional[IndexMapping] = Field(
        default=None,
        description="Signal dimensions mapped by each field's dimensions",
    )

    @field_validator("index_mapping")
    @classmethod
    def validate_index_mapping(cls, v: Optional[IndexMapping]) -> Optional[IndexMapping]:
        """Reject negative indices; per-field keys are checked against the device later."""
        if v is None:
            return v
        lists = v.values() if isinstance(v, dict) else [v]
        for indices in lists:
            for index in indices:
                if index < 0:
                    raise ValueError(f"Index mapping entries must be >= 0, got {index}")
        return v

    @model_validator(mode="after")
    def validate_mapping_keys(self) -> "DeviceBinding":
        if isinstance(self.index_mapping, dict):
            known = {f.name for f in self.device.fields}
            unknown = sorted(set(self.index_mapping) - known)
            if unknown:
                raise ValueError(
                    f"Index mapping names unknown fields of device "
                    f"'{self.device.name}': {unknown}"
                )
        return self

    @classmethod
    def primary(cls, device: Device) -> "DeviceBinding":
        """Create the binding for the signal device."""
        return cls(device=device, role=Role.PRIMARY)

    @classmethod
    def axis(
        cls,
        device: Device,
        default_axis_dimension: Optional[int] = None,
        *indices: int,
        index_mapping: Optional[IndexMapping] = None,
    ) -> "DeviceBinding":
        """
        Create an axis binding.

        Positional indices after the default axis dimension form a shared
        mapping, so ``DeviceBinding.axis(x, 0, 0, 1)`` binds ``x`` as the
        default axis of dimension 0 with indices ``[0, 1]``.
        """
        if indices and index_mapping is not None:
            raise ValueError("Pass indices positionally or as index_mapping, not both")
        mapping = tuple(indices) if indices else index_mapping
        return cls(
            device=device,
            role=Role.AXIS,
            default_axis_dimension=default_axis_dimension,
            index_mapping=mapping,
        )

    def explicit_indices(self, descriptor: FieldDescriptor) -> Optional[IndexList]:
        """
        Return the explicitly supplied indices for a field, if any.

        A per-field entry always applies. A shared sequence applies to the
        only field of a single-field device, and to each field of a
        multi-field device whose rank equals the sequence length.
        """
        mapping = self.index_mapping
        if mapping is None:
            return None
        if isinstance(mapping, dict):
            return mapping.get(descriptor.name)
        if not self.device.is_multi_field or len(mapping) == descriptor.rank:
            return mapping
        return None
