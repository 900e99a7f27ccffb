"""
Axis assembler for NXdata groups.

The core of the package: combines one primary (signal) device with any
number of axis devices into an NxDataLayout.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from nxassembler.enums import AxisPlaceholder, Role
from nxassembler.errors import (
    AlreadyBuilt,
    AssemblerFailed,
    DuplicateDefaultAxis,
    IndexMappingError,
    InvalidPrimary,
    LayoutError,
    MissingIndexMapping,
    PrimaryNotSet,
    ShapeMismatch,
)
from nxassembler.models.device import Device, DeviceBinding, FieldDescriptor, IndexMapping
from nxassembler.models.layout import FieldEntry, NxDataLayout
from nxassembler.models.shape import ShapeInfo

from .naming import NameRegistry, emitted_field_name
from .targets import DEFAULT_BASE_PATH, resolve_target_path

logger = logging.getLogger(__name__)


@dataclass
class _PlannedField:
    """A validated field waiting to be committed."""

    name: str
    entry: FieldEntry
    default_axis_dimension: Optional[int] = None


class AxisAssembler:
    """
    Assembles an NXdata layout from device bindings.

    Workflow:
    1. set_primary() with the signal device
    2. add_axis() for each axis device
    3. build() to get the finished NxDataLayout

    Each registration validates the whole device before anything is
    recorded. Once an operation has failed the assembler is unusable and
    every later call raises AssemblerFailed. An assembler builds one
    layout; it must not be shared between threads.

    Example:
        assembler = AxisAssembler()
        assembler.set_primary(DeviceBinding.primary(detector))
        assembler.add_axis(DeviceBinding.axis(x_positioner, 0))
        layout = assembler.build()

        print(layout.rendered_axes())  # ['x']
    """

    def __init__(self, base_path: str = DEFAULT_BASE_PATH):
        """
        Initialize the assembler.

        Args:
            base_path: Group holding device groups, used for the target path
                of fields that have no explicit source path
        """
        self.base_path = base_path

        self._primary: Optional[DeviceBinding] = None
        self._signal_name: Optional[str] = None
        self._signal_shape: Optional[ShapeInfo] = None
        self._fields: dict[str, FieldEntry] = {}
        self._axes: dict[int, str] = {}
        self._names = NameRegistry()

        self._layout: Optional[NxDataLayout] = None
        self._failure: Optional[LayoutError] = None

    @property
    def signal_name(self) -> Optional[str]:
        return self._signal_name

    @property
    def signal_shape(self) -> Optional[ShapeInfo]:
        return self._signal_shape

    @property
    def is_built(self) -> bool:
        return self._layout is not None

    @property
    def is_failed(self) -> bool:
        return self._failure is not None

    def set_primary(self, binding: DeviceBinding) -> None:
        """
        Register the primary (signal) device.

        Args:
            binding: A binding with role PRIMARY

        Raises:
            InvalidPrimary: If a primary is already set, the role is not
                PRIMARY, or the device has no usable default field
            AlreadyBuilt: If build() has already been called
        """
        self._check_usable()
        try:
            if self._layout is not None:
                raise AlreadyBuilt("set primary device")
            self._set_primary(binding)
        except LayoutError as e:
            self._failure = e
            raise

    def add_axis(self, binding: DeviceBinding) -> None:
        """
        Register an axis device.

        Every field of the device is recorded. The device's default field
        also takes the default axes slot given by default_axis_dimension,
        when one is set.

        Args:
            binding: A binding with role AXIS

        Raises:
            PrimaryNotSet: If no primary device is registered yet
            AlreadyBuilt: If build() has already been called
            MissingIndexMapping: If a field's indices cannot be determined
            ShapeMismatch: If a field's extents disagree with the signal
            DuplicateDefaultAxis: If the default axes slot is already taken
            DuplicateFieldName: If an emitted name is already in use
        """
        self._check_usable()
        try:
            if self._layout is not None:
                raise AlreadyBuilt("add axis device")
            if self._signal_shape is None:
                raise PrimaryNotSet("add axis device")
            self._add_axis(binding, self._signal_shape)
        except LayoutError as e:
            self._failure = e
            raise

    def add_axes(self, *bindings: DeviceBinding) -> None:
        """Register several axis devices in order."""
        for binding in bindings:
            self.add_axis(binding)

    def set_primary_device(self, device: Device) -> None:
        """Register a device as the primary device."""
        self.set_primary(DeviceBinding.primary(device))

    def add_device(
        self,
        device: Device,
        default_axis_dimension: Optional[int] = None,
        *indices: int,
        index_mapping: Optional[IndexMapping] = None,
    ) -> None:
        """
        Register a device as an axis device.

        ``add_device(x, 0, 0, 1)`` makes ``x`` the default axis of signal
        dimension 0 with indices ``[0, 1]``; ``add_device(t, None, 1)``
        adds ``t`` as an auxiliary axis over dimension 1.
        """
        self.add_axis(
            DeviceBinding.axis(
                device, default_axis_dimension, *indices, index_mapping=index_mapping
            )
        )

    def build(self) -> NxDataLayout:
        """
        Finish the layout.

        Unclaimed default axes slots are filled with AxisPlaceholder.NONE
        and the signal is emitted with identity indices. Calling build()
        again returns the same layout.

        Raises:
            PrimaryNotSet: If no primary device was registered
        """
        self._check_usable()
        if self._layout is not None:
            return self._layout

        if self._primary is None or self._signal_name is None or self._signal_shape is None:
            self._failure = PrimaryNotSet("build layout")
            raise self._failure

        default_axes = []
        for dim in range(self._signal_shape.rank):
            name = self._axes.get(dim)
            if name is None:
                logger.info(f"No default axis for dimension {dim} of '{self._signal_name}'")
                default_axes.append(AxisPlaceholder.NONE)
            else:
                default_axes.append(name)

        self._layout = NxDataLayout(
            signal_name=self._signal_name,
            default_axes=tuple(default_axes),
            fields=dict(self._fields),
        )
        logger.debug(
            f"Built layout for '{self._signal_name}' with {len(self._fields)} fields"
        )
        return self._layout

    def _check_usable(self) -> None:
        if self._failure is not None:
            raise AssemblerFailed(self._failure) from self._failure

    def _set_primary(self, binding: DeviceBinding) -> None:
        device = binding.device

        if self._primary is not None:
            raise InvalidPrimary(
                device.name,
                f"primary device '{self._primary.device.name}' is already set",
            )
        if binding.role is not Role.PRIMARY:
            raise InvalidPrimary(device.name, f"binding role is '{binding.role.value}'")

        signal = device.default_field
        if signal is None:
            raise InvalidPrimary(device.name, "device has no default field")
        if signal.rank == 0:
            raise InvalidPrimary(device.name, "signal field must have at least one dimension")
        if binding.default_axis_dimension is not None:
            raise InvalidPrimary(
                device.name, "a primary device cannot declare a default axis dimension"
            )

        names = self._names.check(device)
        signal_name = emitted_field_name(device, signal)
        signal_entry = FieldEntry(
            shape=signal.shape,
            indices=tuple(range(signal.rank)),
            target_path=self._target_path(device, signal),
        )

        # Remaining fields of the primary device are auxiliary
        planned = [
            self._plan_field(binding, descriptor, name, signal.shape)
            for name, descriptor in names.items()
            if name != signal_name
        ]

        self._primary = binding
        self._signal_name = signal_name
        self._signal_shape = signal.shape
        self._commit(device.name, [_PlannedField(signal_name, signal_entry)] + planned)
        logger.debug(f"Primary device '{device.name}' sets signal '{signal_name}' {signal.shape}")

    def _add_axis(self, binding: DeviceBinding, signal_shape: ShapeInfo) -> None:
        device = binding.device

        if binding.role is not Role.AXIS:
            raise InvalidPrimary(device.name, "a primary binding cannot be added as an axis")

        dim = binding.default_axis_dimension
        default = device.default_field
        if dim is not None and default is not None:
            default_name = emitted_field_name(device, default)
            if dim >= signal_shape.rank:
                raise IndexMappingError(
                    default_name,
                    f"default axis dimension {dim} is out of range for a "
                    f"rank-{signal_shape.rank} signal",
                    dimension=dim,
                )
            if dim in self._axes:
                raise DuplicateDefaultAxis(dim, self._axes[dim], default_name)
        elif dim is not None:
            logger.warning(
                f"Device '{device.name}' has no fields; default axis dimension {dim} ignored"
            )

        names = self._names.check(device)
        planned = [
            self._plan_field(binding, descriptor, name, signal_shape)
            for name, descriptor in names.items()
        ]
        self._commit(device.name, planned)
        logger.debug(
            f"Axis device '{device.name}' adds {[p.name for p in planned]}"
            + (f" (default axis {dim})" if dim is not None else "")
        )

    def _plan_field(
        self,
        binding: DeviceBinding,
        descriptor: FieldDescriptor,
        name: str,
        signal_shape: ShapeInfo,
    ) -> _PlannedField:
        """Resolve and validate one field without recording it."""
        is_default = binding.role is Role.AXIS and binding.device.is_default_field(descriptor)
        indices = self._resolve_indices(binding, descriptor, name, is_default)
        self._validate_indices(name, descriptor.shape, indices, signal_shape)

        claimed = binding.default_axis_dimension if is_default else None

        entry = FieldEntry(
            shape=descriptor.shape,
            indices=indices,
            target_path=self._target_path(binding.device, descriptor),
        )
        return _PlannedField(name, entry, claimed)

    @staticmethod
    def _resolve_indices(
        binding: DeviceBinding,
        descriptor: FieldDescriptor,
        name: str,
        is_default: bool,
    ) -> tuple[int, ...]:
        explicit = binding.explicit_indices(descriptor)
        if explicit is not None:
            return tuple(explicit)
        if descriptor.indices is not None:
            return descriptor.indices

        dim = binding.default_axis_dimension
        if is_default and dim is not None and descriptor.rank == 1:
            return (dim,)

        raise MissingIndexMapping(name, descriptor.rank)

    @staticmethod
    def _validate_indices(
        name: str,
        shape: ShapeInfo,
        indices: tuple[int, ...],
        signal_shape: ShapeInfo,
    ) -> None:
        if len(indices) != shape.rank:
            raise IndexMappingError(
                name,
                f"{len(indices)} indices given for a rank-{shape.rank} field",
                expected=shape.rank,
                actual=len(indices),
            )

        seen: set[int] = set()
        for k, dim in enumerate(indices):
            if dim >= signal_shape.rank:
                raise IndexMappingError(
                    name,
                    f"index {dim} is out of range for a rank-{signal_shape.rank} signal",
                    dimension=dim,
                )
            if dim in seen:
                raise IndexMappingError(
                    name, f"signal dimension {dim} is mapped more than once", dimension=dim
                )
            seen.add(dim)

            if shape[k] != signal_shape[dim]:
                raise ShapeMismatch(name, dim, signal_shape[dim], shape[k])

    def _target_path(self, device: Device, descriptor: FieldDescriptor) -> str:
        return resolve_target_path(
            device.name,
            descriptor.name,
            source_path=descriptor.source_path,
            base_path=self.base_path,
        )

    def _commit(self, device_name: str, planned: list[_PlannedField]) -> None:
        self._names.reserve(device_name, [p.name for p in planned])
        for p in planned:
            self._fields[p.name] = p.entry
            if p.default_axis_dimension is not None:
                self._axes[p.default_axis_dimension] = p.name


def assemble(
    primary: DeviceBinding,
    *axes: DeviceBinding,
    base_path: str = DEFAULT_BASE_PATH,
) -> NxDataLayout:
    """
    Assemble a layout in one call.

    Args:
        primary: The PRIMARY binding
        *axes: AXIS bindings, in registration order
        base_path: Group holding device groups for conventional target paths

    Returns:
        The built NxDataLayout
    """
    assembler = AxisAssembler(base_path=base_path)
    assembler.set_primary(primary)
    assembler.add_axes(*axes)
    return assembler.build()
