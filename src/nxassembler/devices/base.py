"""
Base classes for device field providers.

Provides the abstract interface that turns an instrument device into a
plain Device record, and the registry used to look providers up by type.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Optional, Type

from nxassembler.models.device import Device, FieldDescriptor
from nxassembler.models.shape import ShapeInfo
from nxassembler.workflow.targets import DEFAULT_BASE_PATH, conventional_path


class FieldProvider(ABC):
    """
    Abstract base class for devices that expose named fields.

    Each provider subclass knows:
    1. Which NeXus base class it represents
    2. Which fields it writes and their shapes
    3. Which field is its default (representative) field

    The assembler never sees providers; it only sees the Device
    produced by to_device().
    """

    # Class attributes - override in subclasses
    type_name: str = "UNKNOWN"
    aliases: list[str] = []
    nx_class: Optional[str] = None

    def __init__(self, name: str):
        self.name = name

    @property
    @abstractmethod
    def default_field_name(self) -> str:
        """Name of the field that represents this device."""
        pass

    @abstractmethod
    def field_shapes(self) -> dict[str, ShapeInfo]:
        """
        Shapes of the fields this device writes, in declaration order.

        Returns:
            Dict mapping field name to its shape
        """
        pass

    def field_indices(self) -> dict[str, tuple[int, ...]]:
        """Signal dimensions of fields whose mapping the device fixes itself."""
        return {}

    @classmethod
    @abstractmethod
    def create(
        cls,
        name: str,
        shape: Optional[Sequence[int]] = None,
        fields: Optional[dict[str, Sequence[int]]] = None,
        default_field: Optional[str] = None,
    ) -> FieldProvider:
        """
        Create a provider from a scan description entry.

        Args:
            name: Device name
            shape: Shape of a single-field device
            fields: Field shapes of a multi-field device
            default_field: Default field of a multi-field device

        Returns:
            The provider instance
        """
        pass

    def to_device(self, base_path: str = DEFAULT_BASE_PATH) -> Device:
        """
        Build the Device record for this provider.

        Source paths follow ``<base_path>/<device>/<field>``.

        Args:
            base_path: Group holding device groups

        Returns:
            Device with one FieldDescriptor per field
        """
        default = self.default_field_name
        indices = self.field_indices()
        descriptors = [
            FieldDescriptor(
                name=field_name,
                shape=shape,
                source_path=conventional_path(self.name, field_name, base_path),
                is_default=field_name == default,
                indices=indices.get(field_name),
            )
            for field_name, shape in self.field_shapes().items()
        ]
        return Device(name=self.name, fields=tuple(descriptors), nx_class=self.nx_class)

    def __repr__(self) -> str:
        shapes = ", ".join(f"{k}={v}" for k, v in self.field_shapes().items())
        return f"{type(self).__name__}({self.name!r}, {shapes})"


class DeviceRegistry:
    """
    Registry of field provider types.

    Maintains a mapping of type names and aliases to provider classes,
    so scan descriptions can name devices by type.
    """

    _providers: dict[str, Type[FieldProvider]] = {}

    @classmethod
    def register(cls, provider: Type[FieldProvider]) -> Type[FieldProvider]:
        """
        Register a provider class.

        Can be used as a decorator:
            @DeviceRegistry.register
            class MyDevice(FieldProvider):
                ...

        Args:
            provider: The provider class

        Returns:
            The provider class (for decorator use)
        """
        cls._providers[provider.type_name.lower()] = provider
        for alias in provider.aliases:
            cls._providers[alias.lower()] = provider
        return provider

    @classmethod
    def get_provider(cls, type_name: str) -> Type[FieldProvider]:
        """
        Get the provider class for a device type.

        Lookup is case-insensitive and accepts aliases such as "NXdetector".

        Args:
            type_name: Device type or alias

        Returns:
            The matching provider class

        Raises:
            KeyError: If no provider is registered for the type
        """
        try:
            return cls._providers[type_name.lower()]
        except KeyError:
            raise KeyError(
                f"Unknown device type '{type_name}'; known types: {cls.list_types()}"
            ) from None

    @classmethod
    def list_types(cls) -> list[str]:
        """List all registered type names."""
        return sorted(set(p.type_name for p in cls._providers.values()))
