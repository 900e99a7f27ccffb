"""
Field naming for NXdata groups.

A single-field device contributes one field named after the device.
A multi-field device contributes ``<device>_<field>`` for each field.
"""

import logging

from nxassembler.errors import DuplicateFieldName
from nxassembler.models.device import Device, FieldDescriptor

logger = logging.getLogger(__name__)


def emitted_field_name(device: Device, descriptor: FieldDescriptor) -> str:
    """
    Resolve the name a device field is emitted under.

    Args:
        device: The device owning the field
        descriptor: One of the device's fields

    Returns:
        The device name for a single-field device, otherwise
        ``<device>_<field>``
    """
    if not device.is_multi_field:
        return device.name
    return f"{device.name}_{descriptor.name}"


def emitted_field_names(device: Device) -> dict[str, FieldDescriptor]:
    """Map every emitted name of a device to its field, in declaration order."""
    names: dict[str, FieldDescriptor] = {}
    for descriptor in device.fields:
        name = emitted_field_name(device, descriptor)
        if name in names:
            raise DuplicateFieldName(name, device.name)
        names[name] = descriptor
    return names


class NameRegistry:
    """
    Tracks emitted field names across one assembly.

    Names are reserved per device in one step: if any name collides,
    none of the device's names are reserved.
    """

    def __init__(self) -> None:
        self._owners: dict[str, str] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._owners

    def owner(self, name: str) -> str:
        return self._owners[name]

    def check(self, device: Device) -> dict[str, FieldDescriptor]:
        """
        Resolve a device's emitted names without reserving them.

        Raises:
            DuplicateFieldName: If a name is already reserved
        """
        names = emitted_field_names(device)
        for name in names:
            if name in self._owners:
                logger.debug(
                    f"Field name '{name}' of '{device.name}' already owned by "
                    f"'{self._owners[name]}'"
                )
                raise DuplicateFieldName(name, device.name)
        return names

    def reserve(self, device_name: str, names: list[str]) -> None:
        for name in names:
            self._owners[name] = device_name
