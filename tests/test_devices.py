"""
Tests for device field providers and the device registry.
"""

import pytest

from nxassembler.devices import (
    Detector,
    DeviceRegistry,
    FieldProvider,
    MultiFieldPositioner,
    Positioner,
)
from nxassembler.models import DeviceBinding
from nxassembler.workflow import assemble


class TestDeviceRegistry:
    """Tests for the DeviceRegistry."""

    def test_registered_types(self):
        types = DeviceRegistry.list_types()
        assert "detector" in types
        assert "positioner" in types
        assert "multi_positioner" in types

    @pytest.mark.parametrize(
        "type_name,provider",
        [
            ("detector", Detector),
            ("NXdetector", Detector),
            ("nxpositioner", Positioner),
            ("Multi-Positioner", MultiFieldPositioner),
        ],
    )
    def test_lookup_is_case_insensitive_with_aliases(self, type_name, provider):
        assert DeviceRegistry.get_provider(type_name) is provider

    def test_unknown_type(self):
        with pytest.raises(KeyError, match="known types"):
            DeviceRegistry.get_provider("monochromator")

    def test_providers_are_field_providers(self):
        for type_name in DeviceRegistry.list_types():
            assert issubclass(DeviceRegistry.get_provider(type_name), FieldProvider)


class TestDetector:
    """Tests for the Detector provider."""

    def test_to_device(self):
        device = Detector("det", 100, 512).to_device()
        assert device.name == "det"
        assert device.nx_class == "NXdetector"
        assert not device.is_multi_field
        assert device.default_field.name == "data"
        assert device.default_field.shape == (100, 512)
        assert device.default_field.source_path == "/entry/instrument/det/data"

    def test_time_of_flight(self):
        detector = Detector("det", 100, 1000)
        detector.include_time_of_flight()
        assert detector.time_of_flight_dimension == 1

        device = detector.to_device("/entry1/instrument")
        assert device.is_multi_field
        assert device.default_field.name == "data"
        tof = device.get_field("time_of_flight")
        assert tof.shape == (1000,)
        assert tof.indices == (1,)
        assert device.default_field.indices is None
        assert tof.source_path == "/entry1/instrument/det/time_of_flight"

    def test_time_of_flight_primary_assembles(self):
        """Test the time-of-flight field needs no index mapping from the caller."""
        detector = Detector("det", 100, 1000)
        detector.include_time_of_flight()

        layout = assemble(
            DeviceBinding.primary(detector.to_device()),
            DeviceBinding.axis(Positioner("x", 100).to_device(), 0),
        )
        assert layout.signal_name == "det_data"
        assert layout.rendered_axes() == ["x", "."]
        assert layout.fields["det_time_of_flight"].indices == (1,)
        assert layout.auxiliary_fields == ["det_time_of_flight"]

    def test_explicit_mapping_overrides_declared_indices(self):
        detector = Detector("det", 10, 10)
        detector.include_time_of_flight()
        binding = DeviceBinding(
            device=detector.to_device(),
            role="primary",
            index_mapping={"time_of_flight": (0,)},
        )
        layout = assemble(binding)
        assert layout.fields["det_time_of_flight"].indices == (0,)

    def test_time_of_flight_needs_a_dimension(self):
        with pytest.raises(ValueError):
            Detector("det").include_time_of_flight()

    def test_create(self):
        detector = Detector.create("det", shape=[5, 6])
        assert detector.shape == (5, 6)
        with pytest.raises(ValueError, match="needs a shape"):
            Detector.create("det")
        with pytest.raises(ValueError, match="named fields"):
            Detector.create("det", shape=[5], fields={"a": [5]})

    def test_repr(self):
        assert repr(Detector("det", 5)) == "Detector('det', data=(5))"


class TestPositioners:
    """Tests for the positioner providers."""

    def test_positioner(self):
        device = Positioner("x", 100).to_device()
        assert device.nx_class == "NXpositioner"
        assert device.default_field.name == "value"
        assert device.default_field.source_path == "/entry/instrument/x/value"

    def test_positioner_rejects_fields(self):
        with pytest.raises(ValueError, match="multi_positioner"):
            Positioner.create("x", shape=[5], fields={"rbv": [5]})

    def test_multi_field_positioner(self):
        provider = MultiFieldPositioner("polar_angle", {"rbv": (50, 5), "demand": (50,)})
        device = provider.to_device()
        assert [f.name for f in device.fields] == ["rbv", "demand"]
        assert device.default_field.name == "demand"
        assert device.get_field("rbv").source_path == "/entry/instrument/polar_angle/rbv"

    def test_multi_field_positioner_default_must_exist(self):
        with pytest.raises(ValueError, match="not one of"):
            MultiFieldPositioner("p", {"rbv": (5,)}, default_field="demand")

    def test_multi_field_positioner_create(self):
        provider = MultiFieldPositioner.create("p", fields={"rbv": [5], "setpoint": [5]}, default_field="setpoint")
        assert provider.default_field_name == "setpoint"
        with pytest.raises(ValueError, match="not a shape"):
            MultiFieldPositioner.create("p", shape=[5], fields={"demand": [5]})

    def test_providers_assemble(self):
        """Test provider devices assemble without knowing their types."""
        detector = Detector("det1", 50, 5, 1024)
        polar = MultiFieldPositioner("polar_angle", {"rbv": (50, 5), "demand": (50,)})
        frames = Positioner("frame_number", 5)

        layout = assemble(
            DeviceBinding.primary(detector.to_device()),
            DeviceBinding.axis(polar.to_device(), 0, index_mapping={"rbv": (0, 1)}),
            DeviceBinding.axis(frames.to_device(), 1),
        )
        assert layout.rendered_axes() == ["polar_angle_demand", "frame_number", "."]
        assert layout.signal.target_path == "/entry/instrument/det1/data"
        assert layout.fields["polar_angle_rbv"].target_path == "/entry/instrument/polar_angle/rbv"
        assert layout.fields["frame_number"].target_path == "/entry/instrument/frame_number/value"
