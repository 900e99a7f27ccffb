"""
Tests for the scan description and NeXus parsers.
"""

import json

import h5py
import numpy as np
import pytest

from nxassembler.enums import AxisPlaceholder, Role
from nxassembler.errors import NexusReadError, ScanDescriptionError
from nxassembler.parsers import NexusParser, ScanParser
from nxassembler.workflow import AssemblyResult, assemble, assemble_from_file
from nxassembler.writers import write_layout_to_nexus

POLAR_SCAN = {
    "title": "Polar angle scan",
    "primary": {"name": "det1", "type": "detector", "shape": [50, 5, 1024]},
    "axes": [
        {
            "name": "polar_angle",
            "type": "multi_positioner",
            "fields": {"rbv": [50, 5], "demand": [50]},
            "default_field": "demand",
            "default_axis_dimension": 0,
            "indices": {"rbv": [0, 1]},
        },
        {"name": "frame_number", "type": "positioner", "shape": [5], "default_axis_dimension": 1},
        {"name": "time", "type": "positioner", "shape": [50, 5], "indices": [0, 1]},
    ],
}


def write_scan(tmp_path, document, name="scan.json"):
    path = tmp_path / name
    path.write_text(json.dumps(document))
    return path


class TestScanParser:
    """Tests for ScanParser."""

    def test_parse_file(self, tmp_path):
        scan = ScanParser().parse(write_scan(tmp_path, POLAR_SCAN))

        assert scan.title == "Polar angle scan"
        assert scan.num_devices == 4
        assert scan.file_path.endswith("scan.json")
        assert scan.primary.role is Role.PRIMARY
        assert scan.primary.device.name == "det1"
        assert [b.device.name for b in scan.axes] == ["polar_angle", "frame_number", "time"]
        assert scan.axes[0].index_mapping == {"rbv": (0, 1)}
        assert scan.axes[2].index_mapping == (0, 1)

    def test_parsed_scan_assembles(self, tmp_path):
        scan = ScanParser().parse(write_scan(tmp_path, POLAR_SCAN))
        layout = assemble(scan.primary, *scan.axes, base_path=scan.base_path)
        assert layout.rendered_axes() == ["polar_angle_demand", "frame_number", "."]
        assert layout.fields["time"].indices == (0, 1)

    def test_base_path(self):
        document = {
            "base_path": "/entry1/instrument",
            "primary": {"name": "det", "type": "NXdetector", "shape": [10]},
        }
        scan = ScanParser().parse_dict(document)
        assert scan.base_path == "/entry1/instrument"
        assert scan.primary.device.default_field.source_path == "/entry1/instrument/det/data"

    def test_time_of_flight_detector(self):
        document = {
            "primary": {
                "name": "det",
                "type": "detector",
                "shape": [10, 1000],
                "time_of_flight": True,
                "indices": {"time_of_flight": [1]},
            },
        }
        scan = ScanParser().parse_dict(document)
        layout = assemble(scan.primary, *scan.axes)
        assert layout.signal_name == "det_data"
        assert layout.fields["det_time_of_flight"].indices == (1,)

    def test_time_of_flight_indices_come_from_detector(self):
        document = {"primary": {"name": "det", "type": "detector", "shape": [10, 1000], "time_of_flight": True}}
        scan = ScanParser().parse_dict(document)
        layout = assemble(scan.primary)
        assert layout.fields["det_time_of_flight"].indices == (1,)

    @pytest.mark.parametrize(
        "document,message",
        [
            ({"axes": []}, "primary"),
            ({"primary": {"name": "det", "type": "detector"}}, "needs 'shape' or 'fields'"),
            ({"primary": {"name": "det", "type": "laser", "shape": [5]}}, "Unknown device type"),
            (
                {"primary": {"name": "det", "type": "detector", "shape": [5], "colour": "red"}},
                "colour",
            ),
            (
                {"primary": {"name": "det", "type": "detector", "shape": [5], "default_axis_dimension": 0}},
                "cannot set default_axis_dimension",
            ),
            (
                {"primary": {"name": "x", "type": "positioner", "shape": [5], "time_of_flight": True}},
                "no time-of-flight field",
            ),
            (
                {
                    "primary": {"name": "det", "type": "detector", "shape": [5]},
                    "axes": [{"name": "x", "type": "positioner", "shape": [5], "indices": {"rbv": [0]}}],
                },
                "unknown fields",
            ),
            (
                {"base_path": "entry/instrument", "primary": {"name": "det", "type": "detector", "shape": [5]}},
                "must be absolute",
            ),
        ],
    )
    def test_invalid_documents(self, document, message):
        with pytest.raises(ScanDescriptionError, match=message):
            ScanParser().parse_dict(document)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ScanDescriptionError, match="cannot read file"):
            ScanParser().parse(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ScanDescriptionError, match="invalid JSON"):
            ScanParser().parse(path)


class TestAssembleFromFile:
    """Tests for the assemble_from_file convenience function."""

    def test_success(self, tmp_path):
        result = assemble_from_file(write_scan(tmp_path, POLAR_SCAN))
        assert isinstance(result, AssemblyResult)
        assert result.is_complete
        assert not result.has_errors
        assert result.title == "Polar angle scan"
        assert result.warnings == ["No default axis for signal dimension 2"]
        assert "Polar angle scan" in result.summary()

    def test_assembly_error_is_collected(self, tmp_path):
        document = {
            "primary": {"name": "det", "type": "detector", "shape": [100]},
            "axes": [{"name": "x", "type": "positioner", "shape": [99], "default_axis_dimension": 0}],
        }
        result = assemble_from_file(write_scan(tmp_path, document))
        assert not result.is_complete
        assert result.has_errors
        assert "Shape mismatch" in result.errors[0]

    def test_parse_error_is_collected(self, tmp_path):
        result = assemble_from_file(tmp_path / "missing.json")
        assert result.has_errors
        assert "Layout: Not assembled" in result.summary()


class TestNexusParser:
    """Tests for reading NXdata groups back into layouts."""

    def test_round_trip(self, tmp_path):
        scan = ScanParser().parse_dict(POLAR_SCAN)
        layout = assemble(scan.primary, *scan.axes)
        path = write_layout_to_nexus(layout, tmp_path / "scan.nxs")

        parsed = NexusParser().parse(path)
        assert parsed.signal_name == layout.signal_name
        assert parsed.default_axes == layout.default_axes
        assert parsed.default_axes[2] is AxisPlaceholder.NONE
        assert parsed.fields == layout.fields
        assert list(parsed.fields)[0] == "det1"

    def test_fields_without_indices_are_skipped(self, tmp_path):
        path = tmp_path / "plain.nxs"
        with h5py.File(path, "w") as f:
            group = f.create_group("/entry/data")
            group.attrs["signal"] = "counts"
            group.create_dataset("counts", data=np.zeros((4, 3)))
            group.create_dataset("notes", data=np.zeros(2))

        parsed = NexusParser().parse(path)
        assert list(parsed.fields) == ["counts"]
        assert parsed.signal.indices == (0, 1)
        assert parsed.signal.target_path == "/entry/data/counts"
        assert parsed.rendered_axes() == [".", "."]

    def test_target_attribute(self, tmp_path):
        path = tmp_path / "target.nxs"
        with h5py.File(path, "w") as f:
            group = f.create_group("/entry/data")
            group.attrs["signal"] = "counts"
            group.attrs["axes"] = "x"
            group.attrs["x_indices"] = 0
            counts = group.create_dataset("counts", data=np.zeros(4))
            counts.attrs["target"] = "/entry/instrument/det/data"
            group.create_dataset("x", data=np.arange(4))

        parsed = NexusParser().parse(path)
        assert parsed.default_axes == ("x",)
        assert parsed.fields["x"].indices == (0,)
        assert parsed.signal.target_path == "/entry/instrument/det/data"

    def test_missing_group(self, tmp_path):
        path = tmp_path / "empty.nxs"
        with h5py.File(path, "w"):
            pass
        with pytest.raises(NexusReadError, match="no such group"):
            NexusParser().parse(path)

    def test_missing_signal_attribute(self, tmp_path):
        path = tmp_path / "nosignal.nxs"
        with h5py.File(path, "w") as f:
            f.create_group("/entry/data")
        with pytest.raises(NexusReadError, match="no 'signal' attribute"):
            NexusParser().parse(path)

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "not_hdf5.nxs"
        path.write_text("plain text")
        with pytest.raises(NexusReadError, match="cannot read file"):
            NexusParser().parse(path)
