"""
Tests for the JSON, Parquet and NeXus writers.
"""

import json

import h5py
import numpy as np
import pyarrow.parquet as pq
import pytest

from nxassembler.enums import AxisPlaceholder
from nxassembler.errors import InvalidTargetPath
from nxassembler.models import Device, DeviceBinding, FieldDescriptor
from nxassembler.workflow import assemble
from nxassembler.writers import (
    FIELD_SCHEMA,
    LAYOUT_SCHEMA,
    JSONWriter,
    NexusWriter,
    ParquetWriter,
    field_records,
    field_role,
    get_schema,
    layout_to_document,
    write_layout,
    write_layout_to_nexus,
)
from nxassembler.writers.json_writer import JSONEncoder


def single(name, *shape):
    return Device(name=name, fields=(FieldDescriptor(name="value", shape=shape),))


@pytest.fixture
def layout():
    """A 3-D detector scanned over a 2-D stage, with an auxiliary time axis."""
    return assemble(
        DeviceBinding.primary(single("det", 4, 3, 8)),
        DeviceBinding.axis(single("x", 4, 3), 0, 0, 1),
        DeviceBinding.axis(single("y", 4, 3), 1, 0, 1),
        DeviceBinding.axis(single("time", 4, 3), None, 0, 1),
    )


class TestSerializers:
    """Tests for layout serialization helpers."""

    def test_field_role(self, layout):
        assert field_role(layout, "det") == ("signal", None)
        assert field_role(layout, "y") == ("axis", 1)
        assert field_role(layout, "time") == ("auxiliary", None)

    def test_field_records(self, layout):
        records = field_records(layout, title="Stage scan")
        assert [r["field_name"] for r in records] == ["det", "x", "y", "time"]
        assert records[1]["indices"] == [0, 1]
        assert records[1]["target_path"] == "/entry/instrument/x/value"
        assert all(r["scan_title"] == "Stage scan" for r in records)

    def test_layout_to_document(self, layout):
        document = layout_to_document(layout, title="Stage scan")
        assert document["title"] == "Stage scan"
        assert document["signal"] == "det"
        assert document["axes"] == ["x", "y", "."]
        assert document["fields"]["time"] == {
            "shape": [4, 3],
            "indices": [0, 1],
            "target": "/entry/instrument/time/value",
        }
        assert "title" not in layout_to_document(layout)

    def test_get_schema(self):
        assert get_schema("fields") is FIELD_SCHEMA
        assert get_schema("layouts") is LAYOUT_SCHEMA
        with pytest.raises(ValueError):
            get_schema("runs")


class TestJSONWriter:
    """Tests for JSONWriter."""

    def test_write_layout(self, layout, tmp_path):
        path = JSONWriter(tmp_path / "out").write_layout(layout, name="scan_0001")
        assert path.name == "scan_0001.json"
        document = json.loads(path.read_text())
        assert document["axes"] == ["x", "y", "."]
        assert document["fields"]["det"]["indices"] == [0, 1, 2]

    def test_write_fields(self, layout, tmp_path):
        path = JSONWriter(tmp_path).write_fields(layout)
        records = json.loads(path.read_text())
        assert len(records) == 4
        assert records[0]["role"] == "signal"

    def test_encoder(self, tmp_path):
        encoded = json.dumps(
            {"slot": AxisPlaceholder.NONE, "n": np.int32(3), "a": np.arange(2), "p": tmp_path},
            cls=JSONEncoder,
        )
        decoded = json.loads(encoded)
        assert decoded["slot"] == "."
        assert decoded["n"] == 3
        assert decoded["a"] == [0, 1]
        assert decoded["p"] == str(tmp_path)


class TestParquetWriter:
    """Tests for ParquetWriter."""

    def test_write_layout(self, layout, tmp_path):
        paths = ParquetWriter(tmp_path).write_layout(layout, name="scan", title="Stage scan")
        assert paths["fields"].name == "scan_fields.parquet"

        fields = pq.read_table(paths["fields"])
        assert fields.schema.equals(FIELD_SCHEMA, check_metadata=False)
        assert fields.num_rows == 4
        rows = fields.to_pylist()
        assert rows[2]["role"] == "axis"
        assert rows[2]["axis_dimension"] == 1
        assert rows[3]["axis_dimension"] is None

        layouts = pq.read_table(paths["layouts"]).to_pylist()
        assert layouts == [
            {
                "scan_title": "Stage scan",
                "signal_name": "det",
                "signal_shape": [4, 3, 8],
                "axes": ["x", "y", "."],
                "num_fields": 4,
            }
        ]

    def test_write_several_layouts(self, layout, tmp_path):
        other = assemble(
            DeviceBinding.primary(single("det", 10)),
            DeviceBinding.axis(single("theta", 10), 0),
        )
        paths = ParquetWriter(tmp_path).write_layouts([(layout, "a"), (other, "b")])
        assert pq.read_table(paths["fields"]).num_rows == 6
        assert pq.read_table(paths["layouts"]).num_rows == 2


class TestNexusWriter:
    """Tests for NexusWriter."""

    def test_write_layout(self, layout, tmp_path):
        path = write_layout_to_nexus(layout, tmp_path / "scan.nxs")

        with h5py.File(path, "r") as f:
            assert f["/entry"].attrs["NX_class"] == "NXentry"
            group = f["/entry/data"]
            assert group.attrs["NX_class"] == "NXdata"
            assert group.attrs["signal"] == "det"
            assert [str(a) for a in group.attrs["axes"]] == ["x", "y", "."]
            assert group.attrs["det_indices"].tolist() == [0, 1, 2]
            assert group.attrs["time_indices"].tolist() == [0, 1]

            link = group.get("x", getlink=True)
            assert isinstance(link, h5py.SoftLink)
            assert link.path == "/entry/instrument/x/value"
            assert group["x"].shape == (4, 3)
            assert f["/entry/instrument/x/value"].attrs["target"] == "/entry/instrument/x/value"

    def test_existing_target_is_linked(self, layout, tmp_path):
        path = tmp_path / "scan.nxs"
        with h5py.File(path, "w") as f:
            f.create_dataset("/entry/instrument/x/value", data=np.ones((4, 3)))

        with NexusWriter(path, create_missing_targets=True) as writer:
            writer.write_layout(layout, "/entry/plot")

        with h5py.File(path, "r") as f:
            assert f["/entry/plot/x"][0, 0] == 1.0

    def test_wrong_target_shape(self, layout, tmp_path):
        path = tmp_path / "scan.nxs"
        with h5py.File(path, "w") as f:
            f.create_dataset("/entry/instrument/x/value", data=np.ones(5))

        with NexusWriter(path) as writer:
            with pytest.raises(InvalidTargetPath, match="does not match"):
                writer.write_layout(layout)

        with h5py.File(path, "r") as f:
            assert "/entry/data" not in f
            assert "/entry/instrument/det" not in f

    def test_missing_target_not_created(self, layout, tmp_path):
        with NexusWriter(tmp_path / "scan.nxs", create_missing_targets=False) as writer:
            with pytest.raises(InvalidTargetPath, match="does not exist"):
                writer.write_layout(layout)

    def test_existing_group(self, layout, tmp_path):
        path = write_layout_to_nexus(layout, tmp_path / "scan.nxs")
        with pytest.raises(InvalidTargetPath, match="already exists"):
            write_layout_to_nexus(layout, path)

    def test_writer_must_be_open(self, layout, tmp_path):
        with pytest.raises(RuntimeError):
            NexusWriter(tmp_path / "scan.nxs").write_layout(layout)


class TestWriteLayout:
    """Tests for the write_layout convenience function."""

    def test_formats(self, layout, tmp_path):
        assert set(write_layout(layout, tmp_path / "scan.nxs")) == {"nexus"}
        assert set(write_layout(layout, tmp_path / "json", fmt="json")) == {"layout", "fields"}
        assert set(write_layout(layout, tmp_path / "pq", fmt="parquet")) == {"fields", "layouts"}

    def test_unknown_format(self, layout, tmp_path):
        with pytest.raises(ValueError, match="Unknown output format"):
            write_layout(layout, tmp_path, fmt="csv")
