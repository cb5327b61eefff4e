"""Tests for the .shp polygon reader."""

from __future__ import annotations

import struct

import pytest

from conftest import SEACOAST_RING
from wxwarn.errors import (
    BadField,
    BadHeader,
    FormatError,
    LengthMismatch,
    UnexpectedEof,
    UnsupportedShapeType,
)
from wxwarn.readers.shp import parse_shapes

SQUARE = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0), (0.0, 0.0)]
HOLE = [(0.25, 0.25), (0.75, 0.25), (0.75, 0.75), (0.25, 0.75), (0.25, 0.25)]


class TestParseShapes:
    def test_record_and_ring_counts(self, make_shp):
        data = make_shp([[SQUARE], [SQUARE, HOLE], [SEACOAST_RING, SQUARE, HOLE]])
        shapes = parse_shapes(data)
        assert len(shapes) == 3
        assert [s.index for s in shapes] == [0, 1, 2]
        assert [s.ring_count for s in shapes] == [1, 2, 3]
        assert shapes[2].point_counts == [5, 5, 5]

    def test_coordinates_decoded_exactly(self, seacoast_shp):
        (shape,) = parse_shapes(seacoast_shp)
        assert [tuple(p) for p in shape.rings[0].tolist()] == SEACOAST_RING
        assert shape.bbox == (-71.5, 42.8, -70.5, 43.6)

    def test_rings_are_read_only(self, seacoast_shp):
        (shape,) = parse_shapes(seacoast_shp)
        with pytest.raises(ValueError):
            shape.rings[0][0, 0] = 0.0

    def test_empty_file(self, make_shp):
        assert parse_shapes(make_shp([])) == []

    def test_polygon_without_parts(self, make_shp):
        (shape,) = parse_shapes(make_shp([[]]))
        assert shape.rings == ()

    def test_trailing_bytes_ignored(self, seacoast_shp):
        shapes = parse_shapes(seacoast_shp + b"\x00\x00\x00\x00")
        assert len(shapes) == 1


class TestShpFormatErrors:
    def test_bad_file_code(self, seacoast_shp):
        data = struct.pack(">i", 1234) + seacoast_shp[4:]
        with pytest.raises(BadHeader):
            parse_shapes(data)

    def test_file_declares_other_shape_type(self, make_shp):
        with pytest.raises(UnsupportedShapeType):
            parse_shapes(make_shp([[SQUARE]], file_shape_type=3))

    def test_record_declares_other_shape_type(self, make_shp):
        data = make_shp([[SQUARE], [SQUARE]], record_shape_types=[5, 3])
        with pytest.raises(UnsupportedShapeType) as excinfo:
            parse_shapes(data)
        assert excinfo.value.record == 1
        assert "PolyLine" in str(excinfo.value)

    def test_truncated_header(self, seacoast_shp):
        with pytest.raises(UnexpectedEof):
            parse_shapes(seacoast_shp[:60])

    def test_one_byte_short(self, seacoast_shp):
        with pytest.raises(UnexpectedEof):
            parse_shapes(seacoast_shp[:-1])

    def test_truncated_record_with_matching_header(self, seacoast_shp):
        data = bytearray(seacoast_shp[:-16])
        data[24:28] = struct.pack(">i", len(data) // 2)
        with pytest.raises(UnexpectedEof) as excinfo:
            parse_shapes(bytes(data))
        assert excinfo.value.record == 0

    def test_content_length_mismatch(self, seacoast_shp):
        data = bytearray(seacoast_shp)
        declared = struct.unpack(">i", data[104:108])[0]
        data[104:108] = struct.pack(">i", declared + 2)
        data += b"\x00" * 4
        data[24:28] = struct.pack(">i", len(data) // 2)
        with pytest.raises(LengthMismatch):
            parse_shapes(bytes(data))

    def test_invalid_part_indices(self, make_shp):
        data = bytearray(make_shp([[SQUARE, HOLE]]))
        # parts array follows type(4) + bbox(32) + counts(8) after the record header
        parts_at = 100 + 8 + 44
        data[parts_at:parts_at + 8] = struct.pack("<2i", 0, 12)
        with pytest.raises(BadField):
            parse_shapes(bytes(data))

    def test_negative_point_count(self, make_shp):
        data = bytearray(make_shp([[SQUARE]]))
        data[100 + 8 + 40:100 + 8 + 44] = struct.pack("<i", -1)
        with pytest.raises(BadField):
            parse_shapes(bytes(data))

    def test_all_variants_are_format_errors(self):
        for exc_type in (UnsupportedShapeType, UnexpectedEof, LengthMismatch, BadField, BadHeader):
            assert issubclass(exc_type, FormatError)
