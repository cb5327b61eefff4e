"""ESRI shapefile (.shp) polygon reader."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from wxwarn.binary import ByteReader
from wxwarn.errors import BadField, BadHeader, LengthMismatch, UnexpectedEof, UnsupportedShapeType
from wxwarn.models import Shape

logger = logging.getLogger(__name__)

PAYLOAD = "shp"

FILE_CODE = 9994
HEADER_SIZE = 100
SHAPE_POLYGON = 5

SHAPE_TYPE_NAMES = {
    0: "Null",
    1: "Point",
    3: "PolyLine",
    5: "Polygon",
    8: "MultiPoint",
    11: "PointZ",
    13: "PolyLineZ",
    15: "PolygonZ",
    18: "MultiPointZ",
    21: "PointM",
    23: "PolyLineM",
    25: "PolygonM",
    28: "MultiPointM",
    31: "MultiPatch",
}


@dataclass(frozen=True)
class ShapefileHeader:
    """Fixed 100-byte .shp header."""

    file_length: int  # bytes
    version: int
    shape_type: int
    bbox: tuple[float, float, float, float]


def _shape_type_name(shape_type: int) -> str:
    return SHAPE_TYPE_NAMES.get(shape_type, f"unknown ({shape_type})")


def read_header(reader: ByteReader) -> ShapefileHeader:
    """Read the file header; big-endian code/length, little-endian the rest."""
    file_code = reader.read_be_i32()
    if file_code != FILE_CODE:
        raise BadHeader(
            f"file code {file_code}, expected {FILE_CODE}",
            payload=PAYLOAD,
            offset=0,
        )
    reader.skip(20)
    file_length = reader.read_be_i32() * 2
    version = reader.read_le_i32()
    shape_type = reader.read_le_i32()
    bbox = (
        reader.read_le_f64(),
        reader.read_le_f64(),
        reader.read_le_f64(),
        reader.read_le_f64(),
    )
    reader.skip(32)  # Z and M ranges

    if file_length < HEADER_SIZE:
        raise BadHeader(
            f"declared file length {file_length} is shorter than the header",
            payload=PAYLOAD,
            offset=24,
        )
    if shape_type != SHAPE_POLYGON:
        raise UnsupportedShapeType(
            f"file declares {_shape_type_name(shape_type)} shapes, only Polygon is supported",
            payload=PAYLOAD,
            offset=32,
        )
    return ShapefileHeader(
        file_length=file_length, version=version, shape_type=shape_type, bbox=bbox,
    )


def _read_polygon(reader: ByteReader, index: int) -> Shape:
    """Read polygon content after the record's shape type."""
    bbox = (
        reader.read_le_f64(),
        reader.read_le_f64(),
        reader.read_le_f64(),
        reader.read_le_f64(),
    )
    count_offset = reader.offset
    num_parts = reader.read_le_i32()
    num_points = reader.read_le_i32()
    if num_parts < 0 or num_points < 0:
        raise BadField(
            f"negative counts (parts={num_parts}, points={num_points})",
            payload=PAYLOAD,
            offset=count_offset,
            record=index,
        )

    parts_offset = reader.offset
    parts = reader.read_le_i32_array(num_parts)
    points = reader.read_le_f64_array(2 * num_points).reshape(num_points, 2)

    if num_parts and (
        parts[0] != 0
        or np.any(np.diff(parts) <= 0)
        or parts[-1] >= num_points
    ):
        raise BadField(
            f"invalid part indices {parts.tolist()} for {num_points} points",
            payload=PAYLOAD,
            offset=parts_offset,
            record=index,
        )

    points.flags.writeable = False
    bounds = [*parts.tolist(), num_points]
    rings = tuple(points[start:stop] for start, stop in zip(bounds[:-1], bounds[1:]))
    return Shape(index=index, rings=rings, bbox=bbox)


def parse_shapes(data: bytes) -> list[Shape]:
    """Parse a .shp payload into shapes ordered as stored.

    Raises:
        BadHeader: wrong file code or impossible file length.
        UnsupportedShapeType: file or record is not a Polygon.
        UnexpectedEof: the buffer is shorter than a declared structure.
        LengthMismatch: a record's content length disagrees with its body.
        BadField: negative counts or invalid part indices.
    """
    header_reader = ByteReader(data, PAYLOAD)
    header = read_header(header_reader)
    if header.file_length > len(data):
        raise UnexpectedEof(
            f"header declares {header.file_length} bytes, buffer holds {len(data)}",
            payload=PAYLOAD,
            offset=len(data),
        )
    if header.file_length < len(data):
        logger.warning(
            "Ignoring %d trailing bytes after declared .shp length",
            len(data) - header.file_length,
        )

    reader = ByteReader(data, PAYLOAD, end=header.file_length)
    reader.seek(HEADER_SIZE)

    shapes: list[Shape] = []
    while reader.remaining > 0:
        index = len(shapes)
        reader.record = index
        reader.read_be_i32()  # 1-based record number, ordinal position is authoritative
        content_length = reader.read_be_i32() * 2
        content_start = reader.offset

        shape_type = reader.read_le_i32()
        if shape_type != SHAPE_POLYGON:
            raise UnsupportedShapeType(
                f"record declares {_shape_type_name(shape_type)} shape",
                payload=PAYLOAD,
                offset=content_start,
                record=index,
            )
        shape = _read_polygon(reader, index)

        consumed = reader.offset - content_start
        if consumed != content_length:
            raise LengthMismatch(
                f"record declares {content_length} content bytes, polygon used {consumed}",
                payload=PAYLOAD,
                offset=content_start,
                record=index,
            )
        shapes.append(shape)

    logger.debug("Parsed %d polygon shapes", len(shapes))
    return shapes
