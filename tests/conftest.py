"""Shared fixtures for wxwarn tests.

Shapefile pairs are assembled in memory with ``struct`` so every test
controls the exact bytes being parsed.
"""

from __future__ import annotations

import io
import struct
import tarfile
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from wxwarn.config import WxWarnConfig

Ring = Sequence[tuple[float, float]]

# Clockwise rectangle over the New Hampshire / southern Maine coast.
SEACOAST_RING: list[tuple[float, float]] = [
    (-71.5, 42.8),
    (-71.5, 43.6),
    (-70.5, 43.6),
    (-70.5, 42.8),
    (-71.5, 42.8),
]

ALERT_FIELDS: list[tuple[str, str, int, int]] = [
    ("PROD_TYPE", "C", 40, 0),
    ("ISSUANCE", "C", 25, 0),
    ("EXPIRATION", "C", 25, 0),
    ("WFO", "C", 20, 0),
    ("AREA_DESC", "C", 80, 0),
    ("DESCRIPTION", "C", 120, 0),
    ("CAP_ID", "C", 60, 0),
]

HEAT_ADVISORY: list[str] = [
    "Heat Advisory",
    "2023-07-22T14:51:00-04:00",
    "2023-07-24T20:00:00-04:00",
    "NWS Gray ME",
    "Interior York; Strafford",
    "Heat index values up to 100 expected.",
    "urn:oid:2.49.0.1.840.0.heat1",
]


def build_shp(
    shapes: Sequence[Sequence[Ring]],
    *,
    file_shape_type: int = 5,
    record_shape_types: Sequence[int] | None = None,
) -> bytes:
    """Encode polygon records into a .shp payload."""
    records = []
    all_points: list[tuple[float, float]] = []
    for i, rings in enumerate(shapes):
        points = [p for ring in rings for p in ring]
        all_points.extend(points)
        parts = []
        offset = 0
        for ring in rings:
            parts.append(offset)
            offset += len(ring)
        xs = [p[0] for p in points] or [0.0]
        ys = [p[1] for p in points] or [0.0]
        shape_type = record_shape_types[i] if record_shape_types else 5
        content = struct.pack("<i", shape_type)
        content += struct.pack("<4d", min(xs), min(ys), max(xs), max(ys))
        content += struct.pack("<2i", len(parts), len(points))
        content += struct.pack(f"<{len(parts)}i", *parts)
        content += struct.pack(f"<{2 * len(points)}d", *(c for p in points for c in p))
        records.append(struct.pack(">2i", i + 1, len(content) // 2) + content)

    body = b"".join(records)
    xs = [p[0] for p in all_points] or [0.0]
    ys = [p[1] for p in all_points] or [0.0]
    header = struct.pack(">7i", 9994, 0, 0, 0, 0, 0, (100 + len(body)) // 2)
    header += struct.pack("<2i", 1000, file_shape_type)
    header += struct.pack("<4d", min(xs), min(ys), max(xs), max(ys))
    header += struct.pack("<4d", 0.0, 0.0, 0.0, 0.0)
    return header + body


def build_dbf(
    fields: Sequence[tuple[str, str, int, int]],
    records: Sequence[Sequence[str]],
    *,
    deleted: frozenset[int] = frozenset(),
) -> bytes:
    """Encode text values into a dBase III payload; numbers right-aligned."""
    record_length = 1 + sum(f[2] for f in fields)
    header_length = 32 + 32 * len(fields) + 1
    out = struct.pack("<B3BIHH20x", 3, 123, 7, 22, len(records), header_length, record_length)
    for name, type_tag, length, decimals in fields:
        out += name.encode("ascii").ljust(11, b"\x00")
        out += type_tag.encode("ascii")
        out += struct.pack("<4xBB14x", length, decimals)
    out += b"\r"
    for i, values in enumerate(records):
        out += b"*" if i in deleted else b" "
        for (_, type_tag, length, _), value in zip(fields, values):
            raw = value.encode("utf-8")
            out += raw.rjust(length) if type_tag in ("N", "F") else raw.ljust(length)
    return out + b"\x1a"


def build_archive(files: dict[str, bytes]) -> bytes:
    """Pack files into a gzipped tar archive held in memory."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture
def make_shp() -> Callable[..., bytes]:
    return build_shp


@pytest.fixture
def make_dbf() -> Callable[..., bytes]:
    return build_dbf


@pytest.fixture
def make_archive() -> Callable[[dict[str, bytes]], bytes]:
    return build_archive


@pytest.fixture
def seacoast_shp() -> bytes:
    """One rectangular shape covering coastal NH/ME."""
    return build_shp([[SEACOAST_RING]])


@pytest.fixture
def heat_advisory_dbf() -> bytes:
    return build_dbf(ALERT_FIELDS, [HEAT_ADVISORY])


@pytest.fixture
def seacoast_archive(seacoast_shp: bytes, heat_advisory_dbf: bytes) -> bytes:
    return build_archive(
        {
            "current_all.shp": seacoast_shp,
            "current_all.dbf": heat_advisory_dbf,
            "current_all.prj": b'GEOGCS["GCS_WGS_1984"]',
        }
    )


@pytest.fixture
def default_config(tmp_path: Path) -> WxWarnConfig:
    """Config with defaults, caching into tmp_path."""
    return WxWarnConfig(cache_dir=tmp_path / "cache")
