"""Alert matching and rendering: shapes joined to attributes by ordinal."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from wxwarn.config import AlertFieldNames
from wxwarn.errors import DataIntegrityError
from wxwarn.geo import contains
from wxwarn.models import (
    AlertDataset,
    AttributeRecord,
    AttributeTable,
    MatchResult,
    Point,
    Shape,
)
from wxwarn.readers import parse_attributes, parse_shapes

logger = logging.getLogger(__name__)

DEFAULT_FIELDS = AlertFieldNames()


def check_alignment(shapes: Sequence[Shape], attributes: AttributeTable) -> None:
    """Raise DataIntegrityError unless both payloads hold the same record count."""
    if len(shapes) != attributes.record_count:
        raise DataIntegrityError(
            f"shape payload has {len(shapes)} records, "
            f"attribute payload has {attributes.record_count}"
        )


def load_dataset(shp: bytes, dbf: bytes, encoding: str = "utf-8") -> AlertDataset:
    """Parse a shapefile pair and verify the two payloads line up."""
    shapes = parse_shapes(shp)
    attributes = parse_attributes(dbf, encoding=encoding)
    check_alignment(shapes, attributes)
    return AlertDataset(shapes=tuple(shapes), attributes=attributes)


def match_alerts(
    shapes: Sequence[Shape],
    attributes: AttributeTable,
    point: Point,
) -> list[MatchResult]:
    """Return every shape containing ``point``, in storage order.

    A hit on an ordinal whose attribute record is soft-deleted or missing
    raises DataIntegrityError rather than being dropped.
    """
    check_alignment(shapes, attributes)

    matches: list[MatchResult] = []
    for shape in shapes:
        if not contains(shape, point):
            continue
        record = attributes.get(shape.index)
        if record is None:
            raise DataIntegrityError(
                f"shape {shape.index} contains the point but has no live attribute record"
            )
        matches.append(MatchResult(index=shape.index, record=record))

    logger.debug(
        "%d of %d shapes contain (%f, %f)",
        len(matches), len(shapes), point.latitude, point.longitude,
    )
    return matches


def _required_text(record: AttributeRecord, name: str) -> str:
    if name not in record:
        raise DataIntegrityError(f"attribute record {record.index} has no field {name!r}")
    return record.text(name)


def split_areas(text: str) -> list[str]:
    """Split a semicolon-separated area description into names."""
    return [area.strip() for area in text.split(";") if area.strip()]


def format_alert(
    match: MatchResult,
    fields: AlertFieldNames = DEFAULT_FIELDS,
    area_delimiter: str = "; ",
) -> str:
    """Render one match as a headline line, body text and area list."""
    record = match.record
    headline = _required_text(record, fields.headline)
    effective = _required_text(record, fields.effective)
    expiration = _required_text(record, fields.expiration)
    office = _required_text(record, fields.office)

    blocks = [f"{headline} issued {effective} until {expiration} by {office}"]

    body = record.text(fields.body).strip()
    if body:
        blocks.append(body)

    areas = split_areas(record.text(fields.areas))
    if areas:
        blocks.append(area_delimiter.join(areas))

    return "\n\n".join(blocks)


def render_alerts(
    matches: Sequence[MatchResult],
    fields: AlertFieldNames = DEFAULT_FIELDS,
    area_delimiter: str = "; ",
) -> list[str]:
    return [format_alert(m, fields, area_delimiter) for m in matches]


def match_to_dict(match: MatchResult) -> dict[str, Any]:
    """JSON-ready representation of a match; values rendered as text."""
    return {
        "index": match.index,
        "fields": {name: str(value) for name, value in match.record.values.items()},
    }


def find_alerts(
    shp: bytes,
    dbf: bytes,
    lat: float,
    lon: float,
    *,
    fields: AlertFieldNames = DEFAULT_FIELDS,
    area_delimiter: str = "; ",
    encoding: str = "utf-8",
) -> list[str]:
    """Parse both payloads and render every alert covering (lat, lon).

    Returns an empty list when no alert covers the point.
    """
    dataset = load_dataset(shp, dbf, encoding=encoding)
    matches = match_alerts(
        dataset.shapes, dataset.attributes, Point.from_lat_lon(lat, lon)
    )
    return render_alerts(matches, fields, area_delimiter)
