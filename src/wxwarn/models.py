"""Data models for parsed alert shapes and attribute records."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Literal

import numpy as np

FieldKind = Literal["text", "number", "date"]


@dataclass(frozen=True)
class Point:
    """A query location in unprojected degrees."""

    longitude: float
    latitude: float

    @classmethod
    def from_lat_lon(cls, lat: float, lon: float) -> Point:
        return cls(longitude=lon, latitude=lat)

    @property
    def x(self) -> float:
        return self.longitude

    @property
    def y(self) -> float:
        return self.latitude


@dataclass(frozen=True, eq=False)
class Shape:
    """One alert's coverage area: every ring of a polygon record.

    Rings are read-only ``(n, 2)`` arrays of ``(x, y)`` = ``(lon, lat)``.
    """

    index: int
    rings: tuple[np.ndarray, ...]
    bbox: tuple[float, float, float, float]

    @property
    def ring_count(self) -> int:
        return len(self.rings)

    @property
    def point_counts(self) -> list[int]:
        return [len(ring) for ring in self.rings]


@dataclass(frozen=True)
class FieldValue:
    """A decoded dBase value tagged with its kind.

    ``value`` is None for blank numeric and date fields.
    """

    kind: FieldKind
    value: str | int | float | date | None

    def __str__(self) -> str:
        if self.value is None:
            return ""
        if isinstance(self.value, date):
            return self.value.isoformat()
        return str(self.value)


@dataclass(frozen=True)
class FieldDescriptor:
    """Schema entry from a dBase header."""

    name: str
    type_tag: str
    length: int
    decimal_count: int


@dataclass(frozen=True)
class AttributeRecord:
    """Field values of one live dBase record, keyed by field name."""

    index: int
    values: Mapping[str, FieldValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __getitem__(self, name: str) -> FieldValue:
        return self.values[name]

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def get(self, name: str) -> FieldValue | None:
        return self.values.get(name)

    def text(self, name: str) -> str:
        """Return the field rendered as text, or "" when absent."""
        value = self.values.get(name)
        return "" if value is None else str(value)

    def updated(self, values: Mapping[str, FieldValue]) -> AttributeRecord:
        """Return a copy with ``values`` overlaid on this record's fields."""
        return AttributeRecord(index=self.index, values={**self.values, **values})


@dataclass(frozen=True)
class AttributeTable:
    """Parsed dBase payload.

    ``record_count`` counts every declared slot, soft-deleted ones included,
    so that it lines up with the number of shapes.
    """

    fields: tuple[FieldDescriptor, ...]
    records: tuple[AttributeRecord, ...]
    record_count: int
    _by_index: Mapping[int, AttributeRecord] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_by_index", MappingProxyType({r.index: r for r in self.records})
        )

    def __iter__(self) -> Iterator[AttributeRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get(self, index: int) -> AttributeRecord | None:
        """Return the live record at ``index``, or None if deleted/absent."""
        return self._by_index.get(index)


@dataclass(frozen=True)
class MatchResult:
    """A shape that contains the query point, joined to its attributes."""

    index: int
    record: AttributeRecord


@dataclass(frozen=True)
class AlertDataset:
    """Shapes and attribute table parsed from one shapefile pair."""

    shapes: tuple[Shape, ...]
    attributes: AttributeTable
