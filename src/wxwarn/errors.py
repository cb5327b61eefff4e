"""Exception hierarchy for wxwarn."""

from __future__ import annotations


class WxWarnError(Exception):
    """Base class for all wxwarn errors."""


class FormatError(WxWarnError):
    """Malformed or unsupported binary structure in a payload.

    Carries the payload name (``shp`` or ``dbf``), the byte offset and the
    record ordinal where the problem was detected, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        payload: str,
        offset: int | None = None,
        record: int | None = None,
    ) -> None:
        self.message = message
        self.payload = payload
        self.offset = offset
        self.record = record
        super().__init__(str(self))

    def __str__(self) -> str:
        where = [self.payload]
        if self.record is not None:
            where.append(f"record {self.record}")
        if self.offset is not None:
            where.append(f"offset {self.offset}")
        return f"{type(self).__name__} in {', '.join(where)}: {self.message}"


class UnsupportedShapeType(FormatError):
    """A shape record declares a type other than Polygon."""


class UnexpectedEof(FormatError):
    """The buffer ended before a declared structure was fully read."""


class LengthMismatch(FormatError):
    """A declared length disagrees with the bytes actually consumed."""


class BadField(FormatError):
    """A field holds bytes that cannot be decoded for its declared type."""


class BadHeader(FormatError):
    """A file header carries an invalid magic number or length."""


class DataIntegrityError(WxWarnError):
    """Shapes and attribute records are not aligned by ordinal."""


class ArchiveError(WxWarnError):
    """The downloaded archive cannot be unpacked into shape/attribute files."""
