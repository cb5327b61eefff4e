"""dBase III (.dbf) attribute table reader."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime

from wxwarn.binary import ByteReader
from wxwarn.errors import BadField, LengthMismatch
from wxwarn.models import AttributeRecord, AttributeTable, FieldDescriptor, FieldValue

logger = logging.getLogger(__name__)

PAYLOAD = "dbf"

HEADER_SIZE = 32
DESCRIPTOR_SIZE = 32
HEADER_TERMINATOR = 0x0D
EOF_MARKER = 0x1A
LIVE_MARKER = 0x20  # ' '
DELETED_MARKER = 0x2A  # '*'

SUPPORTED_TYPES = frozenset("CNFDL")

_NUMBER = re.compile(rb"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _read_descriptor(reader: ByteReader) -> FieldDescriptor:
    offset = reader.offset
    raw_name = reader.read_bytes(11).split(b"\x00", 1)[0]
    type_tag = chr(reader.read_u8())
    reader.skip(4)  # field data address
    length = reader.read_u8()
    decimal_count = reader.read_u8()
    reader.skip(14)

    try:
        name = raw_name.decode("ascii").strip()
    except UnicodeDecodeError:
        raise BadField(
            f"field name {raw_name!r} is not ASCII", payload=PAYLOAD, offset=offset,
        ) from None
    if not name:
        raise BadField("empty field name", payload=PAYLOAD, offset=offset)
    if type_tag not in SUPPORTED_TYPES:
        raise BadField(
            f"field {name!r} has unsupported type {type_tag!r}",
            payload=PAYLOAD,
            offset=offset,
        )
    return FieldDescriptor(
        name=name, type_tag=type_tag, length=length, decimal_count=decimal_count,
    )


def _decode_number(raw: bytes, spec: FieldDescriptor) -> FieldValue:
    text = raw.strip(b" \x00")
    if not text:
        return FieldValue("number", None)
    match = _NUMBER.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid number {text!r}")
    if spec.decimal_count == 0 and b"." not in text and match.group(2) is None:
        # exact, float would round past 2**53
        return FieldValue("number", int(text))
    value: int | float = float(text)
    if spec.decimal_count == 0 and value.is_integer():
        value = int(value)
    return FieldValue("number", value)


def _decode_date(raw: bytes) -> FieldValue:
    text = raw.strip(b" \x00")
    if not text or text == b"00000000":
        return FieldValue("date", None)
    parsed: date = datetime.strptime(text.decode("ascii"), "%Y%m%d").date()
    return FieldValue("date", parsed)


def _decode_logical(raw: bytes) -> FieldValue:
    flag = raw.strip(b" \x00").upper()
    if flag in (b"T", b"Y"):
        return FieldValue("text", "T")
    if flag in (b"F", b"N"):
        return FieldValue("text", "F")
    if flag in (b"", b"?"):
        return FieldValue("text", "")
    raise ValueError(f"invalid logical value {raw!r}")


def decode_field(raw: bytes, spec: FieldDescriptor, encoding: str = "utf-8") -> FieldValue:
    """Decode one fixed-width field by its type tag.

    Raises ValueError (or UnicodeDecodeError) for malformed bytes; callers
    wrap these in ``BadField`` with position information.
    """
    if spec.type_tag == "C":
        return FieldValue("text", raw.rstrip(b" \x00").decode(encoding))
    if spec.type_tag in ("N", "F"):
        return _decode_number(raw, spec)
    if spec.type_tag == "D":
        return _decode_date(raw)
    return _decode_logical(raw)


def parse_attributes(data: bytes, encoding: str = "utf-8") -> AttributeTable:
    """Parse a .dbf payload into an attribute table aligned with shape ordinals.

    Soft-deleted records are not emitted but still occupy their ordinal, so
    ``AttributeTable.get(i)`` always refers to the i-th shape.

    Raises:
        UnexpectedEof: header, descriptors or records are truncated.
        LengthMismatch: record length disagrees with the field widths.
        BadField: unsupported type, bad marker byte or undecodable value.
    """
    reader = ByteReader(data, PAYLOAD)
    reader.skip(1)  # version
    reader.skip(3)  # last update YYMMDD
    record_count = reader.read_le_u32()
    header_length = reader.read_le_u16()
    record_length = reader.read_le_u16()
    reader.skip(20)

    fields: list[FieldDescriptor] = []
    while reader.peek_u8() != HEADER_TERMINATOR:
        fields.append(_read_descriptor(reader))

    expected_length = 1 + sum(f.length for f in fields)
    if record_length != expected_length:
        raise LengthMismatch(
            f"header declares {record_length}-byte records, fields need {expected_length}",
            payload=PAYLOAD,
            offset=10,
        )
    if header_length < reader.offset + 1:
        raise LengthMismatch(
            f"header declares {header_length} header bytes, descriptors need {reader.offset + 1}",
            payload=PAYLOAD,
            offset=8,
        )
    reader.seek(header_length)

    records: list[AttributeRecord] = []
    deleted = 0
    for index in range(record_count):
        reader.record = index
        marker_offset = reader.offset
        marker = reader.read_u8()
        if marker == DELETED_MARKER:
            reader.skip(record_length - 1)
            deleted += 1
            logger.debug("Skipping soft-deleted record %d", index)
            continue
        if marker != LIVE_MARKER:
            raise BadField(
                f"unknown record marker 0x{marker:02x}",
                payload=PAYLOAD,
                offset=marker_offset,
                record=index,
            )

        values: dict[str, FieldValue] = {}
        for spec in fields:
            field_offset = reader.offset
            raw = reader.read_bytes(spec.length)
            try:
                values[spec.name] = decode_field(raw, spec, encoding)
            except ValueError as exc:
                raise BadField(
                    f"field {spec.name!r} ({spec.type_tag}): {exc}",
                    payload=PAYLOAD,
                    offset=field_offset,
                    record=index,
                ) from exc
        records.append(AttributeRecord(index=index, values=values))

    if reader.remaining and reader.peek_u8() != EOF_MARKER:
        logger.warning("Ignoring %d trailing bytes after .dbf records", reader.remaining)

    logger.debug(
        "Parsed %d attribute records (%d soft-deleted, %d fields)",
        len(records), deleted, len(fields),
    )
    return AttributeTable(
        fields=tuple(fields), records=tuple(records), record_count=record_count,
    )
