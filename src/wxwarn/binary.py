"""Cursor over a byte buffer with explicit-endian read primitives.

Shapefiles mix big-endian (file and record headers) and little-endian
(record contents) fields, so every read names its byte order.
"""

from __future__ import annotations

import struct

import numpy as np

from wxwarn.errors import UnexpectedEof

_U8 = struct.Struct("<B")
_BE_I32 = struct.Struct(">i")
_LE_I32 = struct.Struct("<i")
_LE_U16 = struct.Struct("<H")
_LE_U32 = struct.Struct("<I")
_LE_F64 = struct.Struct("<d")


class ByteReader:
    """Sequential reader that raises ``UnexpectedEof`` on short reads."""

    def __init__(self, data: bytes, payload: str, *, end: int | None = None) -> None:
        self._data = memoryview(data)
        self._end = len(data) if end is None else min(end, len(data))
        self._offset = 0
        self.payload = payload
        self.record: int | None = None

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return self._end - self._offset

    def _take(self, size: int) -> memoryview:
        if size < 0 or self._offset + size > self._end:
            raise UnexpectedEof(
                f"needed {size} bytes, {self.remaining} available",
                payload=self.payload,
                offset=self._offset,
                record=self.record,
            )
        start = self._offset
        self._offset += size
        return self._data[start:self._offset]

    def seek(self, offset: int) -> None:
        if offset < 0 or offset > self._end:
            raise UnexpectedEof(
                f"cannot seek to {offset}, buffer ends at {self._end}",
                payload=self.payload,
                offset=self._offset,
                record=self.record,
            )
        self._offset = offset

    def skip(self, size: int) -> None:
        self._take(size)

    def peek_u8(self) -> int:
        value = self.read_u8()
        self._offset -= 1
        return value

    def read_bytes(self, size: int) -> bytes:
        return self._take(size).tobytes()

    def read_u8(self) -> int:
        return _U8.unpack(self._take(1))[0]

    def read_be_i32(self) -> int:
        return _BE_I32.unpack(self._take(4))[0]

    def read_le_i32(self) -> int:
        return _LE_I32.unpack(self._take(4))[0]

    def read_le_u16(self) -> int:
        return _LE_U16.unpack(self._take(2))[0]

    def read_le_u32(self) -> int:
        return _LE_U32.unpack(self._take(4))[0]

    def read_le_f64(self) -> float:
        return _LE_F64.unpack(self._take(8))[0]

    def read_le_i32_array(self, count: int) -> np.ndarray:
        """Read ``count`` little-endian int32 values as a native-order array."""
        raw = self._take(4 * count)
        return np.frombuffer(raw, dtype="<i4").astype(np.int64)

    def read_le_f64_array(self, count: int) -> np.ndarray:
        """Read ``count`` little-endian float64 values as a native-order array."""
        raw = self._take(8 * count)
        return np.frombuffer(raw, dtype="<f8").astype(np.float64)
