"""Bounds-checked little-endian cursor used by every binary parser."""

from __future__ import annotations

import struct

from .errors import TruncatedError, UnterminatedStringError


class ByteReader:
    """Forward-only cursor over an immutable buffer.

    Every read names the field it is decoding so that a short buffer is
    reported as :class:`~amxdisasm.errors.TruncatedError` pointing at the
    exact header field or operand that could not be read.
    """

    def __init__(self, data: bytes, *, stage: str, offset: int = 0) -> None:
        self._data = data
        self._stage = stage
        self.offset = offset

    def at_end(self) -> bool:
        return self.offset >= len(self._data)

    def read_bytes(self, size: int, field: str) -> bytes:
        start = self.offset
        end = start + size
        if size < 0 or start < 0 or end > len(self._data):
            raise TruncatedError(field, start, stage=self._stage)
        self.offset = end
        return self._data[start:end]

    def _unpack(self, fmt: str, field: str) -> int:
        chunk = self.read_bytes(struct.calcsize(fmt), field)
        return struct.unpack(fmt, chunk)[0]

    def u8(self, field: str) -> int:
        return self._unpack("<B", field)

    def u16(self, field: str) -> int:
        return self._unpack("<H", field)

    def u32(self, field: str) -> int:
        return self._unpack("<I", field)

    def cell(self, size: int, field: str, *, signed: bool = True) -> int:
        return int.from_bytes(self.read_bytes(size, field), "little", signed=signed)


def read_c_string(data: bytes, offset: int, *, what: str, stage: str) -> bytes:
    """Return the zero-terminated byte string starting at ``offset``."""

    if not (0 <= offset < len(data)):
        raise TruncatedError(what, offset, stage=stage)
    end = data.find(b"\0", offset)
    if end < 0:
        raise UnterminatedStringError(what, offset)
    return data[offset:end]
