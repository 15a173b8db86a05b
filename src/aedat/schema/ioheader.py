"""
IOHeader Schema
===============

Read accessors for the flatbuffers ``IOHeader`` table that opens every
AEDAT4 container, written in the shape ``flatc --python`` generates for::

    enum CompressionType : int32 { NONE, LZ4, LZ4_HIGH, ZSTD, ZSTD_HIGH }

    table IOHeader {
        compression: CompressionType = NONE;
        file_data_position: int64 = -1;
        description: string;
    }

Unlike generated code, buffers are bounds-checked by verify_ioheader()
before any accessor runs; the header arrives from an untrusted source.
"""

import struct
from enum import IntEnum
from typing import Optional

import flatbuffers
from flatbuffers import number_types as N

from aedat.errors import HeaderDecodeError


class CompressionType(IntEnum):
    """Per-container compression applied to every packet payload."""

    NONE = 0
    LZ4 = 1
    LZ4_HIGH = 2
    ZSTD = 3
    ZSTD_HIGH = 4


# vtable slots: 4 + 2 * field index
_COMPRESSION_SLOT = 4
_FILE_DATA_POSITION_SLOT = 6
_DESCRIPTION_SLOT = 8

_FIELD_SIZES = {
    _COMPRESSION_SLOT: 4,
    _FILE_DATA_POSITION_SLOT: 8,
    _DESCRIPTION_SLOT: 4,
}


class IOHeader(object):
    __slots__ = ["_tab"]

    @classmethod
    def GetRootAs(cls, buf, offset: int = 0) -> "IOHeader":
        n = flatbuffers.encode.Get(flatbuffers.packer.uoffset, buf, offset)
        x = IOHeader()
        x.Init(buf, n + offset)
        return x

    def Init(self, buf, pos: int) -> None:
        self._tab = flatbuffers.table.Table(buf, pos)

    def Compression(self) -> int:
        o = N.UOffsetTFlags.py_type(self._tab.Offset(_COMPRESSION_SLOT))
        if o != 0:
            return self._tab.Get(N.Int32Flags, o + self._tab.Pos)
        return CompressionType.NONE

    def FileDataPosition(self) -> int:
        o = N.UOffsetTFlags.py_type(self._tab.Offset(_FILE_DATA_POSITION_SLOT))
        if o != 0:
            return self._tab.Get(N.Int64Flags, o + self._tab.Pos)
        return -1

    def Description(self) -> Optional[bytes]:
        o = N.UOffsetTFlags.py_type(self._tab.Offset(_DESCRIPTION_SLOT))
        if o != 0:
            return self._tab.String(o + self._tab.Pos)
        return None


def verify_ioheader(buf: bytes) -> None:
    """
    Check that every offset the IOHeader accessors follow stays in bounds.

    Args:
        buf: Raw header message (not size-prefixed)

    Raises:
        HeaderDecodeError: If the table, its vtable, or the description
            string points outside the buffer
    """
    size = len(buf)

    def read(fmt: str, offset: int) -> int:
        if offset < 0 or offset + struct.calcsize(fmt) > size:
            raise HeaderDecodeError(
                f"offset {offset} out of bounds for {size}-byte header"
            )
        return struct.unpack_from(fmt, buf, offset)[0]

    table = read("<I", 0)
    vtable = table - read("<i", table)
    vtable_size = read("<H", vtable)
    table_size = read("<H", vtable + 2)
    if vtable_size < 4 or vtable_size % 2:
        raise HeaderDecodeError(f"invalid vtable size {vtable_size}")
    if vtable + vtable_size > size or table + table_size > size:
        raise HeaderDecodeError("IOHeader table exceeds header length")

    for slot, field_size in _FIELD_SIZES.items():
        if slot >= vtable_size:
            continue
        field = read("<H", vtable + slot)
        if field == 0:
            continue
        if field + field_size > table_size:
            raise HeaderDecodeError(f"field at vtable slot {slot} exceeds table")
        if slot == _DESCRIPTION_SLOT:
            string = table + field + read("<I", table + field)
            length = read("<I", string)
            if string + 4 + length > size:
                raise HeaderDecodeError("description exceeds header length")


def read_ioheader(buf: bytes) -> IOHeader:
    """Verify and open an IOHeader table."""
    verify_ioheader(buf)
    return IOHeader.GetRootAs(buf, 0)
