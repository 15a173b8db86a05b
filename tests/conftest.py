"""
Test Configuration
==================

Pytest fixtures and container builders for the AEDAT4 decoder tests.
"""

import struct
from typing import Iterable, Optional, Tuple

import flatbuffers
import lz4.frame
import pytest
import zstandard

from aedat.decoder.header import MAGIC_NUMBER
from aedat.schema.ioheader import CompressionType


DESCRIPTION = """<dv version="2.0">
    <node name="outInfo" path="/mainloop/input/outInfo/">
        <node name="0" path="/mainloop/input/outInfo/0/">
            <attr key="compression" type="string">NONE</attr>
            <attr key="originalModuleName" type="string">capture</attr>
            <attr key="typeIdentifier" type="string">EVTS</attr>
            <node name="info" path="/mainloop/input/outInfo/0/info/">
                <attr key="sizeX" type="int">346</attr>
                <attr key="sizeY" type="int">260</attr>
            </node>
        </node>
        <node name="1" path="/mainloop/input/outInfo/1/">
            <attr key="typeIdentifier" type="string">FRME</attr>
            <node name="info" path="/mainloop/input/outInfo/1/info/">
                <attr key="sizeX" type="int">640</attr>
                <attr key="sizeY" type="int">480</attr>
            </node>
        </node>
        <node name="2" path="/mainloop/input/outInfo/2/">
            <attr key="typeIdentifier" type="string">IMUS</attr>
        </node>
        <node name="3" path="/mainloop/input/outInfo/3/">
            <attr key="typeIdentifier" type="string">TRIG</attr>
        </node>
    </node>
</dv>
"""


def build_ioheader(
    description: Optional[str] = DESCRIPTION,
    compression: int = CompressionType.NONE,
    file_data_position: int = -1,
) -> bytes:
    """Build an IOHeader flatbuffer the way the AEDAT4 writer does."""
    builder = flatbuffers.Builder(0)
    description_offset = None
    if description is not None:
        description_offset = builder.CreateString(description)
    builder.StartObject(3)
    builder.PrependInt32Slot(0, compression, 0)
    builder.PrependInt64Slot(1, file_data_position, -1)
    if description_offset is not None:
        builder.PrependUOffsetTRelativeSlot(2, description_offset, 0)
    builder.Finish(builder.EndObject())
    return bytes(builder.Output())


def build_payload(identifier: bytes, value: int = 42) -> bytes:
    """Build a size-prefixed flatbuffer tagged with `identifier`."""
    builder = flatbuffers.Builder(0)
    builder.StartObject(1)
    builder.PrependInt64Slot(0, value, 0)
    builder.FinishSizePrefixed(builder.EndObject(), file_identifier=identifier)
    return bytes(builder.Output())


def compress(compression: int, payload: bytes) -> bytes:
    if compression in (CompressionType.LZ4, CompressionType.LZ4_HIGH):
        return lz4.frame.compress(payload)
    if compression in (CompressionType.ZSTD, CompressionType.ZSTD_HIGH):
        return zstandard.ZstdCompressor().compress(payload)
    return payload


def record(stream_id: int, data: bytes) -> bytes:
    """Frame one packet record."""
    return struct.pack("<II", stream_id, len(data)) + data


def build_container(
    packets: Iterable[Tuple[int, bytes]] = (),
    description: Optional[str] = DESCRIPTION,
    compression: int = CompressionType.NONE,
    magic: bool = True,
    seekable: bool = True,
) -> bytes:
    """
    Build a complete AEDAT4 container.

    Payloads are compressed with `compression`. When `seekable` is set the
    header's file_data_position points at the end of the packet section.
    """
    body = b"".join(record(stream_id, compress(compression, payload)) for stream_id, payload in packets)
    preamble = MAGIC_NUMBER if magic else b""

    # file_data_position depends on the header length; an int64 slot has a
    # fixed size, so a placeholder of the same width gives the final length.
    placeholder = build_ioheader(description, compression, 0 if seekable else -1)
    file_data_position = len(preamble) + 4 + len(placeholder) + len(body)
    header = build_ioheader(description, compression, file_data_position if seekable else -1)
    assert len(header) == len(placeholder)

    return preamble + struct.pack("<I", len(header)) + header + body


@pytest.fixture
def events_payload():
    return build_payload(b"EVTS")


@pytest.fixture
def frame_payload():
    return build_payload(b"FRME", value=7)


@pytest.fixture
def write_container(tmp_path):
    """Write container bytes to a file and return its path."""

    def _write(data: bytes, name: str = "recording.aedat4"):
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write
