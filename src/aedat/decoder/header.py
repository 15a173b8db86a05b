"""
Header Parser
=============

Reads the preamble of an AEDAT4 source: the magic number (files only) and
the length-prefixed IOHeader message.

Wire layout::

    [14 bytes magic "#!AER-DAT4.0\\r\\n"]   (file sources only)
    [u32 LE header length L]
    [L bytes IOHeader flatbuffer]
"""

import logging
import struct
from dataclasses import dataclass
from typing import Dict

from aedat.decoder.description import parse_description
from aedat.errors import DescriptionEncodingError, ParseError, SourceIOError
from aedat.models.stream import Stream
from aedat.schema.ioheader import read_ioheader
from aedat.transport.source import Source


logger = logging.getLogger(__name__)

MAGIC_NUMBER = b"#!AER-DAT4.0\r\n"

_LENGTH = struct.Struct("<I")


@dataclass(frozen=True)
class Header:
    """
    Decoded IOHeader.

    Attributes:
        compression: Raw CompressionType value (validated per packet)
        file_data_position: End of the packet section, -1 if unknown
        id_to_stream: Stream registry built from the description
        size: Framed size of the header record (4 + L)
    """

    compression: int
    file_data_position: int
    id_to_stream: Dict[int, Stream]
    size: int


def check_magic(source: Source) -> int:
    """
    Consume and validate the magic number.

    Returns:
        Number of bytes consumed

    Raises:
        ParseError: If the source is too short or the preamble differs
    """
    try:
        magic = source.read_exact(len(MAGIC_NUMBER))
    except SourceIOError:
        magic = b""
    if magic != MAGIC_NUMBER:
        raise ParseError("the file does not contain AEDAT4 data (wrong magic number)")
    return len(MAGIC_NUMBER)


def read_header(source: Source) -> Header:
    """
    Read the length-prefixed IOHeader and build the stream registry.

    Raises:
        SourceIOError: If the header record is truncated
        HeaderDecodeError: If the IOHeader table is malformed
        DescriptionEncodingError: If the description is not UTF-8
        ParseError: For any description-level violation
    """
    (length,) = _LENGTH.unpack(source.read_exact(_LENGTH.size))
    buffer = source.read_exact(length)

    ioheader = read_ioheader(buffer)
    compression = ioheader.Compression()
    file_data_position = ioheader.FileDataPosition()

    raw_description = ioheader.Description()
    if raw_description is None:
        raise ParseError("the description is empty")
    try:
        description = raw_description.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DescriptionEncodingError(f"description is not valid UTF-8: {e}") from e

    id_to_stream = parse_description(description)

    logger.info(
        f"Parsed IOHeader: compression={compression}, "
        f"file_data_position={file_data_position}, streams={len(id_to_stream)}"
    )

    return Header(
        compression=compression,
        file_data_position=file_data_position,
        id_to_stream=id_to_stream,
        size=_LENGTH.size + length,
    )
