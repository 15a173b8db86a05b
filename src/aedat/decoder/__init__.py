"""
Decoder Module
==============

Header parsing and packet iteration for AEDAT4 sources:
    - Decoder: Owns a source and yields validated Packets
    - read_header / check_magic: Container preamble
    - parse_description: XML description -> stream registry
    - decompress: Per-packet payload decompression
"""

from aedat.decoder.compression import decompress
from aedat.decoder.description import parse_description, parse_unsigned
from aedat.decoder.header import MAGIC_NUMBER, Header, check_magic, read_header
from aedat.decoder.packets import (
    UNKNOWN_POSITION,
    Decoder,
    DecoderMetrics,
    DecoderState,
)

__all__ = [
    "MAGIC_NUMBER",
    "UNKNOWN_POSITION",
    "Decoder",
    "DecoderMetrics",
    "DecoderState",
    "Header",
    "check_magic",
    "decompress",
    "parse_description",
    "parse_unsigned",
    "read_header",
]
