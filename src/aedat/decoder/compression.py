"""
Payload Decompression
=====================

Per-packet decompression for the container-wide CompressionType.

The *_HIGH variants only differ in encoder effort, so they share the
decoding path of their base variant.
"""

import lz4.frame
import zstandard

from aedat.errors import DecompressionError, ParseError
from aedat.schema.ioheader import CompressionType


def _decompress_lz4(raw: bytes) -> bytes:
    # lz4.frame.decompress() stops after the first frame; walk all of them.
    chunks = []
    remaining = raw
    try:
        while remaining:
            decompressor = lz4.frame.LZ4FrameDecompressor()
            chunks.append(decompressor.decompress(remaining))
            if not decompressor.eof:
                raise DecompressionError("truncated LZ4 frame")
            remaining = decompressor.unused_data
    except (RuntimeError, ValueError) as e:
        raise DecompressionError(f"LZ4 decompression failed: {e}") from e
    return b"".join(chunks)


def _decompress_zstd(raw: bytes) -> bytes:
    # Frames written by streaming encoders omit the content size, which
    # ZstdDecompressor.decompress() refuses; decode incrementally instead.
    chunks = []
    remaining = raw
    try:
        while remaining:
            dobj = zstandard.ZstdDecompressor().decompressobj()
            chunks.append(dobj.decompress(remaining))
            if not dobj.eof:
                raise DecompressionError("truncated Zstd frame")
            remaining = dobj.unused_data
    except zstandard.ZstdError as e:
        raise DecompressionError(f"Zstd decompression failed: {e}") from e
    return b"".join(chunks)


def decompress(compression: int, raw: bytes) -> bytes:
    """
    Decompress one packet payload.

    Args:
        compression: CompressionType read from the IOHeader
        raw: Payload bytes as framed in the container

    Returns:
        Decompressed payload (`raw` itself for NONE)

    Raises:
        DecompressionError: If the codec rejects the payload
        ParseError: If `compression` is not a known CompressionType
    """
    if compression == CompressionType.NONE:
        return raw
    if compression in (CompressionType.LZ4, CompressionType.LZ4_HIGH):
        return _decompress_lz4(raw)
    if compression in (CompressionType.ZSTD, CompressionType.ZSTD_HIGH):
        return _decompress_zstd(raw)
    raise ParseError("unknown compression algorithm")
