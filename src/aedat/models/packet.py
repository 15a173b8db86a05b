"""
Packet Data Model
=================

One decompressed, validated payload produced by the decoder.

Design Rules:
    - The decoder does not keep a reference after yielding a packet
    - The buffer is NOT interpreted beyond its type identifier
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Packet:
    """
    Validated packet from an AEDAT4 source.

    Attributes:
        stream_id: Stream the payload belongs to
        buffer: Decompressed flatbuffers payload (size-prefixed)
    """

    stream_id: int
    buffer: bytes

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the full payload."""
        return f"Packet(stream_id={self.stream_id}, size={len(self.buffer)})"
