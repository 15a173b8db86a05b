"""
Payload Identifiers
===================

Checks the flatbuffers file identifier embedded in packet payloads.

Packet payloads are size-prefixed flatbuffers, so the identifier sits
after the 4-byte size prefix and the 4-byte root offset.
"""

from flatbuffers import util

from aedat.models.stream import StreamContent


def payload_has_identifier(buffer: bytes, content: StreamContent) -> bool:
    """
    Whether a decompressed payload is tagged with the code of `content`.

    Buffers too short to hold an identifier never match.
    """
    return util.BufferHasIdentifier(
        buffer, 0, content.identifier, size_prefixed=True
    )
