"""
aedat
=====

Decoder for AEDAT4 containers, the file and stream format used to record
multiplexed neuromorphic sensor data (events, frames, IMU samples and
triggers).

This package validates the container preamble, parses the self-describing
header into a stream registry, and iterates the remaining records as
decompressed, type-checked packets.

Components:
    - transport: File, Unix socket and TCP byte sources
    - schema: Flatbuffers accessors (IOHeader, payload identifiers)
    - decoder: Header parser and packet iterator
    - models: Stream, StreamContent and Packet records

Example:
    import aedat

    with aedat.Decoder.from_file("recording.aedat4") as decoder:
        for packet in decoder:
            stream = decoder.id_to_stream[packet.stream_id]
            print(packet.stream_id, stream.content, len(packet.buffer))
"""

__version__ = "0.1.0"

from aedat.decoder import MAGIC_NUMBER, Decoder, DecoderState
from aedat.errors import ErrorKind, ParseError, UnsupportedStreamTypeError
from aedat.models import Packet, Stream, StreamContent
from aedat.schema import CompressionType

__all__ = [
    "__version__",
    "MAGIC_NUMBER",
    "CompressionType",
    "Decoder",
    "DecoderState",
    "ErrorKind",
    "Packet",
    "ParseError",
    "Stream",
    "StreamContent",
    "UnsupportedStreamTypeError",
]
