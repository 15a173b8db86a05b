"""
Data Models
===========

Typed records exchanged between the decoder and its callers.

Models:
    - StreamContent: Payload kind (EVTS, FRME, IMUS, TRIG)
    - Stream: One entry of the stream registry
    - Packet: One decoded payload
"""

from aedat.models.packet import Packet
from aedat.models.stream import Stream, StreamContent

__all__ = [
    "Packet",
    "Stream",
    "StreamContent",
]
