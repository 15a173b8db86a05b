"""
Stream Models
=============

Typed records for the logical streams multiplexed in an AEDAT4 container.

Core Concepts:
    - StreamContent: The four payload kinds and their 4-character codes
    - Stream: Immutable declaration of one stream (kind + image size)

The stream registry itself is a plain ``dict[int, Stream]`` built once by
the header parser and handed to callers as a read-only mapping.

Example:
    from aedat.models.stream import Stream, StreamContent

    stream = Stream(content=StreamContent.FRAME, width=640, height=480)
    print(str(stream.content))  # "FRME"
"""

from dataclasses import dataclass
from enum import Enum

from aedat.errors import UnsupportedStreamTypeError


class StreamContent(str, Enum):
    """
    Payload kinds, valued by their flatbuffers file identifier.

    Attributes:
        EVENTS: Polarity events from a DVS sensor ("EVTS")
        FRAME: Intensity frames ("FRME")
        IMUS: Inertial measurement samples ("IMUS")
        TRIGGERS: External trigger signals ("TRIG")
    """

    EVENTS = "EVTS"
    FRAME = "FRME"
    IMUS = "IMUS"
    TRIGGERS = "TRIG"

    @classmethod
    def from_identifier(cls, identifier: str) -> "StreamContent":
        """
        Map a type identifier from the description to a content kind.

        Raises:
            UnsupportedStreamTypeError: If the identifier is unknown
        """
        try:
            return cls(identifier)
        except ValueError:
            raise UnsupportedStreamTypeError(identifier) from None

    @property
    def has_dimensions(self) -> bool:
        """Whether streams of this kind declare a sensor size."""
        return self in (StreamContent.EVENTS, StreamContent.FRAME)

    @property
    def identifier(self) -> bytes:
        """File identifier as it appears in payload buffers."""
        return self.value.encode("ascii")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Stream:
    """
    Declaration of one logical stream.

    Attributes:
        content: Payload kind
        width: Sensor width in pixels (0 for IMUS and TRIGGERS)
        height: Sensor height in pixels (0 for IMUS and TRIGGERS)
    """

    content: StreamContent
    width: int = 0
    height: int = 0
