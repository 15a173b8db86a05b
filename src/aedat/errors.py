"""
Decoder Errors
==============

Exception hierarchy for everything that can go wrong while opening or
iterating an AEDAT4 source.

Every error raised by this package derives from ParseError and carries a
machine-readable ErrorKind, so callers can handle a single exception type
and still dispatch on the failure category.

Rules:
    - Errors are never retried inside the decoder
    - Low-level exceptions are wrapped with `raise ... from`
    - End of data is NOT an error (see Decoder.read_packet)
"""

from enum import Enum


class ErrorKind(str, Enum):
    """
    Machine-readable failure categories.

    Attributes:
        GENERAL: Structural violation (bad magic, malformed description,
            unknown stream id, identifier mismatch, unknown compression)
        UNSUPPORTED_STREAM_TYPE: Type identifier outside EVTS/FRME/IMUS/TRIG
        FLATBUFFER: Header message is not a well-formed IOHeader table
        UTF8: Description is not valid UTF-8
        XML: Description is not well-formed XML
        PARSE_INT: Numeric attribute could not be parsed
        IO: Read failure, truncated record, or codec failure
    """

    GENERAL = "GENERAL"
    UNSUPPORTED_STREAM_TYPE = "UNSUPPORTED_STREAM_TYPE"
    FLATBUFFER = "FLATBUFFER"
    UTF8 = "UTF8"
    XML = "XML"
    PARSE_INT = "PARSE_INT"
    IO = "IO"


class ParseError(Exception):
    """Base error for AEDAT4 decoding. Used directly for GENERAL failures."""

    kind: ErrorKind = ErrorKind.GENERAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class UnsupportedStreamTypeError(ParseError):
    """Raised when a stream declares a type identifier we cannot decode."""

    kind = ErrorKind.UNSUPPORTED_STREAM_TYPE

    def __init__(self, identifier: str) -> None:
        super().__init__(f"unsupported stream type {identifier!r}")
        self.identifier = identifier


class HeaderDecodeError(ParseError):
    """Raised when the header message is not a valid IOHeader table."""

    kind = ErrorKind.FLATBUFFER


class DescriptionEncodingError(ParseError):
    """Raised when the description is not valid UTF-8."""

    kind = ErrorKind.UTF8


class DescriptionXmlError(ParseError):
    """Raised when the description cannot be parsed as XML."""

    kind = ErrorKind.XML


class IntegerParseError(ParseError):
    """Raised when a numeric attribute is not a valid unsigned integer."""

    kind = ErrorKind.PARSE_INT


class SourceIOError(ParseError):
    """Raised on read failures and truncated records."""

    kind = ErrorKind.IO


class DecompressionError(SourceIOError):
    """Raised when a packet payload cannot be decompressed."""
