"""
Packet Decoder
==============

Iterates the packet section of an AEDAT4 source.

Each record is::

    [u32 LE stream_id][u32 LE length L][L bytes payload]

and the payload is decompressed with the container-wide CompressionType,
then checked against the type identifier of the stream it claims to
belong to.

State machine:
    READY → READY:      packet decoded
    READY → EXHAUSTED:  position reached file_data_position, or the source
                        ended cleanly before a stream id
    READY → FAILED:     any error after a stream id was read
    EXHAUSTED and FAILED are terminal.

Example:
    from aedat import Decoder

    with Decoder.from_file("recording.aedat4") as decoder:
        for stream_id, stream in decoder.id_to_stream.items():
            print(stream_id, stream.content, stream.width, stream.height)
        for packet in decoder:
            handle(packet.stream_id, packet.buffer)
"""

import logging
import struct
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

from aedat import config
from aedat.decoder.compression import decompress
from aedat.decoder.header import Header, check_magic, read_header
from aedat.errors import ParseError, SourceIOError
from aedat.models.packet import Packet
from aedat.models.stream import Stream
from aedat.schema.identifiers import payload_has_identifier
from aedat.transport.source import FileSource, Source, TcpSource, UnixSocketSource


logger = logging.getLogger(__name__)

_U32 = struct.Struct("<I")

UNKNOWN_POSITION = -1


class DecoderState(str, Enum):
    """Iteration state of a Decoder."""

    READY = "READY"
    EXHAUSTED = "EXHAUSTED"
    FAILED = "FAILED"


class DecoderMetrics:
    """Metrics for Decoder observability."""

    __slots__ = (
        "packets_decoded",
        "bytes_read",
        "errors",
        "packets_per_stream",
    )

    def __init__(self) -> None:
        self.packets_decoded: int = 0
        self.bytes_read: int = 0
        self.errors: int = 0
        self.packets_per_stream: Dict[int, int] = {}

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "packets_decoded": self.packets_decoded,
            "bytes_read": self.bytes_read,
            "errors": self.errors,
            "packets_per_stream": dict(self.packets_per_stream),
        }


class Decoder:
    """
    Sequential AEDAT4 packet reader.

    A Decoder owns its source for its whole lifetime. It is a plain
    blocking cursor: it may be handed to another thread, but must not be
    used from two threads at once.

    Attributes:
        id_to_stream: Read-only stream registry
        compression: CompressionType value from the IOHeader
        position: Bytes consumed so far
        file_data_position: End of the packet section, -1 if unknown
        state: Current DecoderState
        metrics: Operational metrics
    """

    def __init__(self, source: Source, header: Header, position: int) -> None:
        """
        Wrap an already parsed source. Use the from_* constructors instead.

        Args:
            source: Source positioned at the first packet record
            header: Header read from `source`
            position: Bytes consumed before the first packet record
        """
        self._source = source
        self._id_to_stream = MappingProxyType(dict(header.id_to_stream))
        self._compression = header.compression
        self._position = position
        self._file_data_position = (
            header.file_data_position if source.seekable else UNKNOWN_POSITION
        )
        self._state = DecoderState.READY
        self.metrics = DecoderMetrics()
        self.metrics.bytes_read = position

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_source(cls, source: Source, check_magic_number: Optional[bool] = None) -> "Decoder":
        """
        Parse the header of an open source and return a ready Decoder.

        The decoder takes ownership of `source`; it is closed if the header
        cannot be parsed.

        Args:
            source: Open byte source
            check_magic_number: Validate the magic preamble. Defaults to
                True for seekable sources, False for streams.

        Raises:
            ParseError: If the preamble or header is invalid
        """
        if check_magic_number is None:
            check_magic_number = source.seekable
        try:
            position = check_magic(source) if check_magic_number else 0
            header = read_header(source)
        except BaseException:
            source.close()
            raise
        return cls(source, header, position + header.size)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Decoder":
        """Open an AEDAT4 file."""
        return cls.from_source(FileSource(path), check_magic_number=True)

    @classmethod
    def from_unix_socket(
        cls,
        path: Union[str, Path],
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
    ) -> "Decoder":
        """
        Connect to a Unix-domain socket serving AEDAT4 data.

        Timeouts left as None fall back to the transport settings.
        """
        connect_timeout, read_timeout = _resolve_timeouts(connect_timeout, read_timeout)
        source = UnixSocketSource(path, connect_timeout=connect_timeout, read_timeout=read_timeout)
        return cls.from_source(source, check_magic_number=False)

    @classmethod
    def from_tcp(
        cls,
        host: str,
        port: int,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
    ) -> "Decoder":
        """
        Connect to a TCP server serving AEDAT4 data.

        Timeouts left as None fall back to the transport settings.
        """
        connect_timeout, read_timeout = _resolve_timeouts(connect_timeout, read_timeout)
        source = TcpSource(host, port, connect_timeout=connect_timeout, read_timeout=read_timeout)
        return cls.from_source(source, check_magic_number=False)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def id_to_stream(self) -> Mapping[int, Stream]:
        return self._id_to_stream

    @property
    def compression(self) -> int:
        return self._compression

    @property
    def position(self) -> int:
        return self._position

    @property
    def file_data_position(self) -> int:
        return self._file_data_position

    @property
    def state(self) -> DecoderState:
        return self._state

    # -------------------------------------------------------------------------
    # Iteration
    # -------------------------------------------------------------------------

    def read_packet(self) -> Optional[Packet]:
        """
        Decode the next packet.

        Returns:
            The next Packet, or None once the data is exhausted

        Raises:
            ParseError: If the record is truncated, cannot be decompressed,
                or does not match its stream. The decoder is FAILED
                afterwards and returns None on later calls.
        """
        if self._state is not DecoderState.READY:
            return None

        if (
            self._file_data_position > UNKNOWN_POSITION
            and self._position == self._file_data_position
        ):
            self._finish("reached file data position")
            return None

        try:
            (stream_id,) = _U32.unpack(self._source.read_exact(_U32.size))
        except SourceIOError:
            self._finish("source ended")
            return None

        try:
            packet = self._read_record(stream_id)
        except ParseError as e:
            self._state = DecoderState.FAILED
            self.metrics.errors += 1
            logger.warning(f"Packet decoding failed at position {self._position}: {e}")
            raise

        self.metrics.packets_decoded += 1
        self.metrics.packets_per_stream[stream_id] = (
            self.metrics.packets_per_stream.get(stream_id, 0) + 1
        )
        return packet

    def _read_record(self, stream_id: int) -> Packet:
        (length,) = _U32.unpack(self._source.read_exact(_U32.size))
        self._position += 2 * _U32.size + length
        raw = self._source.read_exact(length)
        self.metrics.bytes_read = self._position

        buffer = decompress(self._compression, raw)

        stream = self._id_to_stream.get(stream_id)
        if stream is None:
            raise ParseError("unknown stream id")
        if not payload_has_identifier(buffer, stream.content):
            raise ParseError("the stream id and the identifier do not match")

        logger.debug(
            f"Packet stream_id={stream_id} content={stream.content} "
            f"raw={length} decoded={len(buffer)}"
        )
        return Packet(stream_id=stream_id, buffer=buffer)

    def _finish(self, reason: str) -> None:
        self._state = DecoderState.EXHAUSTED
        logger.info(
            f"End of data ({reason}) after {self.metrics.packets_decoded} packets "
            f"from {self._source.name}"
        )

    def __iter__(self) -> "Decoder":
        return self

    def __next__(self) -> Packet:
        packet = self.read_packet()
        if packet is None:
            raise StopIteration
        return packet

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying source."""
        self._source.close()

    def __enter__(self) -> "Decoder":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Decoder(source={self._source.name!r}, streams={len(self._id_to_stream)}, "
            f"position={self._position}, state={self._state.value})"
        )


def _resolve_timeouts(
    connect_timeout: Optional[float], read_timeout: Optional[float]
) -> tuple:
    if connect_timeout is None:
        connect_timeout = config.get_settings().transport.connect_timeout_seconds
    if read_timeout is None:
        read_timeout = config.get_settings().transport.read_timeout_seconds
    return connect_timeout, read_timeout
