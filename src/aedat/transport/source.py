"""
Byte Sources
============

Blocking byte channels the decoder reads AEDAT4 data from.

This module provides:
    - Source: Protocol the decoder depends on
    - ByteSource: Source over any binary file-like object
    - FileSource: Local file (seekable, magic preamble present)
    - UnixSocketSource: Unix-domain stream socket (non-seekable)
    - TcpSource: TCP stream socket (non-seekable)

Design Rules:
    - read_exact either returns exactly `size` bytes or raises SourceIOError
    - A short read (end of source) is an error here; the decoder decides
      when end of source means clean completion
    - Timeouts are transport configuration, applied at connect time
"""

import logging
import socket
from pathlib import Path
from typing import BinaryIO, Optional, Protocol, Union

from aedat.errors import SourceIOError


logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1 << 20


class Source(Protocol):
    """
    Protocol for blocking byte channels.

    Implemented by:
        - FileSource
        - UnixSocketSource
        - TcpSource
        - ByteSource over an arbitrary binary stream (tests, pipes)
    """

    name: str
    seekable: bool

    def read_exact(self, size: int) -> bytes:
        """Read exactly `size` bytes or raise SourceIOError."""
        ...

    def close(self) -> None:
        """Release the underlying channel."""
        ...


class ByteSource:
    """
    Source over a binary file-like object.

    The source takes ownership of `stream` and closes it in close().

    Attributes:
        name: Human-readable origin, used in logs and errors
        seekable: Whether the container's file_data_position is meaningful
    """

    seekable: bool = False

    def __init__(self, stream: BinaryIO, name: str = "<stream>") -> None:
        self.name = name
        self._stream = stream
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def read_exact(self, size: int) -> bytes:
        """
        Read exactly `size` bytes, blocking until they arrive.

        Raises:
            SourceIOError: On read failure, or if the source ends first
        """
        # Allocation grows with the bytes actually received, not with `size`
        chunks = []
        remaining = size
        try:
            while remaining > 0:
                chunk = self._stream.read(min(remaining, _CHUNK_SIZE))
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)
        except (OSError, ValueError) as e:
            raise SourceIOError(f"read from {self.name} failed: {e}") from e
        if remaining > 0:
            raise SourceIOError(
                f"unexpected end of {self.name}: expected {size} bytes, got {size - remaining}"
            )
        return b"".join(chunks)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stream.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class FileSource(ByteSource):
    """Local AEDAT4 file."""

    seekable = True

    def __init__(self, path: Union[str, Path]) -> None:
        path = Path(path)
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise SourceIOError(f"cannot open {path}: {e}") from e
        super().__init__(stream, name=str(path))
        logger.info(f"Opened AEDAT4 file: {path}")


class _SocketSource(ByteSource):
    """Source reading from a connected stream socket."""

    def __init__(self, sock: socket.socket, name: str) -> None:
        super().__init__(sock.makefile("rb"), name=name)
        self._socket = sock

    def close(self) -> None:
        if self._closed:
            return
        try:
            super().close()
        finally:
            self._socket.close()


class UnixSocketSource(_SocketSource):
    """
    Unix-domain stream socket.

    Args:
        path: Filesystem path of the listening socket
        connect_timeout: Seconds to wait for the connection (None = block)
        read_timeout: Seconds to wait on each read (None = block)
    """

    def __init__(
        self,
        path: Union[str, Path],
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
    ) -> None:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(connect_timeout)
            sock.connect(str(path))
            sock.settimeout(read_timeout)
        except OSError as e:
            sock.close()
            raise SourceIOError(f"cannot connect to unix socket {path}: {e}") from e
        super().__init__(sock, name=f"unix:{path}")
        logger.info(f"Connected to unix socket: {path}")


class TcpSource(_SocketSource):
    """
    TCP stream socket.

    Args:
        host: Host name or address
        port: TCP port
        connect_timeout: Seconds to wait for the connection (None = block)
        read_timeout: Seconds to wait on each read (None = block)
    """

    def __init__(
        self,
        host: str,
        port: int,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
    ) -> None:
        try:
            sock = socket.create_connection((host, port), timeout=connect_timeout)
        except OSError as e:
            raise SourceIOError(f"cannot connect to {host}:{port}: {e}") from e
        sock.settimeout(read_timeout)
        super().__init__(sock, name=f"tcp:{host}:{port}")
        logger.info(f"Connected to TCP stream: {host}:{port}")
