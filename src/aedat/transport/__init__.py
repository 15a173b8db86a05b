"""
Transport Module
================

Byte sources the decoder reads from: local files, Unix-domain sockets and
TCP sockets, all behind the Source protocol.
"""

from aedat.transport.source import (
    ByteSource,
    FileSource,
    Source,
    TcpSource,
    UnixSocketSource,
)

__all__ = [
    "ByteSource",
    "FileSource",
    "Source",
    "TcpSource",
    "UnixSocketSource",
]
