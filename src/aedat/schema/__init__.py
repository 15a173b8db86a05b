"""
Schema Module
=============

Flatbuffers accessors for the parts of the AEDAT4 schema the decoder reads:
    - IOHeader: compression, file_data_position and description
    - payload_has_identifier: file identifier check on packet payloads
"""

from aedat.schema.identifiers import payload_has_identifier
from aedat.schema.ioheader import CompressionType, IOHeader, read_ioheader, verify_ioheader

__all__ = [
    "CompressionType",
    "IOHeader",
    "payload_has_identifier",
    "read_ioheader",
    "verify_ioheader",
]
