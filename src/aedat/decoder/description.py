"""
Description Parser
==================

Builds the stream registry from the XML description embedded in the
IOHeader.

Relevant shape of the description::

    <dv>
        <node name="outInfo">
            <node name="0">
                <attr key="typeIdentifier">EVTS</attr>
                <node name="info">
                    <attr key="sizeX">640</attr>
                    <attr key="sizeY">480</attr>
                </node>
            </node>
            ...
        </node>
    </dv>

Rules:
    - Every stream node must name its id and type identifier
    - EVTS and FRME streams must declare sizeX and sizeY
    - IMUS and TRIG streams have width = height = 0
    - Duplicate ids and empty registries are rejected
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import Dict, Optional

from aedat.errors import DescriptionXmlError, IntegerParseError, ParseError
from aedat.models.stream import Stream, StreamContent


logger = logging.getLogger(__name__)

_UNSIGNED = re.compile(r"\+?[0-9]+")


def parse_unsigned(text: str, bits: int) -> int:
    """
    Parse an unsigned integer of at most `bits` bits.

    Only ASCII digits with an optional leading '+' are accepted; whitespace,
    signs other than '+', and out-of-range values are rejected.

    Raises:
        IntegerParseError: If `text` is not a valid value
    """
    if not _UNSIGNED.fullmatch(text):
        raise IntegerParseError(f"invalid digit found in {text!r}")
    value = int(text)
    if value >= 1 << bits:
        raise IntegerParseError(f"{text!r} is too large for u{bits}")
    return value


def _find_child(
    parent: ET.Element, tag: str, key: str, value: str
) -> Optional[ET.Element]:
    for child in parent:
        if child.tag == tag and child.get(key) == value:
            return child
    return None


def _attr_text(node: ET.Element, key: str, what: str) -> str:
    attr = _find_child(node, "attr", "key", key)
    if attr is None:
        raise ParseError(f"missing {what}")
    if not attr.text:
        raise ParseError(f"empty {what}")
    return attr.text


def parse_description(description: str) -> Dict[int, Stream]:
    """
    Parse a description document into a stream registry.

    Args:
        description: XML text from IOHeader.description

    Returns:
        Mapping from stream id to Stream, never empty

    Raises:
        DescriptionXmlError: If the document is not well-formed
        UnsupportedStreamTypeError: On an unknown type identifier
        IntegerParseError: On an unparseable id or size
        ParseError: On any other structural violation
    """
    try:
        dv_node = ET.fromstring(description)
    except ET.ParseError as e:
        raise DescriptionXmlError(f"malformed description: {e}") from e

    if dv_node.tag != "dv":
        raise ParseError("unexpected dv node tag")

    output_node = _find_child(dv_node, "node", "name", "outInfo")
    if output_node is None:
        raise ParseError("the description has no output node")

    id_to_stream: Dict[int, Stream] = {}
    for stream_node in output_node:
        if stream_node.tag != "node":
            continue

        name = stream_node.get("name")
        if name is None:
            raise ParseError("missing stream node id")
        stream_id = parse_unsigned(name, 32)

        identifier = _attr_text(stream_node, "typeIdentifier", "stream node type identifier")
        content = StreamContent.from_identifier(identifier)

        width = 0
        height = 0
        if content.has_dimensions:
            info_node = _find_child(stream_node, "node", "name", "info")
            if info_node is None:
                raise ParseError("missing info node")
            width = parse_unsigned(_attr_text(info_node, "sizeX", "sizeX attribute"), 16)
            height = parse_unsigned(_attr_text(info_node, "sizeY", "sizeY attribute"), 16)

        if stream_id in id_to_stream:
            raise ParseError("duplicated stream id")
        id_to_stream[stream_id] = Stream(content=content, width=width, height=height)
        logger.debug(f"Stream {stream_id}: {content} {width}x{height}")

    if not id_to_stream:
        raise ParseError("no stream found in the description")

    return id_to_stream
