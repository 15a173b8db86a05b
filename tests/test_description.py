"""
Description Parser Tests
========================

Tests for building the stream registry from the XML description.
"""

import pytest

from aedat.decoder.description import parse_description, parse_unsigned
from aedat.errors import (
    DescriptionXmlError,
    ErrorKind,
    IntegerParseError,
    ParseError,
    UnsupportedStreamTypeError,
)
from aedat.models.stream import Stream, StreamContent

from conftest import DESCRIPTION


def wrap(streams: str) -> str:
    return f'<dv><node name="outInfo">{streams}</node></dv>'


def stream_node(name: str, identifier: str, size=None) -> str:
    info = ""
    if size is not None:
        info = (
            '<node name="info">'
            f'<attr key="sizeX">{size[0]}</attr>'
            f'<attr key="sizeY">{size[1]}</attr>'
            "</node>"
        )
    return f'<node name="{name}"><attr key="typeIdentifier">{identifier}</attr>{info}</node>'


class TestParseDescription:
    """Tests for parse_description."""

    def test_full_description(self):
        """Verify all four stream kinds are registered."""
        registry = parse_description(DESCRIPTION)

        assert registry == {
            0: Stream(StreamContent.EVENTS, 346, 260),
            1: Stream(StreamContent.FRAME, 640, 480),
            2: Stream(StreamContent.IMUS, 0, 0),
            3: Stream(StreamContent.TRIGGERS, 0, 0),
        }

    def test_imus_and_triggers_ignore_info(self):
        """Verify IMUS/TRIG sizes are 0 even when an info node is present."""
        registry = parse_description(wrap(stream_node("5", "IMUS", size=(10, 20))))
        assert registry[5] == Stream(StreamContent.IMUS, 0, 0)

    def test_non_node_children_skipped(self):
        """Verify attr children of outInfo are not treated as streams."""
        description = wrap('<attr key="x">1</attr>' + stream_node("0", "TRIG"))
        assert list(parse_description(description)) == [0]

    def test_wrong_root_tag(self):
        """Verify a root other than dv is rejected."""
        with pytest.raises(ParseError, match="unexpected dv node tag"):
            parse_description('<root><node name="outInfo"/></root>')

    def test_missing_output_node(self):
        """Verify a description without outInfo is rejected."""
        with pytest.raises(ParseError, match="no output node"):
            parse_description('<dv><node name="other"/></dv>')

    def test_no_streams(self):
        """Verify an empty outInfo node is rejected."""
        with pytest.raises(ParseError, match="no stream found"):
            parse_description(wrap(""))

    def test_duplicate_stream_id(self):
        """Verify duplicate stream ids are rejected."""
        description = wrap(stream_node("1", "IMUS") + stream_node("1", "TRIG"))
        with pytest.raises(ParseError, match="duplicated stream id"):
            parse_description(description)

    def test_unsupported_type(self):
        """Verify unknown type identifiers raise UnsupportedStreamTypeError."""
        with pytest.raises(UnsupportedStreamTypeError) as excinfo:
            parse_description(wrap(stream_node("0", "ABCD")))
        assert excinfo.value.kind == ErrorKind.UNSUPPORTED_STREAM_TYPE
        assert excinfo.value.identifier == "ABCD"

    def test_missing_type_identifier(self):
        """Verify a stream without typeIdentifier is rejected."""
        with pytest.raises(ParseError, match="missing stream node type identifier"):
            parse_description(wrap('<node name="0"/>'))

    def test_empty_type_identifier(self):
        """Verify an empty typeIdentifier is rejected."""
        with pytest.raises(ParseError, match="empty stream node type identifier"):
            parse_description(wrap('<node name="0"><attr key="typeIdentifier"></attr></node>'))

    def test_missing_stream_id(self):
        """Verify a stream node without a name is rejected."""
        with pytest.raises(ParseError, match="missing stream node id"):
            parse_description(wrap('<node><attr key="typeIdentifier">IMUS</attr></node>'))

    def test_invalid_stream_id(self):
        """Verify a non-numeric stream id is an integer parse error."""
        with pytest.raises(IntegerParseError):
            parse_description(wrap(stream_node("abc", "IMUS")))

    def test_events_without_info(self):
        """Verify EVTS streams require an info node."""
        with pytest.raises(ParseError, match="missing info node"):
            parse_description(wrap(stream_node("0", "EVTS")))

    def test_frame_missing_size(self):
        """Verify FRME streams require sizeX and sizeY."""
        description = wrap(
            '<node name="1"><attr key="typeIdentifier">FRME</attr>'
            '<node name="info"><attr key="sizeX">640</attr></node></node>'
        )
        with pytest.raises(ParseError, match="missing sizeY attribute"):
            parse_description(description)

    def test_size_out_of_range(self):
        """Verify sizes must fit in 16 bits."""
        with pytest.raises(IntegerParseError):
            parse_description(wrap(stream_node("0", "EVTS", size=(70000, 10))))

    def test_malformed_xml(self):
        """Verify malformed documents raise DescriptionXmlError."""
        with pytest.raises(DescriptionXmlError) as excinfo:
            parse_description("<dv><node></dv>")
        assert excinfo.value.kind == ErrorKind.XML


class TestParseUnsigned:
    """Tests for strict unsigned integer parsing."""

    @pytest.mark.parametrize("text,expected", [("0", 0), ("640", 640), ("+7", 7), ("65535", 65535)])
    def test_valid(self, text, expected):
        assert parse_unsigned(text, 16) == expected

    @pytest.mark.parametrize("text", ["", "-1", " 5", "5 ", "0x10", "65536", "1.5"])
    def test_invalid(self, text):
        with pytest.raises(IntegerParseError):
            parse_unsigned(text, 16)

    def test_u32_upper_bound(self):
        assert parse_unsigned("4294967295", 32) == 4294967295
        with pytest.raises(IntegerParseError):
            parse_unsigned("4294967296", 32)
