"""
Tests for the SWIFT message model and block extraction.
"""

import pytest

from swift_wire.core.exceptions import ExtractionError
from swift_wire.protocols.swift import (
    ExtractionStatus,
    MessageDirection,
    SwiftMessage,
    extract_block,
    iter_blocks,
    require_block,
)
from swift_wire.protocols.swift.block_extraction import find_block_end
from swift_wire.protocols.swift.swift_codes import OutputFormat, SwiftBlockType

from .conftest import APPLICATION_HEADER, BASIC_HEADER


@pytest.mark.unit
class TestSwiftMessage:
    """Tests for SwiftMessage."""

    def test_serialize_orders_blocks(self):
        message = SwiftMessage(
            {"S": "{SAC:}", "4": "\n:20:X\n-", "1": BASIC_HEADER, "2": APPLICATION_HEADER}
        )

        assert list(message.blocks) == ["1", "2", "4", "S"]
        assert message.serialize() == (
            f"{{1:{BASIC_HEADER}}}{{2:{APPLICATION_HEADER}}}{{4:\n:20:X\n-}}{{S:{{SAC:}}}}"
        )
        assert str(message) == message.serialize()

    def test_unknown_block_rejected(self):
        with pytest.raises(ValueError, match="Unknown block"):
            SwiftMessage({"1": BASIC_HEADER, "7": "X"})

    def test_blocks_are_read_only(self, message):
        with pytest.raises(TypeError):
            message.blocks["4"] = "changed"

    def test_absent_blocks_are_dropped(self, message):
        assert message.block("3") is None
        assert "5" not in message.blocks

    def test_message_type_and_direction(self, message):
        assert message.message_type_code == "103"
        assert message.direction is MessageDirection.OUTPUT

    def test_message_type_missing(self):
        message = SwiftMessage({"1": BASIC_HEADER, "2": "X", "4": "\n:20:X\n-"})

        assert message.message_type_code is None
        assert message.direction is None

    def test_network_marker_detection(self, message, network_message):
        assert not message.requires_network_formatting
        assert network_message.requires_network_formatting

    def test_marker_must_be_whole_line(self, message_factory):
        message = message_factory(extra_lines=[":72:/INS/:119:NETFMT"])

        assert not message.has_network_marker()

    def test_without_network_marker(self, network_message):
        stripped = network_message.without_network_marker()

        assert ":119:NETFMT" not in stripped.text_block
        assert stripped.text_block == "\n:20:NETREF01\n:32A:210101EUR1000,00\n-"
        assert stripped.block("3") == "{108:MSGREF}"
        assert network_message.has_network_marker()

    def test_without_marker_is_identity_when_unmarked(self, message):
        assert message.without_network_marker() is message

    def test_is_formattable(self):
        empty = SwiftMessage({"1": BASIC_HEADER, "2": APPLICATION_HEADER, "4": "  "})

        assert not empty.is_formattable

    def test_to_dict(self, message):
        data = message.to_dict()

        assert data["message_type"] == "103"
        assert data["requires_network_formatting"] is False
        assert data["blocks"]["1"] == BASIC_HEADER


@pytest.mark.unit
class TestSwiftCodes:
    """Tests for reference data enums."""

    def test_block_type_lookup(self):
        assert SwiftBlockType.from_number("4") is SwiftBlockType.TEXT
        assert SwiftBlockType.from_number("9") is None

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("fin", OutputFormat.FIN),
            ("SWIFT", OutputFormat.FIN),
            ("batch", OutputFormat.RJE),
            ("dos-pcc", OutputFormat.DOS_PCC),
            ("pcc", OutputFormat.DOS_PCC),
            ("PC", OutputFormat.DOS_PCC),
        ],
    )
    def test_output_format_aliases(self, code, expected):
        assert OutputFormat.from_code(code) is expected

    def test_unknown_output_format(self):
        with pytest.raises(ValueError, match="Unknown output format"):
            OutputFormat.from_code("XML")

    def test_binary_flag(self):
        assert OutputFormat.DOS_PCC.binary
        assert not OutputFormat.FIN.binary


@pytest.mark.unit
class TestBlockExtraction:
    """Tests for balanced-bracket extraction."""

    def test_nested_block_returned_whole(self):
        text = "{1:F01X}{3:{108:REF}{119:STP}}{4:\n:20:X\n-}"
        result = extract_block(text, "3")

        assert result.status is ExtractionStatus.FOUND
        assert result.text == "{3:{108:REF}{119:STP}}"
        assert result.content == "{108:REF}{119:STP}"
        assert text[result.start : result.end] == result.text

    def test_network_info_block(self):
        text = "{1:F21X}{4:{177:2610181107}{451:0}}{1:F01Y}"

        assert extract_block(text, "4").text == "{4:{177:2610181107}{451:0}}"

    def test_not_found(self):
        result = extract_block("{1:F01X}", "2")

        assert result.status is ExtractionStatus.NOT_FOUND
        assert result.text is None
        assert not result.found

    def test_empty_text(self):
        assert extract_block("", "1").status is ExtractionStatus.NOT_FOUND

    def test_malformed(self):
        result = extract_block("{1:F01X}{3:{108:REF}", "3")

        assert result.status is ExtractionStatus.MALFORMED
        assert result.start == 8

    def test_start_offset(self):
        text = "{1:A}{1:B}"

        assert extract_block(text, "1", start=1).text == "{1:B}"

    def test_find_block_end(self):
        assert find_block_end("{4:{1:}}", 0) == 8
        assert find_block_end("{4:{1:}", 0) == -1

    def test_require_block_raises(self):
        with pytest.raises(ExtractionError) as exc_info:
            require_block("{1:F01X}", "4")

        assert exc_info.value.block_id == "4"
        assert exc_info.value.status == "not_found"

        with pytest.raises(ExtractionError, match="not closed"):
            require_block("{4:\n:20:X\n-", "4")

    def test_iter_blocks(self):
        blocks = list(iter_blocks("{1:A}\n{2:B}{3:{108:C}} {4:\n:20:X\n-}"))

        assert [b.block_id for b in blocks] == ["1", "2", "3", "4"]
        assert blocks[2].content == "{108:C}"

    def test_iter_blocks_stops_on_unclosed(self):
        blocks = list(iter_blocks("{1:A}{4:\n:20:X"))

        assert blocks[-1].status is ExtractionStatus.MALFORMED
        assert blocks[-1].block_id == "4"
        assert len(blocks) == 2
