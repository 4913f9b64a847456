"""
Tests for the FIN, RJE and DOS-PCC encoders and the formatter registry.

Tests cover:
- Shared validation and fail-fast batch behavior
- Format-specific framing, delimiters and character rules
- Network wrapping inside encoders
- Round trips through the validator's extractor
"""

import logging

import pytest

from swift_wire.core.config import Config, FormatConfig, LineEnding, ValidatorConfig
from swift_wire.core.exceptions import FormatError
from swift_wire.core.structured_logging import LogCategory
from swift_wire.formatters import (
    DosPccFormatter,
    FinFormatter,
    Representation,
    RjeFormatter,
    create_formatter,
    hex_dump,
    normalize_line_endings,
    resolve_format,
    sectors_needed,
    supported_formats,
    transliterate,
)
from swift_wire.protocols.swift import OutputFormat, SwiftMessage
from swift_wire.validation.extraction import MessageExtractor, decode_content

from .conftest import BASIC_HEADER


def crlf(message: SwiftMessage) -> str:
    return normalize_line_endings(message.serialize(), LineEnding.CRLF)


def extract(payload) -> list:
    if isinstance(payload, bytes):
        payload = decode_content(payload)
    return MessageExtractor(ValidatorConfig()).extract(payload)


@pytest.mark.unit
class TestFormatterValidation:
    """Checks shared by every encoder."""

    @pytest.mark.parametrize("formatter_class", [FinFormatter, RjeFormatter, DosPccFormatter])
    def test_none_message(self, formatter_class):
        with pytest.raises(FormatError, match="cannot be None"):
            formatter_class().format_message(None)

    def test_wrong_type(self):
        with pytest.raises(FormatError, match="must be a SwiftMessage"):
            FinFormatter().format_message("{1:F01X}")

    def test_missing_message_type(self):
        message = SwiftMessage({"1": BASIC_HEADER, "2": "XYZ", "4": "\n:20:X\n-"})

        with pytest.raises(FormatError, match="Message type is required"):
            RjeFormatter().format_message(message)

    def test_empty_body(self, message_factory):
        message = SwiftMessage(dict(message_factory().blocks, **{"4": "  "}))

        with pytest.raises(FormatError, match="block 4"):
            FinFormatter().format_message(message)

    def test_nul_rejected(self, message_factory):
        message = message_factory(extra_lines=[":70:A\x00B"])

        with pytest.raises(FormatError, match="NUL"):
            RjeFormatter().format_message(message)

    def test_error_carries_format(self, message_factory):
        with pytest.raises(FormatError) as exc_info:
            FinFormatter().format_message(message_factory(extra_lines=[":70:lower"]))

        assert exc_info.value.output_format == "FIN"
        assert exc_info.value.offending_value == "l"
        assert exc_info.value.error_code == "FORMAT_ERROR"

    def test_empty_batch(self):
        with pytest.raises(FormatError, match="cannot be None or empty"):
            FinFormatter().format_batch([])

    def test_batch_limit(self, messages):
        with pytest.raises(FormatError, match="exceeds the maximum of 2"):
            FinFormatter(max_batch_size=2).format_batch(messages)

    def test_batch_fails_fast(self, message, message_factory):
        broken = message_factory(extra_lines=[":70:A$B"])

        with pytest.raises(FormatError, match="Message 2 of 3 failed") as exc_info:
            RjeFormatter().format_batch([message, broken, message])

        assert isinstance(exc_info.value.cause, FormatError)


@pytest.mark.unit
class TestFinFormatter:
    """Tests for FIN output."""

    def test_single_message_recovered_exactly(self, message):
        result = FinFormatter().format_batch([message])

        assert result.payload == message.serialize()
        assert result.representation is Representation.TEXT
        assert extract(result.payload) == [message.serialize()]

    def test_batch_separated_by_blank_line(self, messages):
        result = FinFormatter().format_batch(messages)

        assert result.payload == "\n\n".join(m.serialize() for m in messages)
        assert result.stats.message_count == 3
        assert result.stats.byte_size == len(result.payload)
        assert result.extension == "fin"

    def test_crlf_line_endings(self, messages):
        formatter = FinFormatter(FormatConfig(line_ending=LineEnding.CRLF))
        result = formatter.format_batch(messages)

        assert result.payload == "\r\n\r\n".join(crlf(m) for m in messages)
        assert "\n" not in result.payload.replace("\r\n", "")

    def test_header_and_trailer(self, messages):
        config = FormatConfig(include_batch_header=True, include_batch_trailer=True)
        payload = FinFormatter(config).format_batch(messages).payload

        assert payload.startswith("// SWIFT FIN Format Batch\n// Generated: ")
        assert "// Messages: 3\n" in payload
        assert "// Processing time: " in payload
        assert payload.endswith("\n\n// End of batch - 3 messages processed")
        assert extract(payload) == [m.serialize() for m in messages]

    def test_control_character_rejected(self, message_factory):
        message = message_factory(extra_lines=[":70:A\n\x02B"])

        with pytest.raises(FormatError, match="Invalid character in FIN format"):
            FinFormatter().encode_one(message)

    def test_charset_check_can_be_disabled(self, message_factory):
        message = message_factory(extra_lines=[":70:lower case"])
        unit = FinFormatter(FormatConfig(validate_charset=False)).encode_one(message)

        assert ":70:lower case" in unit.as_text()

    def test_encoding_always_checked(self, message_factory):
        message = message_factory(extra_lines=[":70:CAFÉ"])

        with pytest.raises(FormatError, match="ascii"):
            FinFormatter(FormatConfig(validate_charset=False)).encode_one(message)

    def test_network_message_wrapped(self, wrapper, network_message, message):
        result = FinFormatter(wrapper=wrapper).format_batch([network_message, message])

        assert result.payload.startswith("{1:F21CENAIDJ0AXXX0000000001}{4:{177:")
        assert result.stats.wrapped_messages == 1
        assert result.stats.wrap_fallbacks == 0
        assert len(extract(result.payload)) == 2

    def test_wrap_fallback_logged_and_counted(self, wrapper, metrics, caplog):
        message = SwiftMessage({"2": "O103X", "4": "\n:20:X\n:119:NETFMT\n-"})
        formatter = FinFormatter(wrapper=wrapper, metrics=metrics)

        with caplog.at_level(logging.WARNING, logger="swift_wire"):
            result = formatter.format_batch([message])

        assert result.payload == message.serialize()
        assert result.stats.wrap_fallbacks == 1
        assert "fell back" in caplog.text
        assert caplog.records[-1].category is LogCategory.NETWORK_WRAP
        assert metrics.registry.get_sample_value(
            "swift_wire_wrap_fallbacks_total", {"format": "FIN"}
        ) == 1.0

    def test_metrics_recorded(self, messages, message_factory, metrics):
        formatter = FinFormatter(metrics=metrics)
        formatter.format_batch(messages)
        with pytest.raises(FormatError):
            formatter.format_message(message_factory(extra_lines=[":70:bad"]))

        sample = metrics.registry.get_sample_value
        assert sample("swift_wire_messages_encoded_total", {"format": "FIN", "status": "success"}) == 3.0
        assert sample("swift_wire_messages_encoded_total", {"format": "FIN", "status": "failure"}) == 1.0
        assert sample("swift_wire_batch_bytes_count", {"format": "FIN"}) == 1.0


@pytest.mark.unit
class TestRjeFormatter:
    """Tests for RJE output."""

    def test_delimiters_between_messages_only(self, messages):
        result = RjeFormatter().format_batch(messages)

        assert result.payload == "$".join(crlf(m) for m in messages)
        assert result.payload.count("$") == len(messages) - 1
        assert not result.payload.endswith("$")
        assert result.stats.byte_size == len(result.payload)

    def test_round_trip(self, messages):
        payload = RjeFormatter().format_batch(messages).payload

        assert extract(payload) == [crlf(m) for m in messages]

    def test_single_message_has_no_delimiter(self, message):
        assert "$" not in RjeFormatter().format_batch([message]).payload

    def test_transliteration(self, message_factory):
        message = message_factory(extra_lines=[":70:CAFÉ MÜLLER café"])
        unit = RjeFormatter().encode_one(message)

        assert ":70:CAFE MULLER cafe" in unit.as_text()
        assert unit.as_bytes().decode("ascii")

    def test_transliterate_helper(self):
        assert transliterate("Zürich ß Ñ 中") == "Zurich s N ?"

    def test_delimiter_inside_message_rejected(self, message_factory):
        with pytest.raises(FormatError, match="batch delimiter"):
            RjeFormatter().encode_one(message_factory(extra_lines=[":70:USD$100"]))

    def test_custom_delimiter(self, messages):
        formatter = RjeFormatter(FormatConfig(batch_delimiter="#", line_ending=LineEnding.CRLF))
        payload = formatter.format_batch(messages).payload

        assert payload.count("#") == 2


@pytest.mark.unit
class TestDosPccFormatter:
    """Tests for DOS-PCC sector framing."""

    def test_single_frame(self, message):
        unit = DosPccFormatter().encode_one(message)
        data = unit.as_bytes()
        text = crlf(message).encode("ascii")

        assert unit.representation is Representation.BINARY
        assert len(data) == 512
        assert data[0] == 0x01
        assert data[1 : 1 + len(text)] == text
        assert data[1 + len(text)] == 0x03
        assert set(data[2 + len(text) :]) == {0}
        assert unit.padding_bytes == 512 - len(text) - 2

    def test_batch_is_sector_aligned(self, messages):
        result = DosPccFormatter().format_batch(messages)
        data = result.as_bytes()

        assert isinstance(result.payload, bytes)
        assert len(data) % 512 == 0
        assert [data[i * 512] for i in range(3)] == [0x01, 0x01, 0x01]
        assert result.stats.sector_count == 3
        assert result.stats.byte_size == 1536
        framed = sum(len(crlf(m)) + 2 for m in messages)
        assert result.stats.padding_bytes == 1536 - framed
        assert result.extension == "pcc"

    def test_large_frame_spans_two_sectors(self, message_factory):
        filler_base = message_factory(extra_lines=[":79:"])
        overhead = len(crlf(filler_base))
        big = message_factory(extra_lines=[":79:" + "A" * (598 - overhead)])
        assert len(crlf(big)) == 598

        data = DosPccFormatter().format_batch([big, filler_base]).as_bytes()

        assert data[599] == 0x03
        assert set(data[600:1024]) == {0}
        assert data[1024] == 0x01
        assert len(data) == 1536

    def test_round_trip(self, messages):
        data = DosPccFormatter().format_batch(messages).as_bytes()

        assert extract(data) == [crlf(m) for m in messages]

    def test_custom_markers(self, message):
        config = FormatConfig(start_marker=0x02, end_marker=0x04, padding_byte=0x20, sector_size=256)
        data = DosPccFormatter(config).encode_one(message).as_bytes()

        assert data[0] == 0x02
        assert len(data) % 256 == 0
        assert data.rstrip(b" ").endswith(b"\x04")

    @pytest.mark.parametrize(
        "overrides,match",
        [
            ({"sector_size": 0}, "Invalid sector size"),
            ({"start_marker": 300}, "Invalid start marker"),
            ({"padding_byte": -1}, "Invalid padding byte"),
            ({"start_marker": 3}, "cannot be the same"),
        ],
    )
    def test_invalid_config(self, message, overrides, match):
        with pytest.raises(FormatError, match=match):
            DosPccFormatter(FormatConfig(**overrides)).encode_one(message)

    def test_marker_inside_message_rejected(self, message_factory):
        with pytest.raises(FormatError, match="frame marker"):
            DosPccFormatter().encode_one(message_factory(extra_lines=[":70:A\x03B"]))

    def test_hex_dump_output(self, message):
        formatter = DosPccFormatter(FormatConfig(hex_debug=True, line_ending=LineEnding.CRLF))
        unit = formatter.encode_one(message)

        assert unit.representation is Representation.HEX_DUMP
        assert unit.as_text().startswith("\n// Sector 0 (offset 0x0000)\n0000: 01 7B 31 3A ")
        assert unit.file_bytes() == unit.as_text().encode("ascii")
        with pytest.raises(FormatError, match="hex dump"):
            unit.as_bytes()

    def test_hex_dump_batch(self, messages):
        formatter = DosPccFormatter(FormatConfig(hex_debug=True, line_ending=LineEnding.CRLF))
        result = formatter.format_batch(messages)

        assert result.representation is Representation.HEX_DUMP
        assert "// Sector 2 (offset 0x0400)" in result.as_text()
        assert result.stats.byte_size == 1536

    def test_hex_dump_helper(self):
        dump = hex_dump(b"\x01AB\x03" + b"\x00" * 12 + b"Z", sector_size=16)

        assert dump.splitlines()[2].startswith("0000: 01 41 42 03 00")
        assert "|.AB.............|" in dump
        assert "// Sector 1 (offset 0x0010)" in dump

    def test_sectors_needed(self):
        assert sectors_needed(1, 512) == 1
        assert sectors_needed(512, 512) == 1
        assert sectors_needed(600, 512) == 2


@pytest.mark.unit
class TestFormatterRegistry:
    """Tests for the registry and factory."""

    def test_supported_formats(self):
        assert supported_formats() == [OutputFormat.FIN, OutputFormat.RJE, OutputFormat.DOS_PCC]

    @pytest.mark.parametrize(
        "name,formatter_class",
        [("fin", FinFormatter), ("RJE", RjeFormatter), ("dos-pcc", DosPccFormatter)],
    )
    def test_create_by_name(self, name, formatter_class):
        assert isinstance(create_formatter(name), formatter_class)

    def test_unknown_format(self):
        with pytest.raises(FormatError, match="Unknown output format"):
            resolve_format("XML")

    def test_defaults_per_format(self):
        assert create_formatter("fin").config.line_ending is LineEnding.LF
        assert create_formatter("rje").config.line_ending is LineEnding.CRLF
        assert create_formatter("pcc").config.line_ending is LineEnding.CRLF

    def test_create_from_full_config(self):
        config = Config(max_batch_size=5)
        config.network.lt_address = "BANKDEFFAXXX"
        formatter = create_formatter(OutputFormat.DOS_PCC, config)

        assert formatter.config is config.dos_pcc
        assert formatter.max_batch_size == 5
        assert formatter.wrapper.lt_address == "BANKDEFFAXXX"

    def test_create_from_format_config(self):
        section = FormatConfig(sector_size=128)
        formatter = create_formatter(OutputFormat.DOS_PCC, section)

        assert formatter.sector_size == 128
