"""
swift-wire - DOS-PCC Formatter

Binary, sector-padded output. Each message is framed as

    <start marker> <message bytes> <end marker> <padding ...>

and padded to a whole number of sectors. Every frame of a batch starts on
a sector boundary and the finished batch is a whole number of sectors.
"""

import logging
from dataclasses import replace
from typing import Optional, Tuple

from swift_wire.core.structured_logging import LogCategory
from swift_wire.formatters.base import (
    BatchContext,
    EncodedUnit,
    MessageFormatter,
    Payload,
    Representation,
)
from swift_wire.protocols.swift.network_wrapper import WrapResult
from swift_wire.protocols.swift.swift_codes import MAX_SECTOR_SIZE, OutputFormat

logger = logging.getLogger(__name__)

HEX_DUMP_ROW = 16


def sectors_needed(size: int, sector_size: int) -> int:
    """Ceiling division of ``size`` by ``sector_size``."""
    return (size + sector_size - 1) // sector_size


def hex_dump(data: bytes, sector_size: int) -> str:
    """
    Render ``data`` as a hex dump with an ASCII gutter.

    16 bytes per row, each row prefixed by its offset; a comment line marks
    every row that starts a new sector.
    """
    lines = []
    for offset in range(0, len(data), HEX_DUMP_ROW):
        if offset % sector_size == 0:
            lines.append(f"\n// Sector {offset // sector_size} (offset 0x{offset:04X})\n")

        row = data[offset : offset + HEX_DUMP_ROW]
        hex_part = "".join(f"{byte:02X} " for byte in row).ljust(HEX_DUMP_ROW * 3)
        ascii_part = "".join(chr(byte) if 32 <= byte <= 126 else "." for byte in row)
        lines.append(f"{offset:04X}: {hex_part} |{ascii_part.ljust(HEX_DUMP_ROW)}|\n")

    return "".join(lines)


class DosPccFormatter(MessageFormatter):
    """Encoder for DOS-PCC sector files."""

    output_format = OutputFormat.DOS_PCC

    @property
    def sector_size(self) -> int:
        return self.config.sector_size

    def _validate_config(self) -> None:
        config = self.config
        if not 1 <= config.sector_size <= MAX_SECTOR_SIZE:
            raise self._error(
                f"Invalid sector size: {config.sector_size} (must be 1-{MAX_SECTOR_SIZE})",
                config.sector_size,
            )
        if not 0 <= config.start_marker <= 255:
            raise self._error(
                f"Invalid start marker: {config.start_marker} (must be 0-255)",
                config.start_marker,
            )
        if not 0 <= config.end_marker <= 255:
            raise self._error(
                f"Invalid end marker: {config.end_marker} (must be 0-255)",
                config.end_marker,
            )
        if not 0 <= config.padding_byte <= 255:
            raise self._error(
                f"Invalid padding byte: {config.padding_byte} (must be 0-255)",
                config.padding_byte,
            )
        if config.start_marker == config.end_marker:
            raise self._error(
                "Start and end markers cannot be the same", config.start_marker
            )

    def _validate_content(self, text: str) -> None:
        for marker in (self.config.start_marker, self.config.end_marker):
            if chr(marker) in text:
                raise self._error(
                    f"Message contains frame marker byte 0x{marker:02X}", marker
                )

    def _build_unit(self, text: str, wrap: Optional[WrapResult]) -> EncodedUnit:
        config = self.config
        framed = (
            bytes([config.start_marker])
            + text.encode(config.encoding)
            + bytes([config.end_marker])
        )
        total = sectors_needed(len(framed), self.sector_size) * self.sector_size
        padding = total - len(framed)

        logger.debug(
            "DOS-PCC frame created: %d bytes in %d sectors (content: %d bytes, padding: %d bytes)",
            total,
            total // self.sector_size,
            len(framed),
            padding,
        )
        return EncodedUnit(
            payload=framed + bytes([config.padding_byte]) * padding,
            representation=Representation.BINARY,
            encoding=config.encoding,
            wrapped=bool(wrap and wrap.wrapped),
            wrap_fallback=bool(wrap and wrap.is_fallback),
            padding_bytes=padding,
        )

    def _present(self, unit: EncodedUnit) -> EncodedUnit:
        if not self.config.hex_debug:
            return unit
        return replace(
            unit,
            payload=hex_dump(unit.payload, self.sector_size),
            representation=Representation.HEX_DUMP,
        )

    def _present_batch(self, payload: Payload) -> Tuple[Payload, Representation]:
        if self.config.hex_debug:
            return hex_dump(payload, self.sector_size), Representation.HEX_DUMP
        return payload, Representation.BINARY

    def _new_buffer(self) -> bytearray:
        return bytearray()

    def _pad_to_boundary(self, buffer: bytearray, context: BatchContext) -> int:
        remainder = len(buffer) % self.sector_size
        if remainder == 0:
            return 0
        padding = self.sector_size - remainder
        buffer.extend(bytes([self.config.padding_byte]) * padding)
        context.padding_bytes += padding
        return padding

    def append_to_batch(
        self, buffer: bytearray, unit: EncodedUnit, index: int, context: BatchContext
    ) -> None:
        if index > 0:
            self._pad_to_boundary(buffer, context)

        buffer.extend(unit.as_bytes())
        context.padding_bytes += unit.padding_bytes
        context.byte_size = len(buffer)
        context.sector_count = sectors_needed(len(buffer), self.sector_size)
        context.current_index = index + 1

        logger.debug(
            "Message %d added: batch size now %d bytes (%d sectors)",
            index + 1,
            context.byte_size,
            context.sector_count,
        )

    def finalize_batch(self, buffer: bytearray, context: BatchContext) -> bytes:
        padding = self._pad_to_boundary(buffer, context)
        context.byte_size = len(buffer)
        context.sector_count = len(buffer) // self.sector_size

        logger.info(
            "DOS-PCC batch finalized: %d bytes in %d complete sectors (added %d padding bytes)",
            context.byte_size,
            context.sector_count,
            padding,
            extra={"category": LogCategory.ENCODING},
        )
        return bytes(buffer)
