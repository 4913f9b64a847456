"""
swift-wire - FIN Formatter

Plain-text FIN output. Messages are passed through as serialized (after
network wrapping when marked) and batched with one blank line between
them. The SWIFT FIN character allow-list is enforced strictly.
"""

from datetime import datetime
from typing import List

from swift_wire.formatters.base import BatchContext, EncodedUnit, MessageFormatter
from swift_wire.protocols.swift.swift_codes import FIN_ALLOWED_CHARACTERS, OutputFormat


class FinFormatter(MessageFormatter):
    """Encoder for the SWIFT FIN text format."""

    output_format = OutputFormat.FIN

    def _validate_content(self, text: str) -> None:
        if not self.config.validate_charset:
            return

        for position, char in enumerate(text):
            if char not in FIN_ALLOWED_CHARACTERS:
                raise self._error(
                    f"Invalid character in FIN format: {char!r} "
                    f"(0x{ord(char):02X}) at position {position}",
                    char,
                )

    def append_to_batch(
        self, buffer: List[str], unit: EncodedUnit, index: int, context: BatchContext
    ) -> None:
        if index > 0:
            separator = self.line_ending * 2
            buffer.append(separator)
            context.byte_size += len(separator)

        buffer.append(unit.as_text())
        context.byte_size += unit.size
        context.current_index = index + 1

    def finalize_batch(self, buffer: List[str], context: BatchContext) -> str:
        eol = self.line_ending
        parts = []

        if self.config.include_batch_header:
            parts.extend(
                [
                    "// SWIFT FIN Format Batch" + eol,
                    f"// Generated: {datetime.now().isoformat(timespec='seconds')}" + eol,
                    f"// Messages: {context.total_messages}" + eol,
                    f"// Processing time: {context.elapsed_ms:.0f}ms" + eol,
                    eol,
                ]
            )

        parts.extend(buffer)

        if self.config.include_batch_trailer:
            parts.append(
                eol * 2 + f"// End of batch - {context.total_messages} messages processed"
            )

        content = "".join(parts)
        context.byte_size = len(content.encode(self.config.encoding))
        return content
