"""
swift-wire - RJE Formatter

Remote Job Entry batches: FIN messages separated by a delimiter character
(``$`` by default) placed between consecutive messages only. Output is
ASCII; characters above code point 127 are transliterated instead of
rejected.
"""

from typing import List

from swift_wire.formatters.base import BatchContext, EncodedUnit, MessageFormatter
from swift_wire.protocols.swift.swift_codes import (
    RJE_REPLACEMENT_CHARACTER,
    RJE_TRANSLITERATION,
    OutputFormat,
)


def transliterate(text: str) -> str:
    """Replace every non-ASCII character with its closest ASCII equivalent or '?'."""
    return "".join(
        char if ord(char) <= 127 else RJE_TRANSLITERATION.get(char, RJE_REPLACEMENT_CHARACTER)
        for char in text
    )


class RjeFormatter(MessageFormatter):
    """Encoder for delimiter-batched RJE files."""

    output_format = OutputFormat.RJE

    @property
    def delimiter(self) -> str:
        return self.config.batch_delimiter

    def _prepare_text(self, text: str) -> str:
        return transliterate(text)

    def _validate_content(self, text: str) -> None:
        # A delimiter inside a message would split it on extraction.
        if self.delimiter in text:
            raise self._error(
                f"Message contains the RJE batch delimiter {self.delimiter!r} "
                f"at position {text.index(self.delimiter)}",
                self.delimiter,
            )

    def append_to_batch(
        self, buffer: List[str], unit: EncodedUnit, index: int, context: BatchContext
    ) -> None:
        if index > 0:
            buffer.append(self.delimiter)
            context.byte_size += len(self.delimiter.encode(self.config.encoding))

        buffer.append(unit.as_text())
        context.byte_size += unit.size
        context.current_index = index + 1

    def finalize_batch(self, buffer: List[str], context: BatchContext) -> str:
        # Delimiters separate messages; nothing trails the last one.
        return "".join(buffer)
