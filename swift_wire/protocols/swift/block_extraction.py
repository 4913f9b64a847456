"""
Balanced-Bracket Block Extraction

Locates ``{<id>:...}`` blocks in serialized message text by brace-depth
counting, so nested blocks such as ``{3:{108:REF}}`` or the network info
block ``{4:{177:...}{451:0}}`` are returned whole. Shared by the network
wrapper, the parser and the round-trip validator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from swift_wire.core.exceptions import ExtractionError


class ExtractionStatus(Enum):
    """Outcome of a single block lookup."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class BlockExtraction:
    """Result of looking up one block."""

    status: ExtractionStatus
    block_id: str
    text: Optional[str] = None
    start: int = -1
    end: int = -1

    @property
    def found(self) -> bool:
        return self.status is ExtractionStatus.FOUND

    @property
    def content(self) -> Optional[str]:
        """Text between ``{id:`` and the closing brace."""
        if self.text is None:
            return None
        return self.text[len(self.block_id) + 2 : -1]


def find_block_end(text: str, open_index: int) -> int:
    """
    Return the index just past the brace closing the block opened at
    ``open_index``, or -1 when the braces never balance.
    """
    depth = 1
    pos = open_index + 1

    while pos < len(text):
        char = text[pos]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return pos + 1
        pos += 1

    return -1


def extract_block(text: str, block_id: str, start: int = 0) -> BlockExtraction:
    """
    Find the first ``{<block_id>:`` at or after ``start`` and return the
    whole balanced block.
    """
    opener = f"{{{block_id}:"
    begin = text.find(opener, start) if text else -1
    if begin == -1:
        return BlockExtraction(ExtractionStatus.NOT_FOUND, block_id)

    end = find_block_end(text, begin)
    if end == -1:
        return BlockExtraction(ExtractionStatus.MALFORMED, block_id, start=begin)

    return BlockExtraction(
        ExtractionStatus.FOUND, block_id, text[begin:end], start=begin, end=end
    )


def require_block(text: str, block_id: str, start: int = 0) -> str:
    """Like :func:`extract_block` but raises :class:`ExtractionError` unless found."""
    result = extract_block(text, block_id, start)
    if result.status is ExtractionStatus.NOT_FOUND:
        raise ExtractionError(
            f"Block {block_id} not found", block_id=block_id, status=result.status.value
        )
    if result.status is ExtractionStatus.MALFORMED:
        raise ExtractionError(
            f"Block {block_id} starting at offset {result.start} is not closed",
            block_id=block_id,
            status=result.status.value,
        )
    return result.text


def iter_blocks(text: str) -> Iterator[BlockExtraction]:
    """
    Yield the top-level blocks of ``text`` in order.

    Characters outside blocks (line breaks between messages, stray text) are
    skipped. An unclosed block is yielded as ``MALFORMED`` and ends the scan.
    """
    pos = 0

    while pos < len(text):
        begin = text.find("{", pos)
        if begin == -1:
            return

        colon = text.find(":", begin + 1)
        block_id = text[begin + 1 : colon] if colon != -1 else ""
        if not block_id or len(block_id) > 3 or "{" in block_id or "}" in block_id:
            pos = begin + 1
            continue

        end = find_block_end(text, begin)
        if end == -1:
            yield BlockExtraction(ExtractionStatus.MALFORMED, block_id, start=begin)
            return

        yield BlockExtraction(
            ExtractionStatus.FOUND, block_id, text[begin:end], start=begin, end=end
        )
        pos = end
