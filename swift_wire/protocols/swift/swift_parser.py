"""
SWIFT Message Parser

Parses raw FIN text (as found in encoded files) back into SwiftMessage
objects, optionally removing the network-delivered envelope.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from swift_wire.core.exceptions import SwiftParseError
from swift_wire.protocols.swift.block_extraction import (
    BlockExtraction,
    ExtractionStatus,
    iter_blocks,
)
from swift_wire.protocols.swift.swift_codes import BLOCK_ORDER, SwiftBlockType
from swift_wire.protocols.swift.swift_message import SwiftMessage

logger = logging.getLogger(__name__)

# Service id 21 in block 1 marks the network session header.
NETWORK_HEADER_PREFIX = "F21"

REQUIRED_BLOCKS = (
    SwiftBlockType.BASIC_HEADER,
    SwiftBlockType.APPLICATION_HEADER,
    SwiftBlockType.TEXT,
)


@dataclass
class ParsedMessage:
    """A parsed message together with what the parser noticed on the way."""

    message: SwiftMessage
    raw_message: str = ""
    network_wrapped: bool = False
    session_number: Optional[str] = None
    parse_errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.parse_errors


class SwiftParser:
    """
    Parser for SWIFT MT messages.

    Handles:
    - Top-level block extraction with nested braces
    - Detection of the network session header and info block
    - Required block checks (1, 2 and 4)
    """

    def __init__(self, strict: bool = True, unwrap_network: bool = False):
        """
        Initialize parser.

        Args:
            strict: If True, raise SwiftParseError instead of recording errors
            unwrap_network: If True, drop the network envelope of wrapped messages
        """
        self.strict = strict
        self.unwrap_network = unwrap_network

    def parse(self, raw_message: str) -> ParsedMessage:
        """
        Parse a SWIFT message from raw text.

        Args:
            raw_message: Raw SWIFT message text

        Returns:
            ParsedMessage holding the SwiftMessage and any recorded errors

        Raises:
            SwiftParseError: If parsing fails in strict mode
        """
        if not raw_message or not raw_message.strip():
            raise SwiftParseError("Empty message", 0, raw_message or "")

        # Normalize line endings
        text = raw_message.replace("\r\n", "\n").replace("\r", "\n")

        errors: List[str] = []
        blocks = list(iter_blocks(text))

        if blocks and blocks[-1].status is ExtractionStatus.MALFORMED:
            malformed = blocks.pop()
            self._record(
                errors, f"Unclosed block {malformed.block_id}", malformed.start, raw_message
            )

        session_number = None
        wrapped = self._is_network_wrapped(blocks)
        if wrapped and self.unwrap_network:
            header, blocks = self._strip_envelope(blocks)
            session_number = header.content[len(NETWORK_HEADER_PREFIX) + 12 :]

        contents: Dict[str, str] = {}
        for block in blocks:
            if block.block_id not in BLOCK_ORDER:
                self._record(
                    errors, f"Unknown block {block.block_id}", block.start, raw_message
                )
                continue
            if block.block_id in contents:
                self._record(
                    errors, f"Duplicate block {block.block_id}", block.start, raw_message
                )
                continue
            contents[block.block_id] = block.content

        for required in REQUIRED_BLOCKS:
            if not contents.get(required.number):
                self._record(
                    errors,
                    f"Missing {required.description.lower()} (block {required.number})",
                    0,
                    raw_message,
                )

        if errors:
            logger.debug("Parsed message with %d error(s): %s", len(errors), errors)

        return ParsedMessage(
            message=SwiftMessage(contents),
            raw_message=raw_message,
            network_wrapped=wrapped,
            session_number=session_number,
            parse_errors=errors,
        )

    def _record(self, errors: List[str], error: str, position: int, raw: str) -> None:
        if self.strict:
            raise SwiftParseError(error, position, raw)
        errors.append(error)

    def _is_network_wrapped(self, blocks: List[BlockExtraction]) -> bool:
        headers = [b for b in blocks if b.block_id == SwiftBlockType.BASIC_HEADER.number]
        return (
            len(headers) >= 2
            and blocks[0] is headers[0]
            and headers[0].content.startswith(NETWORK_HEADER_PREFIX)
        )

    def _strip_envelope(self, blocks: List[BlockExtraction]):
        """Drop the session header and the network info block before the application header."""
        header = blocks[0]
        rest = blocks[1:]
        app_index = next(
            i for i, b in enumerate(rest) if b.block_id == SwiftBlockType.BASIC_HEADER.number
        )
        return header, rest[app_index:]
