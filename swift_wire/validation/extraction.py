"""
swift-wire - Message Extraction

Recovers individual message texts from encoded files. The wire format is
detected from the content:

- batch delimiter present: RJE, split on the delimiter
- start and end marker bytes present: DOS-PCC, sector-aware frame scan
- otherwise: universal scan for ``{1:`` ... ``-}`` spans (FIN and plain text)

Content is handled as latin-1 text so every byte maps to one character.
"""

import logging
from enum import Enum
from typing import List, Optional

from swift_wire.core.config import ValidatorConfig
from swift_wire.protocols.swift.block_extraction import find_block_end
from swift_wire.protocols.swift.swift_codes import BODY_TERMINATOR

logger = logging.getLogger(__name__)

MESSAGE_START = "{1:"
NETWORK_SESSION_START = "{1:F21"
NETWORK_INFO_START = "{4:{177:"

# Byte-transparent decoding for files that may hold binary frames.
FILE_ENCODING = "latin-1"


class InputFormat(Enum):
    """Wire format detected in a file."""

    RJE = "RJE"
    DOS_PCC = "DOS-PCC"
    UNIVERSAL = "UNIVERSAL"


def decode_content(data: bytes) -> str:
    return data.decode(FILE_ENCODING)


def detect_line_ending(content: str) -> str:
    """Line-ending sequence used by ``content`` (LF when there is none)."""
    if "\r\n" in content:
        return "\r\n"
    if "\r" in content:
        return "\r"
    return "\n"


class MessageExtractor:
    """Splits file content into message texts."""

    def __init__(self, config: Optional[ValidatorConfig] = None):
        self.config = config or ValidatorConfig()

    @property
    def start_marker(self) -> str:
        return chr(self.config.start_marker)

    @property
    def end_marker(self) -> str:
        return chr(self.config.end_marker)

    def detect_format(self, content: str) -> InputFormat:
        if self.config.rje_delimiter in content:
            return InputFormat.RJE
        if self.start_marker in content and self.end_marker in content:
            return InputFormat.DOS_PCC
        return InputFormat.UNIVERSAL

    def extract(self, content: str, input_format: Optional[InputFormat] = None) -> List[str]:
        """Return the messages found in ``content``, in file order."""
        input_format = input_format or self.detect_format(content)

        if input_format is InputFormat.RJE:
            messages = self.extract_rje(content)
        elif input_format is InputFormat.DOS_PCC:
            messages = self.extract_dos_pcc(content)
        else:
            messages = self.extract_universal(content)

        logger.debug("Extracted %d messages (%s)", len(messages), input_format.value)
        return messages

    def extract_rje(self, content: str) -> List[str]:
        messages = []
        for part in content.split(self.config.rje_delimiter):
            trimmed = part.strip()
            if trimmed.startswith(MESSAGE_START):
                messages.append(trimmed)
        return messages

    def extract_dos_pcc(self, content: str) -> List[str]:
        """
        Scan for start markers; the end marker must follow within the
        look-ahead window. After each frame the scan resumes at the next
        sector boundary.
        """
        sector_size = self.config.sector_size
        window = sector_size * self.config.lookahead_sectors
        messages = []

        pos = content.find(self.start_marker)
        while pos != -1:
            limit = min(len(content), pos + window)
            end = content.find(self.end_marker, pos + 1, limit)
            if end == -1:
                pos = content.find(self.start_marker, pos + 1)
                continue

            body = content[pos + 1 : end].strip()
            if body.startswith(MESSAGE_START):
                messages.append(body)
            else:
                logger.debug("Skipping DOS-PCC frame at offset %d without block 1", pos)

            next_sector = (end // sector_size + 1) * sector_size
            pos = content.find(self.start_marker, next_sector)

        return messages

    def extract_universal(self, content: str) -> List[str]:
        """
        Each message runs from ``{1:`` through the text block terminator
        ``-}`` and the blocks directly attached to it. A network-delivered
        message therefore keeps both of its ``{1:`` blocks. A message whose
        terminator is missing ends where the next ``{1:`` starts.
        """
        messages = []

        start = content.find(MESSAGE_START)
        while start != -1:
            header_end = self._end_of_leading_header(content, start)
            next_start = content.find(MESSAGE_START, header_end)
            terminator = content.find(BODY_TERMINATOR, header_end)

            if terminator != -1 and (next_start == -1 or terminator < next_start):
                end = self._end_of_trailing_blocks(content, terminator + len(BODY_TERMINATOR))
                next_start = content.find(MESSAGE_START, end)
            else:
                end = next_start if next_start != -1 else len(content)

            span = content[start:end].strip()
            if span.startswith(MESSAGE_START):
                messages.append(span)
            start = next_start

        return messages

    def _end_of_leading_header(self, content: str, start: int) -> int:
        """
        Index just past the basic header at ``start``. For an F21 session
        header followed by the network info block, this is past the
        delivered message's own basic header instead.
        """
        end = find_block_end(content, start)
        if end == -1:
            return start + len(MESSAGE_START)

        if not (
            content.startswith(NETWORK_SESSION_START, start)
            and content.startswith(NETWORK_INFO_START, end)
        ):
            return end

        info_end = find_block_end(content, end)
        if info_end == -1 or not content.startswith(MESSAGE_START, info_end):
            return end
        inner_end = find_block_end(content, info_end)
        return inner_end if inner_end != -1 else info_end + len(MESSAGE_START)

    def _end_of_trailing_blocks(self, content: str, pos: int) -> int:
        while pos < len(content) and content[pos] == "{":
            if content.startswith(MESSAGE_START, pos):
                break
            end = find_block_end(content, pos)
            if end == -1:
                break
            pos = end
        return pos
