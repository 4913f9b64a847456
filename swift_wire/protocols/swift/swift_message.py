"""
SWIFT Message Data Structures

Immutable representation of an already-built SWIFT MT message:
- Ordered block identifiers (1-5, S) mapped to raw block content
- Derived message type and network-formatting marker
- Canonical serialization
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from swift_wire.protocols.swift.swift_codes import (
    BLOCK_ORDER,
    NETWORK_MARKER_LINE,
    MessageDirection,
    SwiftBlockType,
)

# Block 2 content starts with the direction flag and the 3-digit type.
MESSAGE_TYPE_PATTERN = re.compile(r"^([IO])(\d{3})")


@dataclass(frozen=True)
class SwiftMessage:
    """
    Complete SWIFT MT message as an ordered set of labeled blocks.

    ``blocks`` maps a block identifier to the text between ``{id:`` and the
    matching ``}``. The text block content carries its own line breaks and
    the trailing ``-``, e.g. ``"\\n:20:REF\\n-"``.
    """

    blocks: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        unknown = [block_id for block_id in self.blocks if block_id not in BLOCK_ORDER]
        if unknown:
            raise ValueError(
                f"Unknown block identifier(s): {', '.join(sorted(map(str, unknown)))}"
            )

        ordered = {
            block_id: self.blocks[block_id]
            for block_id in BLOCK_ORDER
            if self.blocks.get(block_id) is not None
        }
        object.__setattr__(self, "blocks", MappingProxyType(ordered))

    @classmethod
    def from_parts(
        cls,
        basic_header: str,
        application_header: str,
        text: str,
        user_header: Optional[str] = None,
        trailer: Optional[str] = None,
        system: Optional[str] = None,
    ) -> "SwiftMessage":
        """Build a message from individual block contents."""
        return cls(
            {
                SwiftBlockType.BASIC_HEADER.number: basic_header,
                SwiftBlockType.APPLICATION_HEADER.number: application_header,
                SwiftBlockType.USER_HEADER.number: user_header,
                SwiftBlockType.TEXT.number: text,
                SwiftBlockType.TRAILER.number: trailer,
                SwiftBlockType.SYSTEM.number: system,
            }
        )

    def block(self, block_id: str) -> Optional[str]:
        """Get raw content of one block, or None when absent."""
        return self.blocks.get(block_id)

    @property
    def text_block(self) -> str:
        return self.blocks.get(SwiftBlockType.TEXT.number, "")

    @property
    def message_type_code(self) -> Optional[str]:
        """3-digit message type from block 2 (e.g. '103'), or None."""
        application_header = self.blocks.get(SwiftBlockType.APPLICATION_HEADER.number)
        if not application_header:
            return None
        match = MESSAGE_TYPE_PATTERN.match(application_header)
        return match.group(2) if match else None

    @property
    def direction(self) -> Optional[MessageDirection]:
        application_header = self.blocks.get(SwiftBlockType.APPLICATION_HEADER.number)
        if not application_header:
            return None
        match = MESSAGE_TYPE_PATTERN.match(application_header)
        return MessageDirection(match.group(1)) if match else None

    @property
    def is_formattable(self) -> bool:
        return bool(self.text_block.strip())

    @property
    def requires_network_formatting(self) -> bool:
        return self.has_network_marker()

    def has_network_marker(self) -> bool:
        """True when the text block holds a line that is exactly ``:119:NETFMT``."""
        return any(
            line.strip() == NETWORK_MARKER_LINE
            for line in self.text_block.splitlines()
        )

    def without_network_marker(self) -> "SwiftMessage":
        """Return a copy whose text block no longer carries the marker line."""
        if not self.has_network_marker():
            return self

        lines = self.text_block.splitlines(keepends=True)
        text = "".join(line for line in lines if line.strip() != NETWORK_MARKER_LINE)

        blocks = dict(self.blocks)
        blocks[SwiftBlockType.TEXT.number] = text
        return SwiftMessage(blocks)

    def serialize(self) -> str:
        """Concatenate all present blocks in ascending identifier order."""
        return "".join(
            f"{{{block_id}:{content}}}" for block_id, content in self.blocks.items()
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "message_type": self.message_type_code,
            "requires_network_formatting": self.requires_network_formatting,
            "blocks": dict(self.blocks),
        }

    def __str__(self) -> str:
        return self.serialize()

