"""
SWIFT MT Message Protocol Support

Supports:
- Immutable block-keyed message model
- Balanced-bracket block extraction
- Network-delivered envelope synthesis (F21 session header)
- Raw text parsing back into messages
"""

from swift_wire.protocols.swift.swift_codes import (
    SwiftBlockType,
    MessageDirection,
    OutputFormat,
    NETWORK_MARKER_LINE,
)
from swift_wire.protocols.swift.swift_message import SwiftMessage
from swift_wire.protocols.swift.block_extraction import (
    BlockExtraction,
    ExtractionStatus,
    extract_block,
    require_block,
    iter_blocks,
)
from swift_wire.protocols.swift.network_wrapper import (
    NetworkWrapper,
    SessionCounter,
    WrapResult,
)
from swift_wire.protocols.swift.swift_parser import ParsedMessage, SwiftParser

__all__ = [
    # Codes and enums
    "SwiftBlockType",
    "MessageDirection",
    "OutputFormat",
    "NETWORK_MARKER_LINE",
    # Message model
    "SwiftMessage",
    # Block extraction
    "BlockExtraction",
    "ExtractionStatus",
    "extract_block",
    "require_block",
    "iter_blocks",
    # Network envelope
    "NetworkWrapper",
    "SessionCounter",
    "WrapResult",
    # Parser
    "ParsedMessage",
    "SwiftParser",
]
