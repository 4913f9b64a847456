"""
swift-wire - Wire Format Encoders

FIN (plain text), RJE (delimiter-batched text) and DOS-PCC (sector-padded
binary) encoders sharing one batch lifecycle.
"""

from swift_wire.formatters.base import (
    BatchContext,
    BatchResult,
    BatchStats,
    EncodedUnit,
    MessageFormatter,
    Representation,
    normalize_line_endings,
)
from swift_wire.formatters.fin import FinFormatter
from swift_wire.formatters.rje import RjeFormatter, transliterate
from swift_wire.formatters.dos_pcc import DosPccFormatter, hex_dump, sectors_needed
from swift_wire.formatters.registry import (
    FORMATTER_REGISTRY,
    create_formatter,
    resolve_format,
    supported_formats,
)

__all__ = [
    "BatchContext",
    "BatchResult",
    "BatchStats",
    "EncodedUnit",
    "MessageFormatter",
    "Representation",
    "normalize_line_endings",
    "FinFormatter",
    "RjeFormatter",
    "transliterate",
    "DosPccFormatter",
    "hex_dump",
    "sectors_needed",
    "FORMATTER_REGISTRY",
    "create_formatter",
    "resolve_format",
    "supported_formats",
]
