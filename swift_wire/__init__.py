"""
swift-wire - SWIFT MT Wire Format Toolkit

Encodes already-built SWIFT MT messages into the FIN, RJE and DOS-PCC file
formats (with optional network-delivered envelopes) and verifies that
processed files still hold exactly the messages they started with.
"""

__version__ = "1.0.0"

from swift_wire.core.config import Config, FormatConfig, ValidatorConfig, load_config
from swift_wire.core.exceptions import (
    ExtractionError,
    FormatError,
    SwiftParseError,
    SwiftWireException,
)
from swift_wire.protocols.swift import (
    NetworkWrapper,
    OutputFormat,
    SwiftMessage,
    SwiftParser,
)
from swift_wire.formatters import (
    BatchResult,
    DosPccFormatter,
    FinFormatter,
    RjeFormatter,
    create_formatter,
)
from swift_wire.validation import SwiftFileValidator, ValidationReport

__all__ = [
    "__version__",
    "Config",
    "FormatConfig",
    "ValidatorConfig",
    "load_config",
    "ExtractionError",
    "FormatError",
    "SwiftParseError",
    "SwiftWireException",
    "NetworkWrapper",
    "OutputFormat",
    "SwiftMessage",
    "SwiftParser",
    "BatchResult",
    "DosPccFormatter",
    "FinFormatter",
    "RjeFormatter",
    "create_formatter",
    "SwiftFileValidator",
    "ValidationReport",
]
