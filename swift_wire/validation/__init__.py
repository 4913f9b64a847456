"""
swift-wire - Round-Trip Validation

Format-aware message extraction, the directory validator and its report.
"""

from swift_wire.validation.extraction import (
    InputFormat,
    MessageExtractor,
    decode_content,
    detect_line_ending,
)
from swift_wire.validation.report import FileValidationResult, ValidationReport
from swift_wire.validation.file_validator import (
    DOS_PCC_CONTENT_CHECKSUM,
    SwiftFileValidator,
    md5_checksum,
)

__all__ = [
    "InputFormat",
    "MessageExtractor",
    "decode_content",
    "detect_line_ending",
    "FileValidationResult",
    "ValidationReport",
    "DOS_PCC_CONTENT_CHECKSUM",
    "SwiftFileValidator",
    "md5_checksum",
]
