"""
swift-wire - Custom Exceptions

This module defines the exception hierarchy shared by the encoders,
the block extraction primitive and the round-trip validator.
"""

from typing import Any, Dict, Optional


class SwiftWireException(Exception):
    """Base exception for all swift-wire errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "SWIFT_WIRE_ERROR"
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (Code: {self.error_code}, Context: {self.context})"
        return f"{self.message} (Code: {self.error_code})"


class ConfigurationException(SwiftWireException):
    """Exception raised for configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(
            message,
            error_code="CONFIG_ERROR",
            context={"config_key": config_key} if config_key else {},
        )


class FormatError(SwiftWireException):
    """
    Exception raised when a message cannot be validated or encoded.

    Always aborts the current encode or batch operation. The output format
    and the offending value travel with the exception so the message can be
    shown to a user as-is.
    """

    def __init__(
        self,
        message: str,
        output_format: Optional[str] = None,
        offending_value: Optional[Any] = None,
        cause: Optional[Exception] = None,
    ):
        context: Dict[str, Any] = {}
        if output_format:
            context["format"] = output_format
        if offending_value is not None:
            context["offending_value"] = offending_value

        super().__init__(message, error_code="FORMAT_ERROR", context=context)
        self.output_format = output_format
        self.offending_value = offending_value
        self.cause = cause


class ExtractionError(SwiftWireException):
    """Exception raised when a block cannot be extracted from message text."""

    def __init__(
        self,
        message: str,
        block_id: Optional[str] = None,
        status: Optional[str] = None,
    ):
        context = {}
        if block_id:
            context["block_id"] = block_id
        if status:
            context["status"] = status

        super().__init__(message, error_code="EXTRACTION_ERROR", context=context)
        self.block_id = block_id
        self.status = status


class SwiftParseError(SwiftWireException):
    """Exception raised when raw message text cannot be parsed."""

    def __init__(self, message: str, position: int = 0, raw_content: str = ""):
        super().__init__(
            message,
            error_code="PARSE_ERROR",
            context={"position": position} if position else {},
        )
        self.position = position
        self.raw_content = raw_content
