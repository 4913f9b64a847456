"""
swift-wire - Message Formatter Base

Shared lifecycle for the wire-format encoders:

1. ``validate(message)``
2. ``encode_one(message)`` -> EncodedUnit (network-wrapped when marked)
3. ``begin_batch(count)`` -> BatchContext
4. ``append_to_batch(buffer, unit, index, context)``
5. ``finalize_batch(buffer, context)`` -> payload

``format_message`` and ``format_batch`` drive these phases. A batch either
completes or raises FormatError; partial batches are never returned.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from swift_wire.core.config import FormatConfig, LineEnding
from swift_wire.core.exceptions import FormatError
from swift_wire.core.metrics import WireMetrics
from swift_wire.core.structured_logging import LogCategory
from swift_wire.protocols.swift.network_wrapper import NetworkWrapper, WrapResult
from swift_wire.protocols.swift.swift_codes import OutputFormat
from swift_wire.protocols.swift.swift_message import SwiftMessage

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 10000

Payload = Union[str, bytes]


class Representation(Enum):
    """What an encoded payload holds."""

    TEXT = "text"
    BINARY = "binary"
    HEX_DUMP = "hex_dump"


def normalize_line_endings(text: str, line_ending: LineEnding = LineEnding.LF) -> str:
    """Convert CRLF and bare CR to LF, then to the requested style."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if line_ending is LineEnding.CRLF:
        return text.replace("\n", "\r\n")
    return text


class _PayloadAccess:
    """Typed access to a payload that may be text, binary or a hex dump."""

    payload: Payload
    representation: Representation
    encoding: str

    def as_text(self) -> str:
        """Text payload, hex dump, or binary decoded byte-for-byte as latin-1."""
        if self.representation is Representation.BINARY:
            return self.payload.decode("latin-1")
        return self.payload

    def as_bytes(self) -> bytes:
        """Wire bytes of the payload; a hex dump has none."""
        if self.representation is Representation.HEX_DUMP:
            raise FormatError(
                "Cannot extract binary data from hex dump output",
                offending_value=self.representation.value,
            )
        if self.representation is Representation.BINARY:
            return self.payload
        return self.payload.encode(self.encoding)

    def file_bytes(self) -> bytes:
        """Bytes to persist: the wire bytes, or the dump text itself."""
        if self.representation is Representation.HEX_DUMP:
            return self.payload.encode("ascii")
        return self.as_bytes()

    @property
    def size(self) -> int:
        if self.representation is Representation.TEXT:
            return len(self.payload.encode(self.encoding))
        return len(self.payload)


@dataclass(frozen=True)
class EncodedUnit(_PayloadAccess):
    """One encoded message."""

    payload: Payload
    representation: Representation
    encoding: str = "ascii"
    wrapped: bool = False
    wrap_fallback: bool = False
    padding_bytes: int = 0


@dataclass
class BatchStats:
    """Statistics for one completed batch, owned by the caller."""

    message_count: int = 0
    byte_size: int = 0
    sector_count: int = 0
    padding_bytes: int = 0
    wrapped_messages: int = 0
    wrap_fallbacks: int = 0
    elapsed_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BatchContext:
    """Mutable bookkeeping for exactly one ``format_batch`` call."""

    total_messages: int
    current_index: int = 0
    byte_size: int = 0
    sector_count: int = 0
    padding_bytes: int = 0
    wrapped_messages: int = 0
    wrap_fallbacks: int = 0
    started_at: float = field(default_factory=time.perf_counter)

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started_at) * 1000

    def to_stats(self) -> BatchStats:
        return BatchStats(
            message_count=self.total_messages,
            byte_size=self.byte_size,
            sector_count=self.sector_count,
            padding_bytes=self.padding_bytes,
            wrapped_messages=self.wrapped_messages,
            wrap_fallbacks=self.wrap_fallbacks,
            elapsed_ms=self.elapsed_ms,
        )


@dataclass(frozen=True)
class BatchResult(_PayloadAccess):
    """A completed batch and its statistics."""

    payload: Payload
    representation: Representation
    output_format: OutputFormat
    stats: BatchStats
    encoding: str = "ascii"

    @property
    def extension(self) -> str:
        return self.output_format.extension


class MessageFormatter(ABC):
    """Base class for the FIN, RJE and DOS-PCC encoders."""

    output_format: OutputFormat

    def __init__(
        self,
        config: Optional[FormatConfig] = None,
        wrapper: Optional[NetworkWrapper] = None,
        metrics: Optional[WireMetrics] = None,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ):
        self.config = config or FormatConfig.for_format(self.output_format)
        self.wrapper = wrapper or NetworkWrapper()
        self.metrics = metrics
        self.max_batch_size = max_batch_size
        logger.debug(
            "%s formatter initialized with configuration: %s",
            self.output_format.code,
            self.config.to_dict(),
        )

    @property
    def line_ending(self) -> str:
        return self.config.line_ending.sequence

    # ------------------------------------------------------------------
    # Lifecycle phases
    # ------------------------------------------------------------------

    def validate(self, message: Any) -> None:
        """Raise FormatError unless ``message`` can be encoded by this formatter."""
        if message is None:
            raise self._error("SWIFT message cannot be None")
        if not isinstance(message, SwiftMessage):
            raise self._error(
                f"Message must be a SwiftMessage, got: {type(message).__name__}",
                type(message).__name__,
            )
        if message.message_type_code is None:
            raise self._error(
                f"Message type is required for {self.output_format.code} format "
                "(block 2 must start with I or O and a 3-digit type)",
                message.block("2"),
            )
        if not message.is_formattable:
            raise self._error("Message body (block 4) is empty")
        self._validate_config()

    def encode_one(self, message: SwiftMessage) -> EncodedUnit:
        """Validate and encode a single message."""
        return self._present(self._encode_unit(message))

    def begin_batch(self, count: int) -> BatchContext:
        logger.info(
            "Initializing %s batch formatting for %d messages",
            self.output_format.code,
            count,
            extra={"category": LogCategory.ENCODING},
        )
        return BatchContext(total_messages=count)

    @abstractmethod
    def append_to_batch(
        self, buffer: Any, unit: EncodedUnit, index: int, context: BatchContext
    ) -> None:
        """Add ``unit`` to ``buffer`` with the format's inter-message handling."""

    @abstractmethod
    def finalize_batch(self, buffer: Any, context: BatchContext) -> Payload:
        """Close the batch and return its payload."""

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def format_message(self, message: SwiftMessage) -> EncodedUnit:
        """Encode one message, recording the outcome in the metrics."""
        try:
            unit = self.encode_one(message)
        except FormatError:
            self._record_message(False)
            raise
        self._record_message(True)
        return unit

    def format_batch(self, messages: Sequence[SwiftMessage]) -> BatchResult:
        """
        Encode ``messages`` as one batch.

        Fails fast: the first message that cannot be encoded aborts the
        whole batch with FormatError.
        """
        if not messages:
            raise self._error("Message list cannot be None or empty")
        if len(messages) > self.max_batch_size:
            raise self._error(
                f"Batch of {len(messages)} messages exceeds the maximum of "
                f"{self.max_batch_size}",
                len(messages),
            )

        total = len(messages)
        logger.info(
            "Formatting batch of %d messages in %s format",
            total,
            self.output_format.code,
            extra={"category": LogCategory.ENCODING},
        )
        context = self.begin_batch(total)
        buffer = self._new_buffer()

        for index, message in enumerate(messages):
            context.current_index = index
            try:
                unit = self._encode_unit(message)
            except FormatError as e:
                self._record_message(False)
                logger.error(
                    "%s batch aborted at message %d of %d: %s",
                    self.output_format.code,
                    index + 1,
                    total,
                    e.message,
                    extra={"category": LogCategory.ENCODING},
                )
                raise FormatError(
                    f"Message {index + 1} of {total} failed: {e.message}",
                    output_format=self.output_format.code,
                    offending_value=e.offending_value,
                    cause=e,
                ) from e

            self._record_message(True)
            if unit.wrapped:
                context.wrapped_messages += 1
            if unit.wrap_fallback:
                context.wrap_fallbacks += 1
            self.append_to_batch(buffer, unit, index, context)

        payload = self.finalize_batch(buffer, context)
        payload, representation = self._present_batch(payload)
        stats = context.to_stats()

        if self.metrics:
            self.metrics.record_batch(self.output_format.code, stats.byte_size)

        logger.info(
            "%s batch formatting completed: %d messages, %d bytes in %.1fms",
            self.output_format.code,
            stats.message_count,
            stats.byte_size,
            stats.elapsed_ms,
            extra={
                "category": LogCategory.ENCODING,
                "metadata": {"messages": stats.message_count, "bytes": stats.byte_size},
            },
        )
        return BatchResult(
            payload=payload,
            representation=representation,
            output_format=self.output_format,
            stats=stats,
            encoding=self.config.encoding,
        )

    # ------------------------------------------------------------------
    # Encoding steps and format hooks
    # ------------------------------------------------------------------

    def _encode_unit(self, message: SwiftMessage) -> EncodedUnit:
        self.validate(message)
        text, wrap = self._render(message)
        text = self._prepare_text(text)
        text = self._post_process(text)
        return self._build_unit(text, wrap)

    def _render(self, message: SwiftMessage) -> Tuple[str, Optional[WrapResult]]:
        if not message.has_network_marker():
            return message.serialize(), None

        wrap = self.wrapper.wrap(message)
        if wrap.is_fallback:
            logger.warning(
                "%s: network wrapping fell back to the unwrapped message: %s",
                self.output_format.code,
                wrap.fallback_reason,
                extra={"category": LogCategory.NETWORK_WRAP},
            )
            if self.metrics:
                self.metrics.record_wrap_fallback(self.output_format.code)
        return wrap.text, wrap

    def _prepare_text(self, text: str) -> str:
        return text

    def _post_process(self, text: str) -> str:
        """Reject NUL, normalize line endings, check the target encoding."""
        if not text.strip():
            raise self._error("Formatted message is empty")
        if "\x00" in text:
            raise self._error(
                f"Message contains a NUL character at position {text.index(chr(0))}",
                "\\x00",
            )

        text = normalize_line_endings(text, self.config.line_ending)

        try:
            text.encode(self.config.encoding)
        except UnicodeEncodeError as e:
            char = e.object[e.start]
            raise FormatError(
                f"Content contains characters not compatible with "
                f"{self.config.encoding} encoding: {char!r} (U+{ord(char):04X})",
                output_format=self.output_format.code,
                offending_value=char,
                cause=e,
            ) from e

        self._validate_content(text)
        return text

    def _validate_config(self) -> None:
        pass

    def _validate_content(self, text: str) -> None:
        pass

    def _build_unit(self, text: str, wrap: Optional[WrapResult]) -> EncodedUnit:
        return EncodedUnit(
            payload=text,
            representation=Representation.TEXT,
            encoding=self.config.encoding,
            wrapped=bool(wrap and wrap.wrapped),
            wrap_fallback=bool(wrap and wrap.is_fallback),
        )

    def _present(self, unit: EncodedUnit) -> EncodedUnit:
        return unit

    def _present_batch(self, payload: Payload) -> Tuple[Payload, Representation]:
        return payload, Representation.TEXT

    def _new_buffer(self) -> Any:
        return []

    def _record_message(self, success: bool) -> None:
        if self.metrics:
            self.metrics.record_message(self.output_format.code, success)

    def _error(self, message: str, offending_value: Any = None) -> FormatError:
        return FormatError(
            message,
            output_format=self.output_format.code,
            offending_value=offending_value,
        )

