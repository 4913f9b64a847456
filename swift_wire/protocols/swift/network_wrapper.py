"""
SWIFT Network Envelope

Turns an outgoing message marked with ``:119:NETFMT`` into the form it has
when delivered by the network: an F21 session header, the network info
block, the application blocks with block 2 flipped to input, and the
``{5:{TNG:}}`` / ``{S:{SAC:}{COP:P}}`` trailer blocks.
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from swift_wire.core.exceptions import ExtractionError
from swift_wire.core.structured_logging import LogCategory
from swift_wire.protocols.swift.block_extraction import (
    ExtractionStatus,
    extract_block,
    require_block,
)
from swift_wire.protocols.swift.swift_codes import (
    DEFAULT_LT_ADDRESS,
    DEFAULT_NETWORK_INFO_SUFFIX,
    NETWORK_SYSTEM_BLOCK,
    NETWORK_TRAILER_BLOCK,
    SESSION_NUMBER_WIDTH,
    MessageDirection,
)
from swift_wire.protocols.swift.swift_message import SwiftMessage

logger = logging.getLogger(__name__)

MAX_SESSION_NUMBER = 10**SESSION_NUMBER_WIDTH - 1

OUTPUT_BLOCK2_PREFIX = "{2:" + MessageDirection.OUTPUT.value
INPUT_BLOCK2_PREFIX = "{2:" + MessageDirection.INPUT.value


@dataclass(frozen=True)
class WrapResult:
    """
    Outcome of wrapping one message.

    When ``wrapped`` is False, ``text`` is the original serialization and
    ``fallback_reason`` says which block could not be extracted.
    """

    text: str
    wrapped: bool
    fallback_reason: Optional[str] = None
    session_number: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return not self.wrapped


class SessionCounter:
    """Strictly increasing 10-digit session numbers seeded from the clock in ms."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = -1
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            now = int(self._clock() * 1000) % (MAX_SESSION_NUMBER + 1)
            value = max(now, self._last + 1)
            if value > MAX_SESSION_NUMBER:
                value = 0
            self._last = value
        return str(value).zfill(SESSION_NUMBER_WIDTH)


class NetworkWrapper:
    """Synthesizes the network-delivered envelope around a message."""

    def __init__(
        self,
        lt_address: str = DEFAULT_LT_ADDRESS,
        info_suffix: str = DEFAULT_NETWORK_INFO_SUFFIX,
        session_counter: Optional[SessionCounter] = None,
        today: Callable[[], date] = date.today,
    ):
        self.lt_address = lt_address
        self.info_suffix = info_suffix
        self.session_counter = session_counter or SessionCounter()
        self._today = today

    def session_header(self, session_number: str) -> str:
        return f"{{1:F21{self.lt_address}{session_number}}}"

    def network_info_block(self) -> str:
        stamp = self._today().strftime("%y%m%d")
        return f"{{4:{{177:{stamp}{self.info_suffix}}}{{451:0}}}}"

    def wrap(self, message: SwiftMessage) -> WrapResult:
        """
        Wrap ``message`` in the network envelope.

        Never raises for extraction problems: the original serialization is
        returned in a fallback result instead.
        """
        original = message.serialize()
        stripped = message.without_network_marker().serialize()

        try:
            block1 = require_block(stripped, "1")
            block2 = require_block(stripped, "2")
            block4 = require_block(stripped, "4")
        except ExtractionError as e:
            return self._fallback(original, e.message)

        block3 = extract_block(stripped, "3")
        if block3.status is ExtractionStatus.MALFORMED:
            return self._fallback(original, "Block 3 is not closed")

        if block2.startswith(OUTPUT_BLOCK2_PREFIX):
            block2 = INPUT_BLOCK2_PREFIX + block2[len(OUTPUT_BLOCK2_PREFIX) :]

        session_number = self.session_counter.next()
        text = "".join(
            [
                self.session_header(session_number),
                self.network_info_block(),
                block1,
                block2,
                block3.text if block3.found else "",
                block4,
                NETWORK_TRAILER_BLOCK,
                NETWORK_SYSTEM_BLOCK,
            ]
        )

        logger.debug(
            "Message wrapped with network session %s",
            session_number,
            extra={"category": LogCategory.NETWORK_WRAP},
        )
        return WrapResult(text=text, wrapped=True, session_number=session_number)

    def _fallback(self, original: str, reason: str) -> WrapResult:
        logger.debug(
            "Network wrapping failed: %s", reason, extra={"category": LogCategory.NETWORK_WRAP}
        )
        return WrapResult(text=original, wrapped=False, fallback_reason=reason)
