"""
swift-wire - Pytest Configuration and Fixtures

Shared message builders, deterministic network wrappers and metrics
registries for the test suite.
"""

import logging
from datetime import date

import pytest

from swift_wire.core.metrics import WireMetrics
from swift_wire.protocols.swift.network_wrapper import NetworkWrapper, SessionCounter
from swift_wire.protocols.swift.swift_message import SwiftMessage

BASIC_HEADER = "F01BANKBEBBAXXX0000000000"
APPLICATION_HEADER = "O1031200210101BANKDEFFXXXX00000000002101011200N"
WRAP_DATE = date(2026, 10, 18)


def build_message(reference="REF0001", extra_lines=(), network=False, **blocks):
    """MT103-like message with LF line breaks in its text block."""
    lines = [f":20:{reference}"]
    if network:
        lines.append(":119:NETFMT")
    lines.extend(extra_lines)
    lines.append(":32A:210101EUR1000,00")
    text = "\n" + "\n".join(lines) + "\n-"
    return SwiftMessage.from_parts(
        blocks.pop("basic_header", BASIC_HEADER),
        blocks.pop("application_header", APPLICATION_HEADER),
        text,
        **blocks,
    )


@pytest.fixture
def message():
    return build_message()


@pytest.fixture
def messages():
    return [build_message(f"REF{i:04d}") for i in range(1, 4)]


@pytest.fixture
def network_message():
    return build_message("NETREF01", network=True, user_header="{108:MSGREF}")


@pytest.fixture
def message_factory():
    return build_message


@pytest.fixture
def session_counter():
    """Counter pinned to a clock at 1 ms so numbers start at 0000000001."""
    return SessionCounter(clock=lambda: 0.001)


@pytest.fixture
def wrapper(session_counter):
    return NetworkWrapper(session_counter=session_counter, today=lambda: WRAP_DATE)


@pytest.fixture
def metrics():
    return WireMetrics()


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo handlers installed by configure_logging so caplog keeps working."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    package_logger = logging.getLogger("swift_wire")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
