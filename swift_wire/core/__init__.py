"""
swift-wire - Core Module

Configuration management, the exception hierarchy, structured logging and
Prometheus metrics shared by the encoders and the validator.
"""

from .config import (
    Config,
    FormatConfig,
    LineEnding,
    LogFormat,
    LogLevel,
    NetworkConfig,
    ValidatorConfig,
    load_config,
)
from .exceptions import (
    SwiftWireException,
    ConfigurationException,
    FormatError,
    ExtractionError,
    SwiftParseError,
)
from .metrics import WireMetrics

__all__ = [
    "Config",
    "FormatConfig",
    "LineEnding",
    "LogFormat",
    "LogLevel",
    "NetworkConfig",
    "ValidatorConfig",
    "load_config",
    "SwiftWireException",
    "ConfigurationException",
    "FormatError",
    "ExtractionError",
    "SwiftParseError",
    "WireMetrics",
]
