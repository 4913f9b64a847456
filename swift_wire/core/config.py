"""
swift-wire - Configuration Management

This module provides configuration management for the encoders and the
round-trip validator, supporting YAML files and environment overrides.
"""

import os
import yaml
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Union
from pathlib import Path
from enum import Enum
import logging

from .exceptions import ConfigurationException
from .structured_logging import LogCategory
from ..protocols.swift.swift_codes import (
    DEFAULT_BATCH_DELIMITER,
    DEFAULT_END_MARKER,
    DEFAULT_LT_ADDRESS,
    DEFAULT_NETWORK_INFO_SUFFIX,
    DEFAULT_PADDING_BYTE,
    DEFAULT_SECTOR_SIZE,
    DEFAULT_START_MARKER,
    MAX_SECTOR_SIZE,
    OutputFormat,
)

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output styles."""

    TEXT = "text"
    JSON = "json"


class LineEnding(str, Enum):
    """Line-ending styles an encoder can normalize to."""

    LF = "LF"
    CRLF = "CRLF"

    @property
    def sequence(self) -> str:
        return "\r\n" if self is LineEnding.CRLF else "\n"

    @classmethod
    def parse(cls, value: Union[str, "LineEnding"]) -> "LineEnding":
        if isinstance(value, LineEnding):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ConfigurationException(
                f"Invalid line ending: {value} (must be LF or CRLF)",
                config_key="line_ending",
            )


@dataclass(frozen=True)
class FormatConfig:
    """Per-format encoder settings, immutable for the lifetime of an encoder."""

    sector_size: int = DEFAULT_SECTOR_SIZE
    start_marker: int = DEFAULT_START_MARKER
    end_marker: int = DEFAULT_END_MARKER
    padding_byte: int = DEFAULT_PADDING_BYTE
    encoding: str = "ascii"
    batch_delimiter: str = DEFAULT_BATCH_DELIMITER
    line_ending: LineEnding = LineEnding.LF
    validate_charset: bool = True
    include_batch_header: bool = False
    include_batch_trailer: bool = False
    hex_debug: bool = False

    @classmethod
    def for_format(cls, output_format: OutputFormat) -> "FormatConfig":
        """Defaults for one format: LF for FIN, CRLF for RJE and DOS-PCC."""
        if output_format is OutputFormat.FIN:
            return cls(line_ending=LineEnding.LF)
        return cls(line_ending=LineEnding.CRLF)

    @classmethod
    def from_dict(
        cls, data: Optional[Dict[str, Any]], base: Optional["FormatConfig"] = None
    ) -> "FormatConfig":
        """Overlay a mapping (as read from YAML) on top of ``base``."""
        base = base or cls()
        if not data:
            return base

        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigurationException(
                f"Unknown format settings: {', '.join(sorted(unknown))}",
                config_key=sorted(unknown)[0],
            )

        values = dict(data)
        if "line_ending" in values:
            values["line_ending"] = LineEnding.parse(values["line_ending"])
        return replace(base, **values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sector_size": self.sector_size,
            "start_marker": self.start_marker,
            "end_marker": self.end_marker,
            "padding_byte": self.padding_byte,
            "encoding": self.encoding,
            "batch_delimiter": self.batch_delimiter,
            "line_ending": self.line_ending.value,
            "validate_charset": self.validate_charset,
            "include_batch_header": self.include_batch_header,
            "include_batch_trailer": self.include_batch_trailer,
            "hex_debug": self.hex_debug,
        }

    def problems(self, section: str) -> List[str]:
        """Return every invalid setting of this section as a readable string."""
        errors = []
        if not 1 <= self.sector_size <= MAX_SECTOR_SIZE:
            errors.append(
                f"{section}.sector_size must be between 1 and {MAX_SECTOR_SIZE}"
            )
        for name in ("start_marker", "end_marker", "padding_byte"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                errors.append(f"{section}.{name} must be between 0 and 255")
        if self.start_marker == self.end_marker:
            errors.append(f"{section}.start_marker and end_marker must differ")
        if not self.batch_delimiter:
            errors.append(f"{section}.batch_delimiter cannot be empty")
        try:
            "".encode(self.encoding)
        except LookupError:
            errors.append(f"{section}.encoding is not a known codec: {self.encoding}")
        return errors


@dataclass
class NetworkConfig:
    """Settings for the synthesized network-delivered envelope."""

    lt_address: str = DEFAULT_LT_ADDRESS
    info_suffix: str = DEFAULT_NETWORK_INFO_SUFFIX


@dataclass
class ValidatorConfig:
    """Round-trip validator settings."""

    split_threshold: int = 1000
    preview_length: int = 100
    sector_size: int = DEFAULT_SECTOR_SIZE
    start_marker: int = DEFAULT_START_MARKER
    end_marker: int = DEFAULT_END_MARKER
    lookahead_sectors: int = 10
    rje_delimiter: str = DEFAULT_BATCH_DELIMITER
    file_extensions: List[str] = field(
        default_factory=lambda: [".txt", ".fin", ".rje", ".pcc", ".dos"]
    )


@dataclass
class Config:
    """Main configuration class."""

    log_level: LogLevel = LogLevel.INFO
    log_format: LogFormat = LogFormat.TEXT
    max_batch_size: int = 10000

    fin: FormatConfig = field(
        default_factory=lambda: FormatConfig.for_format(OutputFormat.FIN)
    )
    rje: FormatConfig = field(
        default_factory=lambda: FormatConfig.for_format(OutputFormat.RJE)
    )
    dos_pcc: FormatConfig = field(
        default_factory=lambda: FormatConfig.for_format(OutputFormat.DOS_PCC)
    )
    network: NetworkConfig = field(default_factory=NetworkConfig)
    validator: ValidatorConfig = field(default_factory=ValidatorConfig)

    @classmethod
    def load_from_file(cls, config_path: Union[str, Path]) -> "Config":
        """Load configuration from YAML file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationException(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                config_data = yaml.safe_load(f)

            return cls._from_dict(config_data or {})

        except yaml.YAMLError as e:
            raise ConfigurationException(f"Invalid YAML in configuration file: {e}")
        except ConfigurationException:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigurationException(f"Error loading configuration file: {e}")

    @classmethod
    def load_from_env(
        cls, prefix: str = "SWIFT_WIRE_", base: Optional["Config"] = None
    ) -> "Config":
        """Load configuration from environment variables."""
        config = base or cls()

        try:
            config.log_level = LogLevel(
                os.getenv(f"{prefix}LOG_LEVEL", config.log_level.value).upper()
            )
            config.log_format = LogFormat(
                os.getenv(f"{prefix}LOG_FORMAT", config.log_format.value).lower()
            )

            # DOS-PCC framing
            pcc_overrides: Dict[str, Any] = {}
            for name in ("sector_size", "start_marker", "end_marker", "padding_byte"):
                value = os.getenv(f"{prefix}PCC_{name.upper()}")
                if value is not None:
                    pcc_overrides[name] = int(value, 0)
            if os.getenv(f"{prefix}PCC_ENCODING"):
                pcc_overrides["encoding"] = os.getenv(f"{prefix}PCC_ENCODING")
            if pcc_overrides:
                config.dos_pcc = replace(config.dos_pcc, **pcc_overrides)

            if os.getenv(f"{prefix}RJE_DELIMITER"):
                config.rje = replace(
                    config.rje, batch_delimiter=os.getenv(f"{prefix}RJE_DELIMITER")
                )
            if os.getenv(f"{prefix}FIN_LINE_ENDING"):
                config.fin = replace(
                    config.fin,
                    line_ending=LineEnding.parse(os.getenv(f"{prefix}FIN_LINE_ENDING")),
                )

            if os.getenv(f"{prefix}SPLIT_THRESHOLD"):
                config.validator.split_threshold = int(
                    os.getenv(f"{prefix}SPLIT_THRESHOLD")
                )
        except ValueError as e:
            raise ConfigurationException(f"Invalid environment override: {e}")

        return config

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create configuration from dictionary."""
        config = cls()

        if not isinstance(data, dict):
            raise ConfigurationException("Configuration root must be a mapping")

        # Update basic settings
        if "log_level" in data:
            config.log_level = LogLevel(str(data["log_level"]).upper())
        if "log_format" in data:
            config.log_format = LogFormat(str(data["log_format"]).lower())
        if "max_batch_size" in data:
            config.max_batch_size = int(data["max_batch_size"])

        # Update format sections on top of their per-format defaults
        if "fin" in data:
            config.fin = FormatConfig.from_dict(data["fin"], config.fin)
        if "rje" in data:
            config.rje = FormatConfig.from_dict(data["rje"], config.rje)
        if "dos_pcc" in data:
            config.dos_pcc = FormatConfig.from_dict(data["dos_pcc"], config.dos_pcc)

        if "network" in data:
            config.network = NetworkConfig(**data["network"])
        if "validator" in data:
            config.validator = ValidatorConfig(**data["validator"])

        return config

    def format_config(self, output_format: OutputFormat) -> FormatConfig:
        """Return the settings section for one output format."""
        return {
            OutputFormat.FIN: self.fin,
            OutputFormat.RJE: self.rje,
            OutputFormat.DOS_PCC: self.dos_pcc,
        }[output_format]

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "log_level": self.log_level.value,
            "log_format": self.log_format.value,
            "max_batch_size": self.max_batch_size,
            "fin": self.fin.to_dict(),
            "rje": self.rje.to_dict(),
            "dos_pcc": self.dos_pcc.to_dict(),
            "network": {
                "lt_address": self.network.lt_address,
                "info_suffix": self.network.info_suffix,
            },
            "validator": {
                "split_threshold": self.validator.split_threshold,
                "preview_length": self.validator.preview_length,
                "sector_size": self.validator.sector_size,
                "start_marker": self.validator.start_marker,
                "end_marker": self.validator.end_marker,
                "lookahead_sectors": self.validator.lookahead_sectors,
                "rje_delimiter": self.validator.rje_delimiter,
                "file_extensions": list(self.validator.file_extensions),
            },
        }

    def validate(self) -> None:
        """Validate configuration settings."""
        errors = []

        if self.max_batch_size <= 0:
            errors.append("max_batch_size must be positive")

        errors.extend(self.fin.problems("fin"))
        errors.extend(self.rje.problems("rje"))
        errors.extend(self.dos_pcc.problems("dos_pcc"))

        # Network envelope
        if len(self.network.lt_address) != 12:
            errors.append("network.lt_address must be 12 characters")
        if not (len(self.network.info_suffix) == 4 and self.network.info_suffix.isdigit()):
            errors.append("network.info_suffix must be 4 digits")

        # Validator
        validator = self.validator
        if validator.split_threshold <= 0:
            errors.append("validator.split_threshold must be positive")
        if validator.preview_length <= 0:
            errors.append("validator.preview_length must be positive")
        if not 1 <= validator.sector_size <= MAX_SECTOR_SIZE:
            errors.append(
                f"validator.sector_size must be between 1 and {MAX_SECTOR_SIZE}"
            )
        if validator.start_marker == validator.end_marker:
            errors.append("validator.start_marker and end_marker must differ")
        if validator.lookahead_sectors <= 0:
            errors.append("validator.lookahead_sectors must be positive")
        if not validator.rje_delimiter:
            errors.append("validator.rje_delimiter cannot be empty")

        if errors:
            raise ConfigurationException(
                f"Configuration validation failed: {'; '.join(errors)}"
            )


def load_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """Load configuration from an optional file, apply env overrides and validate."""
    config = Config.load_from_file(config_path) if config_path else Config()
    config = Config.load_from_env(base=config)
    config.validate()
    logger.debug(
        "Configuration loaded: %s",
        config.to_dict(),
        extra={"category": LogCategory.CONFIGURATION},
    )
    return config
