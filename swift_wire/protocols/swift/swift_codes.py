"""
swift-wire - SWIFT Codes and Reference Data

Block identifiers, wire output formats, the reserved network marker and the
FIN character allow-list shared by the encoders, the parser and the
round-trip validator.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


class SwiftBlockType(Enum):
    """SWIFT message block types."""

    BASIC_HEADER = ("1", "Basic Header Block")
    APPLICATION_HEADER = ("2", "Application Header Block")
    USER_HEADER = ("3", "User Header Block")
    TEXT = ("4", "Text Block")
    TRAILER = ("5", "Trailer Block")
    SYSTEM = ("S", "System Block")

    def __init__(self, number: str, description: str):
        self._number = number
        self._description = description

    @property
    def number(self) -> str:
        return self._number

    @property
    def description(self) -> str:
        return self._description

    @classmethod
    def from_number(cls, number: str) -> Optional["SwiftBlockType"]:
        for block_type in cls:
            if block_type.number == number:
                return block_type
        return None


# Serialization order of the blocks of one message.
BLOCK_ORDER: Tuple[str, ...] = tuple(block.number for block in SwiftBlockType)


class MessageDirection(Enum):
    """Direction flag at the start of block 2."""

    INPUT = "I"  # Sent to SWIFT
    OUTPUT = "O"  # Received from SWIFT


class OutputFormat(Enum):
    """Wire formats a batch of messages can be encoded into."""

    FIN = ("FIN", "SWIFT FIN text format", "fin", False)
    RJE = ("RJE", "Remote Job Entry batch format", "rje", False)
    DOS_PCC = ("DOS_PCC", "DOS-PCC sector-padded binary format", "pcc", True)

    def __init__(self, code: str, description: str, extension: str, binary: bool):
        self._code = code
        self._description = description
        self._extension = extension
        self._binary = binary

    @property
    def code(self) -> str:
        return self._code

    @property
    def description(self) -> str:
        return self._description

    @property
    def extension(self) -> str:
        return self._extension

    @property
    def binary(self) -> bool:
        return self._binary

    @classmethod
    def from_code(cls, code: str) -> "OutputFormat":
        """Resolve a format name or one of its aliases, case-insensitively."""
        if code is None:
            raise ValueError("Output format cannot be empty")

        key = code.strip().upper()
        if key in FORMAT_ALIASES:
            return FORMAT_ALIASES[key]

        for output_format in cls:
            if output_format.extension.upper() == key:
                return output_format

        supported = ", ".join(sorted(FORMAT_ALIASES))
        raise ValueError(f"Unknown output format: {code} (supported: {supported})")


FORMAT_ALIASES: Dict[str, OutputFormat] = {
    "FIN": OutputFormat.FIN,
    "SWIFT": OutputFormat.FIN,
    "STANDARD": OutputFormat.FIN,
    "RJE": OutputFormat.RJE,
    "BATCH": OutputFormat.RJE,
    "DOS-PCC": OutputFormat.DOS_PCC,
    "DOS_PCC": OutputFormat.DOS_PCC,
    "DOS": OutputFormat.DOS_PCC,
    "PCC": OutputFormat.DOS_PCC,
    "PC": OutputFormat.DOS_PCC,
}

# Field 119 carrying this value asks for network-delivered formatting.
NETWORK_MARKER_TAG = "119"
NETWORK_MARKER_VALUE = "NETFMT"
NETWORK_MARKER_LINE = f":{NETWORK_MARKER_TAG}:{NETWORK_MARKER_VALUE}"

# Logical terminal used in the synthesized F21 session header.
DEFAULT_LT_ADDRESS = "CENAIDJ0AXXX"
DEFAULT_NETWORK_INFO_SUFFIX = "1107"
SESSION_NUMBER_WIDTH = 10

NETWORK_TRAILER_BLOCK = "{5:{TNG:}}"
NETWORK_SYSTEM_BLOCK = "{S:{SAC:}{COP:P}}"

# Text block terminator.
BODY_TERMINATOR = "-}"

FIN_ALLOWED_CHARACTERS: FrozenSet[str] = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 .,/-?:()+'{}\r\n"
)

RJE_TRANSLITERATION: Dict[str, str] = {
    **dict.fromkeys("äàáâã", "a"),
    **dict.fromkeys("ÄÀÁÂÃ", "A"),
    **dict.fromkeys("ëèéê", "e"),
    **dict.fromkeys("ËÈÉÊ", "E"),
    **dict.fromkeys("ïìíî", "i"),
    **dict.fromkeys("ÏÌÍÎ", "I"),
    **dict.fromkeys("öòóôõ", "o"),
    **dict.fromkeys("ÖÒÓÔÕ", "O"),
    **dict.fromkeys("üùúû", "u"),
    **dict.fromkeys("ÜÙÚÛ", "U"),
    "ß": "s",
    "ç": "c",
    "Ç": "C",
    "ñ": "n",
    "Ñ": "N",
}
RJE_REPLACEMENT_CHARACTER = "?"

# DOS-PCC framing defaults.
DEFAULT_SECTOR_SIZE = 512
DEFAULT_START_MARKER = 0x01
DEFAULT_END_MARKER = 0x03
DEFAULT_PADDING_BYTE = 0x00
MAX_SECTOR_SIZE = 65536

DEFAULT_BATCH_DELIMITER = "$"
