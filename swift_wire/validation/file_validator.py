"""
swift-wire - Round-Trip File Validator

Proves that an output directory holds the same messages as an input
directory after some external processing step (deduplication, transfer,
re-encoding). Inputs with more than ``split_threshold`` messages are
expected to have been split into numbered parts.

Errors are recorded per file; one broken file never stops the run.
"""

import hashlib
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from swift_wire.core.config import ValidatorConfig
from swift_wire.core.exceptions import SwiftWireException
from swift_wire.core.metrics import WireMetrics
from swift_wire.core.structured_logging import LogCategory
from swift_wire.formatters.base import normalize_line_endings
from swift_wire.validation.extraction import (
    FILE_ENCODING,
    InputFormat,
    MessageExtractor,
    decode_content,
    detect_line_ending,
)
from swift_wire.validation.report import FileValidationResult, ValidationReport

logger = logging.getLogger(__name__)

DOS_PCC_CONTENT_CHECKSUM = "DOS-PCC-CONTENT-VALIDATED"


def md5_checksum(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def count_duplicates(messages: List[str]) -> int:
    return len(messages) - len(set(messages))


@dataclass
class OutputPart:
    """One output file read into memory."""

    path: Path
    data: bytes
    messages: List[str]


class SwiftFileValidator:
    """Compares every input file with its expected output file(s)."""

    def __init__(
        self,
        input_dir: Union[str, Path],
        output_dir: Union[str, Path],
        config: Optional[ValidatorConfig] = None,
        metrics: Optional[WireMetrics] = None,
    ):
        self.input_directory = Path(input_dir)
        self.output_directory = Path(output_dir)
        self.config = config or ValidatorConfig()
        self.metrics = metrics
        self.extractor = MessageExtractor(self.config)

    def validate_all(self) -> ValidationReport:
        """Validate every input file and return the sealed report."""
        report = ValidationReport()
        logger.info("Starting SWIFT file validation")
        logger.info("Input directory: %s", self.input_directory.absolute())
        logger.info("Output directory: %s", self.output_directory.absolute())

        if not self.input_directory.is_dir():
            report.add_error(f"Input directory does not exist: {self.input_directory}")
        elif not self.output_directory.is_dir():
            report.add_error(f"Output directory does not exist: {self.output_directory}")
        else:
            input_files = self.find_swift_files(self.input_directory)
            logger.info(
                "Found %d input files to validate",
                len(input_files),
                extra={"category": LogCategory.VALIDATION},
            )
            if not input_files:
                report.add_error(f"No input files found in {self.input_directory}")
            for input_file in input_files:
                report.add_file_result(self.validate_file(input_file))

        return report.generate_summary()

    def find_swift_files(self, directory: Path) -> List[Path]:
        """Regular files under ``directory`` with a configured extension, sorted."""
        extensions = {ext.lower() for ext in self.config.file_extensions}
        return sorted(
            path
            for path in directory.rglob("*")
            if path.is_file() and path.suffix.lower() in extensions
        )

    def expected_output_files(self, relative_path: Path, message_count: int) -> List[Path]:
        """Output path(s) an input file must map to, given its message count."""
        threshold = self.config.split_threshold
        if message_count <= threshold:
            return [self.output_directory / relative_path]

        parts = math.ceil(message_count / threshold)
        base, extension = relative_path.stem, relative_path.suffix
        return [
            self.output_directory / relative_path.parent / f"{base}-{number}{extension}"
            for number in range(1, parts + 1)
        ]

    def validate_file(self, input_file: Path) -> FileValidationResult:
        """Validate one input file; never raises for content or I/O problems."""
        result = FileValidationResult(input_file=input_file)
        try:
            self._validate_file(input_file, result)
        except (OSError, ValueError, SwiftWireException) as e:
            result.add_error(f"Validation exception: {e}")
            logger.error(
                "Error validating %s: %s",
                input_file,
                e,
                extra={"category": LogCategory.VALIDATION},
            )

        if result.errors:
            result.is_valid = False
            logger.warning(
                "Validation failed: %s (%d error(s))",
                input_file.name,
                len(result.errors),
                extra={"category": LogCategory.VALIDATION},
            )
        if self.metrics:
            self.metrics.record_file_validation(result.is_valid)
        return result

    def _validate_file(self, input_file: Path, result: FileValidationResult) -> None:
        input_data = input_file.read_bytes()
        input_text = decode_content(input_data)
        input_format = self.extractor.detect_format(input_text)
        input_messages = self.extractor.extract(input_text, input_format)

        result.detected_format = input_format.value
        result.input_message_count = len(input_messages)
        result.input_checksum = md5_checksum(input_data)

        normalized_input = [normalize_line_endings(m) for m in input_messages]
        result.input_duplicates = count_duplicates(normalized_input)
        if result.input_duplicates > 0:
            result.add_warning(
                f"Unexpected: Input file contains {result.input_duplicates} duplicate messages"
            )

        relative_path = input_file.relative_to(self.input_directory)
        expected = self.expected_output_files(relative_path, len(input_messages))

        parts = []
        for path in expected:
            if path.is_file():
                data = path.read_bytes()
                parts.append(OutputPart(path, data, self.extractor.extract(decode_content(data))))
            else:
                result.add_error(f"Expected output file does not exist: {path}")

        if not parts:
            result.add_error(f"No output files found for input: {input_file.name}")
            return

        result.output_files = [part.path for part in parts]
        self._compare_messages(normalized_input, parts, result)
        if len(input_messages) > self.config.split_threshold:
            self._check_partition(len(input_messages), len(expected), parts, result)
        self._verify_checksums(input_data, input_text, input_format, parts, result)

        if not result.errors:
            result.is_valid = True
            logger.info(
                "Validation passed: %s (%d output file%s)",
                input_file.name,
                len(parts),
                "s" if len(parts) > 1 else "",
                extra={"category": LogCategory.VALIDATION},
            )

    def _compare_messages(
        self,
        input_messages: List[str],
        parts: List[OutputPart],
        result: FileValidationResult,
    ) -> None:
        output_messages = [
            normalize_line_endings(message) for part in parts for message in part.messages
        ]
        result.output_message_count = len(output_messages)
        result.output_duplicates = count_duplicates(output_messages)

        if len(input_messages) != len(output_messages):
            result.add_error(
                f"Message count mismatch - Input: {len(input_messages)}, "
                f"Output: {len(output_messages)} (across {len(parts)} files)"
            )
        if result.output_duplicates > 0:
            result.add_error(
                f"Output files contain {result.output_duplicates} duplicate messages (should be 0)"
            )

        input_set = set(input_messages)
        output_set = set(output_messages)
        missing = input_set - output_set
        extra = output_set - input_set

        if missing:
            result.add_error(f"Missing {len(missing)} messages in output files")
            if len(missing) == 1:
                result.add_error(f"Missing message preview: {self._preview(next(iter(missing)))}")
        if extra:
            result.add_error(f"Found {len(extra)} unexpected messages in output files")
            if len(extra) == 1:
                result.add_error(f"Extra message preview: {self._preview(next(iter(extra)))}")

        if len(parts) > 1:
            names = ", ".join(part.path.name for part in parts)
            result.add_info(f"Split into {len(parts)} files: {names}")

    def _check_partition(
        self,
        message_count: int,
        expected_parts: int,
        parts: List[OutputPart],
        result: FileValidationResult,
    ) -> None:
        """Every part but the last holds exactly the threshold; the last holds the rest."""
        threshold = self.config.split_threshold
        if len(parts) != expected_parts:
            result.add_error(
                f"Incorrect number of split files - Expected: {expected_parts}, "
                f"Found: {len(parts)}"
            )
            return

        for number, part in enumerate(parts, start=1):
            if number < expected_parts:
                expected_count = threshold
            else:
                expected_count = message_count - threshold * (expected_parts - 1)
            if len(part.messages) != expected_count:
                result.add_error(
                    f"Part {number} has {len(part.messages)} messages, expected {expected_count}"
                )

    def _verify_checksums(
        self,
        input_data: bytes,
        input_text: str,
        input_format: InputFormat,
        parts: List[OutputPart],
        result: FileValidationResult,
    ) -> None:
        if len(parts) == 1:
            result.output_checksum = md5_checksum(parts[0].data)
            if result.output_checksum != result.input_checksum:
                result.add_error(
                    f"Checksum mismatch - Input: {result.input_checksum}, "
                    f"Output: {result.output_checksum}"
                )
                result.add_info(
                    "Files have different binary content (may be formatting/line ending differences)"
                )
            else:
                result.add_info("Checksum match - Files are binary identical")
            return

        messages = [message for part in parts for message in part.messages]

        if input_format is InputFormat.DOS_PCC:
            # Sector padding cannot be rebuilt from extracted text.
            result.add_info("DOS-PCC format detected - skipping binary reconstruction")
            result.add_info(
                f"Message content validation passed - {len(messages)} messages validated"
            )
            result.output_checksum = DOS_PCC_CONTENT_CHECKSUM
            return

        delimiter = self.reconstruction_delimiter(input_format, input_text)
        reconstructed = delimiter.join(messages).encode(FILE_ENCODING)
        result.output_checksum = md5_checksum(reconstructed)

        if result.output_checksum == result.input_checksum:
            result.add_info("Combined checksum match - Split files reconstruct original perfectly")
            return

        result.add_error(
            f"Combined checksum mismatch - Input: {result.input_checksum}, "
            f"Combined Output: {result.output_checksum}"
        )
        result.add_info(
            "Split files when reconstructed have different binary content than original"
        )
        self._diagnose_split(input_data, parts, messages, delimiter, reconstructed, result)

    def reconstruction_delimiter(self, input_format: InputFormat, input_text: str) -> str:
        """Separator that rebuilds a single batch from split parts."""
        if input_format is InputFormat.RJE:
            return self.config.rje_delimiter
        return detect_line_ending(input_text) * 2

    def _diagnose_split(
        self,
        input_data: bytes,
        parts: List[OutputPart],
        messages: List[str],
        delimiter: str,
        reconstructed: bytes,
        result: FileValidationResult,
    ) -> None:
        result.add_info("=== SPLIT FILE CHECKSUM ANALYSIS ===")
        result.add_info(f"Input file size: {len(input_data)} bytes")

        total_output_size = 0
        for number, part in enumerate(parts, start=1):
            total_output_size += len(part.data)
            result.add_info(
                f"Part {number}: {len(part.data)} bytes, {len(part.messages)} messages, "
                f"checksum: {md5_checksum(part.data)}"
            )

        delta = total_output_size - len(input_data)
        result.add_info(f"Total output size: {total_output_size} bytes")
        result.add_info(f"Raw size difference: {delta} bytes")
        result.add_info(f"Total messages extracted: {len(messages)}")
        result.add_info(f"Reconstructed size: {len(reconstructed)} bytes")

        expected_delimiter_bytes = max(len(messages) - 1, 0) * len(delimiter)
        if abs(delta) <= expected_delimiter_bytes:
            result.add_info(
                "Size difference matches expected delimiter count - this is normal for split files"
            )
        else:
            result.add_info(
                f"Size difference exceeds the {expected_delimiter_bytes} delimiter bytes "
                "expected for this many messages"
            )

    def _preview(self, message: str) -> str:
        length = self.config.preview_length
        return message[:length] + "..."
