"""
swift-wire - Validation Report

Per-file results and the aggregated report of one validation run. The
report is built incrementally and sealed by ``generate_summary()``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

REPORT_WIDTH = 80


@dataclass
class FileValidationResult:
    """Findings for one input file and its expected output file(s)."""

    input_file: Path
    output_files: List[Path] = field(default_factory=list)
    is_valid: bool = False
    detected_format: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    info: List[str] = field(default_factory=list)
    input_checksum: Optional[str] = None
    output_checksum: Optional[str] = None
    input_message_count: int = 0
    output_message_count: int = 0
    input_duplicates: int = 0
    output_duplicates: int = 0

    @property
    def output_file(self) -> Optional[Path]:
        return self.output_files[0] if self.output_files else None

    def add_error(self, error: str) -> None:
        self.errors.append(error)

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def add_info(self, info_message: str) -> None:
        self.info.append(info_message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "input_file": str(self.input_file),
            "output_files": [str(path) for path in self.output_files],
            "is_valid": self.is_valid,
            "detected_format": self.detected_format,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "info": list(self.info),
            "input_checksum": self.input_checksum,
            "output_checksum": self.output_checksum,
            "input_message_count": self.input_message_count,
            "output_message_count": self.output_message_count,
            "input_duplicates": self.input_duplicates,
            "output_duplicates": self.output_duplicates,
        }


class ValidationReport:
    """Aggregated outcome of a validation run."""

    def __init__(self):
        self.file_results: List[FileValidationResult] = []
        self.global_errors: List[str] = []
        self.validated_at = datetime.now()
        self.total_files = 0
        self.valid_files = 0
        self.invalid_files = 0
        self.total_input_messages = 0
        self.total_output_messages = 0
        self.total_input_duplicates = 0
        self.total_output_duplicates = 0
        self._sealed = False

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    def _check_open(self) -> None:
        if self._sealed:
            raise RuntimeError("Validation report is sealed; generate_summary() was already called")

    def add_file_result(self, result: FileValidationResult) -> None:
        self._check_open()
        self.file_results.append(result)

    def add_error(self, error: str) -> None:
        self._check_open()
        self.global_errors.append(error)

    def generate_summary(self) -> "ValidationReport":
        """Compute the totals and seal the report. Calling it again is a no-op."""
        if self._sealed:
            return self

        results = self.file_results
        self.total_files = len(results)
        self.valid_files = sum(1 for r in results if r.is_valid)
        self.invalid_files = self.total_files - self.valid_files
        self.total_input_messages = sum(r.input_message_count for r in results)
        self.total_output_messages = sum(r.output_message_count for r in results)
        self.total_input_duplicates = sum(r.input_duplicates for r in results)
        self.total_output_duplicates = sum(r.output_duplicates for r in results)
        self._sealed = True
        return self

    @property
    def is_overall_valid(self) -> bool:
        return not self.global_errors and self.invalid_files == 0

    def format_report(self, verbose: bool = False) -> str:
        """Render the report as text; ``verbose`` adds info lines, counts and checksums."""
        lines = [
            "=" * REPORT_WIDTH,
            "SWIFT FILE VALIDATION REPORT",
            "=" * REPORT_WIDTH,
            f"Overall Status: {'PASSED' if self.is_overall_valid else 'FAILED'}",
            "",
            "SUMMARY:",
            f"  Total Files Validated: {self.total_files}",
            f"  Valid Files: {self.valid_files}",
            f"  Invalid Files: {self.invalid_files}",
            f"  Total Input Messages: {self.total_input_messages}",
            f"  Total Output Messages: {self.total_output_messages}",
            f"  Input Duplicates Found: {self.total_input_duplicates}",
            f"  Output Duplicates Found: {self.total_output_duplicates}",
            "",
        ]

        if self.global_errors:
            lines.append("GLOBAL ERRORS:")
            lines.extend(f"  x {error}" for error in self.global_errors)
            lines.append("")

        if self.file_results:
            lines.append("FILE VALIDATION RESULTS:")
            for result in self.file_results:
                status = "OK" if result.is_valid else "FAIL"
                lines.append(f"  [{status}] {result.input_file.name}")
                if not result.is_valid:
                    lines.extend(f"    ERROR: {error}" for error in result.errors)
                lines.extend(f"    WARNING: {warning}" for warning in result.warnings)
                if verbose:
                    lines.extend(f"    INFO: {info}" for info in result.info)
                    if result.input_message_count > 0:
                        lines.append(
                            f"    Messages: Input={result.input_message_count}, "
                            f"Output={result.output_message_count}, "
                            f"InputDups={result.input_duplicates}, "
                            f"OutputDups={result.output_duplicates}"
                        )
                    if result.input_checksum is not None:
                        lines.append(
                            f"    Checksums: Input={result.input_checksum}, "
                            f"Output={result.output_checksum or 'N/A'}"
                        )

        lines.append("=" * REPORT_WIDTH)
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "overall_valid": self.is_overall_valid,
            "validated_at": self.validated_at.isoformat(),
            "summary": {
                "total_files": self.total_files,
                "valid_files": self.valid_files,
                "invalid_files": self.invalid_files,
                "total_input_messages": self.total_input_messages,
                "total_output_messages": self.total_output_messages,
                "total_input_duplicates": self.total_input_duplicates,
                "total_output_duplicates": self.total_output_duplicates,
            },
            "global_errors": list(self.global_errors),
            "files": [result.to_dict() for result in self.file_results],
        }
