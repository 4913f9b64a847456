"""
swift-wire - Main Entry Point

Command line front end for the round-trip validator and the batch
converter.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from swift_wire import __version__
from swift_wire.core.config import Config, load_config
from swift_wire.core.exceptions import SwiftWireException
from swift_wire.core.metrics import WireMetrics
from swift_wire.core.structured_logging import configure_logging
from swift_wire.formatters.registry import create_formatter, resolve_format
from swift_wire.protocols.swift.swift_message import SwiftMessage
from swift_wire.protocols.swift.swift_parser import SwiftParser
from swift_wire.validation.extraction import MessageExtractor, decode_content
from swift_wire.validation.file_validator import SwiftFileValidator

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class CliArgumentParser(argparse.ArgumentParser):
    """ArgumentParser whose usage errors exit with status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=str, help="Configuration file path")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=LOG_LEVELS,
        help="Log level (defaults to the configured level)",
    )
    parser.add_argument(
        "--metrics-out",
        type=str,
        help="Write Prometheus metrics to this file when done",
    )


def _add_validate_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i", "--input", required=True, help="Directory holding the original files"
    )
    parser.add_argument(
        "-o", "--output", required=True, help="Directory holding the processed files"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Include info lines and checksums"
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the report as JSON"
    )
    _add_common_arguments(parser)


def build_parser() -> argparse.ArgumentParser:
    parser = CliArgumentParser(
        prog="swift-wire",
        description="SWIFT MT wire format encoder and round-trip validator",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", parser_class=CliArgumentParser)
    subparsers.required = True

    validate = subparsers.add_parser(
        "validate", help="Check processed files against their originals"
    )
    _add_validate_arguments(validate)
    validate.set_defaults(handler=run_validate)

    convert = subparsers.add_parser(
        "convert", help="Re-encode the messages of existing files in another format"
    )
    convert.add_argument("inputs", nargs="+", help="Files to convert")
    convert.add_argument(
        "-f", "--format", required=True, help="Target format: fin, rje or pcc"
    )
    convert.add_argument(
        "-o", "--output-dir", default=".", help="Directory for the converted files"
    )
    convert.add_argument("--extension", help="Override the output file extension")
    convert.add_argument(
        "--hex-debug", action="store_true", help="Write DOS-PCC output as a hex dump"
    )
    _add_common_arguments(convert)
    convert.set_defaults(handler=run_convert)

    return parser


def _setup(args: argparse.Namespace) -> Config:
    config = load_config(args.config)
    configure_logging(
        level=args.log_level or config.log_level.value,
        json_format=config.log_format.value == "json",
    )
    return config


def _write_metrics(args: argparse.Namespace, metrics: WireMetrics) -> None:
    if args.metrics_out:
        metrics.write_textfile(args.metrics_out)


def run_validate(args: argparse.Namespace) -> int:
    config = _setup(args)
    metrics = WireMetrics()

    validator = SwiftFileValidator(
        args.input, args.output, config=config.validator, metrics=metrics
    )
    report = validator.validate_all()

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(report.format_report(verbose=args.verbose))

    _write_metrics(args, metrics)
    return 0 if report.is_overall_valid else 1


def read_messages(path: Path, extractor: MessageExtractor, parser: SwiftParser) -> List[SwiftMessage]:
    """Extract and parse every message of ``path``; unparseable ones are skipped."""
    messages = []
    for raw in extractor.extract(decode_content(path.read_bytes())):
        parsed = parser.parse(raw)
        if not parsed.is_valid:
            logger.warning(
                "Skipping message in %s: %s", path.name, "; ".join(parsed.parse_errors)
            )
            continue
        messages.append(parsed.message)
    return messages


def run_convert(args: argparse.Namespace) -> int:
    config = _setup(args)
    metrics = WireMetrics()
    output_format = resolve_format(args.format)

    if args.hex_debug:
        config.dos_pcc = replace(config.dos_pcc, hex_debug=True)

    formatter = create_formatter(output_format, config, metrics=metrics)
    extractor = MessageExtractor(config.validator)
    parser = SwiftParser(strict=False, unwrap_network=True)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    extension = (args.extension or output_format.extension).lstrip(".")

    failures = 0
    for input_path in map(Path, args.inputs):
        try:
            messages = read_messages(input_path, extractor, parser)
            if not messages:
                logger.error("No messages found in %s", input_path)
                failures += 1
                continue

            result = formatter.format_batch(messages)
            target = output_dir / f"{input_path.stem}.{extension}"
            target.write_bytes(result.file_bytes())
            logger.info(
                "Wrote %d messages to %s (%d bytes)",
                result.stats.message_count,
                target,
                result.stats.byte_size,
            )
        except (OSError, SwiftWireException) as e:
            logger.error("Failed to convert %s: %s", input_path, e)
            failures += 1

    _write_metrics(args, metrics)
    return 1 if failures else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for swift-wire."""
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except SwiftWireException as e:
        logger.error("swift-wire failed: %s", e)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1


def validator_main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point of the standalone ``swift-validator`` command."""
    parser = CliArgumentParser(
        prog="swift-validator",
        description="Validate SWIFT file processing against the original files",
    )
    _add_validate_arguments(parser)
    args = parser.parse_args(argv)
    try:
        return run_validate(args)
    except SwiftWireException as e:
        logger.error("swift-validator failed: %s", e)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
