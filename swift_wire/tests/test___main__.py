"""
Tests for the swift-wire command line entry points.
"""

import json

import pytest

from swift_wire.__main__ import build_parser, main, validator_main
from swift_wire.formatters import FinFormatter, RjeFormatter
from swift_wire.protocols.swift import SwiftParser

from .conftest import build_message


@pytest.fixture
def validation_dirs(tmp_path):
    input_dir = tmp_path / "in"
    output_dir = tmp_path / "out"
    input_dir.mkdir()
    output_dir.mkdir()
    data = RjeFormatter().format_batch([build_message("A1"), build_message("B2")]).file_bytes()
    (input_dir / "batch.rje").write_bytes(data)
    (output_dir / "batch.rje").write_bytes(data)
    return input_dir, output_dir


@pytest.mark.integration
class TestValidateCommand:
    """Tests for `swift-wire validate` and `swift-validator`."""

    def test_passing_run(self, validation_dirs, capsys):
        input_dir, output_dir = validation_dirs

        exit_code = main(["validate", "-i", str(input_dir), "-o", str(output_dir)])

        assert exit_code == 0
        assert "Overall Status: PASSED" in capsys.readouterr().out

    def test_failing_run(self, validation_dirs, capsys):
        input_dir, output_dir = validation_dirs
        (output_dir / "batch.rje").unlink()

        exit_code = main(["validate", "-i", str(input_dir), "-o", str(output_dir), "-v"])

        out = capsys.readouterr().out
        assert exit_code == 1
        assert "Overall Status: FAILED" in out
        assert "ERROR: No output files found for input: batch.rje" in out

    def test_json_output(self, validation_dirs, capsys):
        input_dir, output_dir = validation_dirs

        main(["validate", "-i", str(input_dir), "-o", str(output_dir), "--json"])

        data = json.loads(capsys.readouterr().out)
        assert data["overall_valid"] is True
        assert data["files"][0]["detected_format"] == "RJE"

    def test_metrics_out(self, validation_dirs, tmp_path):
        input_dir, output_dir = validation_dirs
        metrics_path = tmp_path / "validator.prom"

        main([
            "validate", "-i", str(input_dir), "-o", str(output_dir),
            "--metrics-out", str(metrics_path),
        ])

        assert 'swift_wire_files_validated_total{status="passed"} 1.0' in metrics_path.read_text()

    def test_missing_arguments_exit_one(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["validate", "-i", "somewhere"])

        assert exc_info.value.code == 1
        assert "required" in capsys.readouterr().err

    def test_standalone_validator(self, validation_dirs, capsys):
        input_dir, output_dir = validation_dirs

        assert validator_main(["-i", str(input_dir), "-o", str(output_dir)]) == 0
        assert "SWIFT FILE VALIDATION REPORT" in capsys.readouterr().out

    def test_standalone_validator_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            validator_main([])

        assert exc_info.value.code == 1

    def test_bad_config_file(self, validation_dirs, tmp_path, capsys):
        input_dir, output_dir = validation_dirs

        exit_code = main([
            "validate", "-i", str(input_dir), "-o", str(output_dir),
            "--config", str(tmp_path / "missing.yaml"),
        ])

        assert exit_code == 1
        assert "Configuration file not found" in capsys.readouterr().err


@pytest.mark.integration
class TestConvertCommand:
    """Tests for `swift-wire convert`."""

    def test_fin_to_rje(self, tmp_path):
        messages = [build_message(f"C{i}") for i in range(3)]
        source = tmp_path / "day.fin"
        source.write_text(FinFormatter().format_batch(messages).payload)
        out_dir = tmp_path / "converted"

        exit_code = main(["convert", str(source), "--format", "rje", "-o", str(out_dir)])

        payload = (out_dir / "day.rje").read_bytes().decode("ascii")
        assert exit_code == 0
        assert payload.count("$") == 2
        assert "\r\n:20:C1\r\n" in payload

    def test_network_envelope_removed(self, tmp_path, wrapper):
        wrapped = FinFormatter(wrapper=wrapper).format_batch(
            [build_message("NET1", network=True)]
        )
        source = tmp_path / "wrapped.fin"
        source.write_text(wrapped.payload)

        exit_code = main(["convert", str(source), "-f", "fin", "-o", str(tmp_path / "out")])

        converted = (tmp_path / "out" / "wrapped.fin").read_text()
        parsed = SwiftParser().parse(converted)
        assert exit_code == 0
        assert "F21" not in converted
        assert parsed.message.block("2").startswith("I103")

    def test_hex_debug(self, tmp_path):
        source = tmp_path / "one.fin"
        source.write_text(build_message().serialize())

        main([
            "convert", str(source), "-f", "pcc", "--hex-debug",
            "--extension", ".hex", "-o", str(tmp_path),
        ])

        assert (tmp_path / "one.hex").read_text().startswith("\n// Sector 0 (offset 0x0000)")

    def test_unknown_format(self, tmp_path, capsys):
        source = tmp_path / "one.fin"
        source.write_text(build_message().serialize())

        assert main(["convert", str(source), "-f", "xml"]) == 1
        assert "Unknown output format" in capsys.readouterr().err

    def test_file_without_messages(self, tmp_path):
        source = tmp_path / "empty.fin"
        source.write_text("no messages here")

        assert main(["convert", str(source), "-f", "fin", "-o", str(tmp_path)]) == 1

    def test_parser_requires_subcommand(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args([])

        assert exc_info.value.code == 1
