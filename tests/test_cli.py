"""
Tests for CLI functionality.

These tests verify the command-line interface logic.
"""

from __future__ import annotations

import argparse
from io import StringIO
from unittest.mock import patch

import pytest

from windscape.cli import cmd_analyze, cmd_export, cmd_info, cmd_legend, create_parser, main
from windscape.errors import ConfigurationError, ExternalServiceError


class TestCreateParser:
    """Tests for create_parser function."""

    def test_creates_parser(self) -> None:
        parser = create_parser()
        assert isinstance(parser, argparse.ArgumentParser)
        assert parser.prog == "windscape"

    def test_parser_has_version(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--version"])

    def test_parser_has_debug_flag(self) -> None:
        args = create_parser().parse_args(["--debug", "info"])
        assert args.debug is True

    def test_export_include_location(self) -> None:
        parser = create_parser()
        assert parser.parse_args(["export"]).include_location is False
        assert parser.parse_args(["export", "--include-location"]).include_location is True

    def test_legend_bounds(self) -> None:
        args = create_parser().parse_args(["legend", "--min", "0", "--max", "8"])
        assert args.command == "legend"
        assert (args.min_value, args.max_value) == (0.0, 8.0)

    def test_legend_defaults(self) -> None:
        args = create_parser().parse_args(["legend"])
        assert args.min_value is None
        assert args.max_value is None


class TestCmdInfo:
    """Tests for cmd_info function."""

    def test_prints_app_info(self) -> None:
        with patch("sys.stdout", new=StringIO()) as mock_stdout:
            exit_code = cmd_info(argparse.Namespace())
        output = mock_stdout.getvalue()
        assert exit_code == 0
        assert "Application:" in output
        assert "Region:" in output
        assert "Backend:" in output


class TestCmdLegend:
    """Tests for cmd_legend function."""

    def test_prints_bins(self) -> None:
        args = argparse.Namespace(min_value=0.0, max_value=12.0)
        with patch("sys.stdout", new=StringIO()) as mock_stdout:
            exit_code = cmd_legend(args)
        lines = mock_stdout.getvalue().splitlines()
        assert exit_code == 0
        assert len(lines) == 7
        assert lines[0].endswith("0.00 - 2.00")
        assert lines[-1].endswith("12.00+")

    def test_invalid_range(self) -> None:
        args = argparse.Namespace(min_value=5.0, max_value=1.0)
        with patch("sys.stderr", new=StringIO()) as mock_stderr:
            exit_code = cmd_legend(args)
        assert exit_code == 1
        assert "Error" in mock_stderr.getvalue()


class TestCmdAnalyze:
    """Tests for cmd_analyze function."""

    def test_success(self) -> None:
        with patch("windscape.cli.analyze_all") as mock_analyze:
            mock_analyze.return_value = {"monthly_rows": 24, "correlation_rows": 500}
            with patch("sys.stdout", new=StringIO()) as mock_stdout:
                exit_code = cmd_analyze(argparse.Namespace())
        assert exit_code == 0
        assert "24 monthly rows" in mock_stdout.getvalue()
        mock_analyze.assert_called_once()

    @pytest.mark.parametrize(
        "error",
        [ConfigurationError("bad years"), ExternalServiceError("quota", service="earthengine")],
    )
    def test_failure(self, error: Exception) -> None:
        with patch("windscape.cli.analyze_all", side_effect=error):
            with patch("sys.stderr", new=StringIO()) as mock_stderr:
                exit_code = cmd_analyze(argparse.Namespace())
        assert exit_code == 1
        assert str(error) in mock_stderr.getvalue()


class TestCmdExport:
    """Tests for cmd_export function."""

    def test_passes_flag(self) -> None:
        with patch("windscape.cli.export_all") as mock_export:
            mock_export.return_value = {"legend": "data/exports/Sudan_Wind_Legend.csv"}
            exit_code = cmd_export(argparse.Namespace(include_location=True))
        assert exit_code == 0
        assert mock_export.call_args.kwargs["include_location"] is True

    def test_nothing_written(self) -> None:
        with patch("windscape.cli.export_all", return_value={}):
            with patch("sys.stderr", new=StringIO()):
                assert cmd_export(argparse.Namespace(include_location=False)) == 1

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("Path escapes store base directory: exports/x.csv"),
            ExternalServiceError("disk full", service="store"),
        ],
    )
    def test_failure(self, error: Exception) -> None:
        with patch("windscape.cli.export_all", side_effect=error):
            with patch("sys.stderr", new=StringIO()) as mock_stderr:
                exit_code = cmd_export(argparse.Namespace(include_location=False))
        assert exit_code == 1
        assert mock_stderr.getvalue().startswith("Error: ")
        assert str(error) in mock_stderr.getvalue()


class TestMain:
    """Tests for main function."""

    def test_no_command_prints_help(self) -> None:
        with patch("sys.argv", ["windscape"]):
            with patch("sys.stdout", new=StringIO()) as mock_stdout:
                assert main() == 0
        assert "usage" in mock_stdout.getvalue().lower()

    def test_dispatches_legend(self) -> None:
        with patch("sys.argv", ["windscape", "legend", "--min", "0", "--max", "6"]):
            with patch("sys.stdout", new=StringIO()) as mock_stdout:
                assert main() == 0
        assert "6.00+" in mock_stdout.getvalue()
