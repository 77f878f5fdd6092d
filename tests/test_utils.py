"""Tests for logging setup and Rich output helpers (modforge.logging, modforge.utils)."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from modforge.logging import configure_logging, get_logger
from modforge.utils import (
    print_error,
    print_file_list,
    print_success,
    print_summary_table,
    print_warning,
)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class TestLogging:
    @pytest.mark.unit
    def test_get_logger_hierarchy(self):
        assert get_logger().name == "modforge"
        assert get_logger("engine").name == "modforge.engine"

    @pytest.mark.unit
    def test_configure_default_level(self):
        logger = configure_logging()
        assert logger.level == logging.INFO
        assert logger.propagate is False

    @pytest.mark.unit
    def test_configure_verbose(self):
        assert configure_logging(verbose=True).level == logging.DEBUG

    @pytest.mark.unit
    def test_repeated_configuration_keeps_one_handler(self):
        configure_logging()
        logger = configure_logging()
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichOutputHelpers:
    @pytest.mark.unit
    def test_print_summary_table(self, capsys):
        print_summary_table({"Project": "infra-cache", "Files": "7"}, title="modforge")
        out = capsys.readouterr().out
        assert "infra-cache" in out
        assert "Files" in out

    @pytest.mark.unit
    def test_print_file_list(self, capsys):
        print_file_list(["a.ts", "b.ts"], title="Written")
        out = capsys.readouterr().out
        assert "Written" in out
        assert "a.ts" in out and "b.ts" in out

    @pytest.mark.unit
    def test_print_success(self, capsys):
        print_success("Generated infra-cache")
        assert "Generated infra-cache" in capsys.readouterr().out

    @pytest.mark.unit
    def test_print_error_goes_to_stderr(self, capsys):
        print_error("Something failed")
        captured = capsys.readouterr()
        assert "Something failed" in captured.err
        assert captured.out == ""

    @pytest.mark.unit
    def test_print_warning(self, capsys):
        print_warning("Dry run")
        assert "Dry run" in capsys.readouterr().out
