"""Integration tests for the medtrans command line."""

import json
import logging

import fitz
import pytest
from loguru import logger as loguru_logger
from typer.testing import CliRunner

from cli.commands.main import app


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the sinks each command installs on the runner's captured streams."""
    yield
    loguru_logger.remove()
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)


def test_text_command(runner):
    """Test translating a sentence from the command line."""
    result = runner.invoke(app, ["text", "The patient has fever and headache."])

    assert result.exit_code == 0
    assert "المريض يعاني من" in result.output


def test_lookup_command(runner):
    """Test dictionary lookup output."""
    result = runner.invoke(app, ["lookup", "fever", "stethoscopy"])

    assert result.exit_code == 0
    assert "حمى" in result.output
    assert "not found" in result.output


def test_stats_export(runner, tmp_path):
    """Test statistics output and medical dictionary export."""
    export = tmp_path / "terms.json"

    result = runner.invoke(app, ["stats", "--export", str(export)])

    assert result.exit_code == 0
    assert json.loads(export.read_text(encoding="utf-8"))["total_terms"] > 0


def test_translate_command(runner, sample_pdf, tmp_path):
    """Test translating a PDF end to end."""
    output = tmp_path / "cli_arabic.pdf"

    result = runner.invoke(app, ["translate", str(sample_pdf), "-o", str(output), "--no-glossary"])

    assert result.exit_code == 0
    with fitz.open(str(output)) as doc:
        assert len(doc) == 6


def test_translate_missing_input(runner, tmp_path):
    """Test the error exit for a missing input file."""
    result = runner.invoke(app, ["translate", str(tmp_path / "missing.pdf")])

    assert result.exit_code == 1
    assert "not found" in result.output
