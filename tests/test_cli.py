"""Tests for the atelier CLI."""

from pathlib import Path

from click.testing import CliRunner

from atelier.cli import main


def test_version() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_init(data_dir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["init"])
    assert result.exit_code == 0
    assert "initialized" in result.output.lower()
    assert (data_dir / "data" / "atelier.db").exists()


def test_run_prints_report(data_dir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["run", "--workers", "3", "--skills", "2", "--products", "2", "--seed", "1"])
    assert result.exit_code == 0, result.output
    assert "Products completed" in result.output
    assert "Messages exchanged" in result.output


def test_run_records_history(data_dir: Path) -> None:
    runner = CliRunner()
    runner.invoke(main, ["run", "--workers", "2", "--products", "1", "--seed", "3"])
    result = runner.invoke(main, ["history"])
    assert result.exit_code == 0
    assert "run-" in result.output


def test_run_no_record(data_dir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["run", "--workers", "2", "--products", "1", "--no-record"])
    assert result.exit_code == 0
    result = runner.invoke(main, ["history"])
    assert "No runs recorded" in result.output


def test_run_invalid_config(data_dir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["run", "--workers", "0"])
    assert result.exit_code != 0
    assert "workers" in result.output


def test_history_empty(data_dir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["history"])
    assert result.exit_code == 0
    assert "No runs recorded" in result.output
