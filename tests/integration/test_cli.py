"""Integration tests for the build-cover command line."""

import shlex

import pytest
from typer.testing import CliRunner

from coverbuild.cli import app
from coverbuild.contexts.rendering import pipeline

runner = CliRunner()


@pytest.fixture
def cli_tools(fake_tools, monkeypatch):
    """Point the CLI's default settings at the fake tools."""
    monkeypatch.setattr(pipeline, "LATEX_COMPILER", fake_tools["latex"])
    monkeypatch.setattr(pipeline, "LATEX_CLEANUP_COMMAND", shlex.quote(fake_tools["clean"]))
    return fake_tools


def invoke(book, *args):
    return runner.invoke(app, ["--root", str(book), *args])


@pytest.mark.integration
def test_build_succeeds(book, cli_tools):
    result = invoke(book)

    assert result.exit_code == 0, result.output
    assert (book / "Cover.pdf").exists()
    assert "Book has 250 pages, paper size 6in x 9in" in result.output
    assert "Cover built" in result.output


@pytest.mark.integration
def test_quiet_suppresses_progress(book, cli_tools):
    result = invoke(book, "-q")

    assert result.exit_code == 0
    assert "Cover built" not in result.output
    assert "Book has" not in result.output


@pytest.mark.integration
def test_verbose_echoes_commands(book, cli_tools):
    result = invoke(book, "-v")

    assert result.exit_code == 0
    assert f"+ {cli_tools['latex']} -synctex=1 -interaction=nonstopmode FrontCover.tex" in result.output
    assert "+ cp Cover.pdf ../Cover.pdf" in result.output


@pytest.mark.integration
@pytest.mark.parametrize("flags", [[], ["-q"], ["-v"], ["-q", "-v"]])
def test_trial_mode_prints_every_step(book, cli_tools, monkeypatch, flags):
    def fail(*args, **kwargs):
        raise AssertionError("trial mode must not spawn processes")

    monkeypatch.setattr("subprocess.run", fail)
    monkeypatch.setattr("subprocess.Popen", fail)

    result = invoke(book, "-t", *flags)

    trial_lines = [line for line in result.output.splitlines() if line.startswith("[trial] ")]
    assert result.exit_code == 0, result.output
    assert len(trial_lines) == 10
    assert sum("FrontCover.tex" in line for line in trial_lines) == 2
    assert not (book / "cover" / "invocations.txt").exists()
    assert not (book / "Cover.pdf").exists()


@pytest.mark.integration
def test_missing_parameters_exits_666(book, cli_tools):
    (book / "BookParameters.tex").unlink()

    result = invoke(book)

    assert result.exit_code == 666
    assert "Fatal: Parameters file not found" in result.output
    assert not (book / "cover" / "invocations.txt").exists()


@pytest.mark.integration
def test_missing_cover_source_exits_666_quietly(book, cli_tools):
    (book / "cover" / "Cover.tex").unlink()

    result = invoke(book, "-q")

    assert result.exit_code == 666
    assert "Fatal" not in result.output


@pytest.mark.integration
def test_step_failure_reported_even_when_quiet(book, cli_tools, monkeypatch):
    monkeypatch.setenv("FAKE_LATEX_FAIL_CALL", "2")

    result = invoke(book, "-q")

    assert result.exit_code == 3
    assert "Error: Step failed with exit status 3" in result.output
    assert not (book / "Cover.pdf").exists()


@pytest.mark.integration
def test_cleanup_failure_still_succeeds(book, cli_tools, monkeypatch):
    monkeypatch.setenv("FAKE_CLEAN_STATUS", "2")

    result = invoke(book)

    assert result.exit_code == 0
    assert (book / "Cover.pdf").exists()


@pytest.mark.unit
@pytest.mark.parametrize("flag", ["-h", "-?"])
def test_usage_exits_1(flag):
    result = runner.invoke(app, [flag])

    assert result.exit_code == 1
    assert "Usage" in result.output


@pytest.mark.integration
def test_positional_arguments_accepted(book, cli_tools):
    result = invoke(book, "-t", "first", "second")
    assert result.exit_code == 0


@pytest.mark.unit
def test_third_positional_argument_rejected(book):
    result = invoke(book, "-t", "a", "b", "c")
    assert result.exit_code not in (0, 1)
