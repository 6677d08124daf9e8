"""CLI smoke tests."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from typer.testing import CliRunner

from codetag import __version__, app


def test_package_imports() -> None:
    """Ensure the package imports with expected metadata."""
    assert __version__


def test_cli_help_runs() -> None:
    """Ensure CLI wiring is operational."""
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "codetag" in result.stdout


def test_version_command_prints_version() -> None:
    """Version command should echo the package version."""
    result = CliRunner().invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_taggers_command_lists_builtins() -> None:
    """All built-in tagger types should be listed."""
    result = CliRunner().invoke(app, ["taggers"])
    assert result.exit_code == 0
    for name in ("scm", "lang_path", "lang_shebang", "git_remote", "hg_remote"):
        assert name in result.stdout


def test_root_main_py_help_runs() -> None:
    """Root main.py shim should expose the CLI entrypoint."""
    repo_root = Path(__file__).resolve().parents[2]
    result = subprocess.run(
        [sys.executable, "main.py", "--help"],
        cwd=repo_root,
        capture_output=True,
        text=True,
        check=False,
    )
    assert result.returncode == 0
    assert "codetag" in result.stdout
