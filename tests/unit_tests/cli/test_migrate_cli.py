"""Unit tests for CLI command behavior."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from framework_migrator.application.results import BatchResult
from framework_migrator.cli import cli as cli_module
from framework_migrator.errors import ProfileError

runner = CliRunner()

NAV_SOURCE = """\
import Link from 'next/link';

export function Nav() {
  return <Link href="/about">About</Link>;
}
"""


def test_help_shows_commands() -> None:
    """Ensure top-level help lists the migration subcommands."""
    result = runner.invoke(cli_module.app, ["--help"])

    assert result.exit_code == 0
    for command in ("convert", "transform", "analyze", "doctor"):
        assert command in result.output


def test_transform_prints_code(tmp_path: Path) -> None:
    """Print the rewritten module to stdout."""
    source = tmp_path / "Nav.jsx"
    source.write_text(NAV_SOURCE, encoding="utf-8")

    result = runner.invoke(cli_module.app, ["transform", str(source)])

    assert result.exit_code == 0
    assert '<Link to="/about">About</Link>' in result.stdout
    assert "import { Link } from 'react-router-dom';" in result.stdout


def test_transform_writes_output_file(tmp_path: Path) -> None:
    """Write the rewritten module when --output is given."""
    source = tmp_path / "Nav.jsx"
    source.write_text(NAV_SOURCE, encoding="utf-8")
    target = tmp_path / "out" / "Nav.jsx"

    result = runner.invoke(cli_module.app, ["transform", str(source), "-o", str(target)])

    assert result.exit_code == 0
    assert "Saved" in result.output
    assert "react-router-dom" in target.read_text(encoding="utf-8")


def test_transform_json(tmp_path: Path) -> None:
    """Emit code, changes and warnings as JSON."""
    source = tmp_path / "Nav.jsx"
    source.write_text(NAV_SOURCE, encoding="utf-8")

    result = runner.invoke(cli_module.app, ["transform", str(source), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["modified"] is True
    assert "Link attribute 'href' renamed to 'to'" in payload["changes"]


def test_analyze_prints_facts(tmp_path: Path) -> None:
    """Print the fact sheet as JSON."""
    source = tmp_path / "Nav.jsx"
    source.write_text(NAV_SOURCE, encoding="utf-8")

    result = runner.invoke(cli_module.app, ["analyze", str(source)])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["components"] == ["Nav"]
    assert payload["imports"][0]["source_path"] == "next/link"


def test_analyze_parse_error_exit_code(tmp_path: Path) -> None:
    """Parse failures exit with the ParseError exit code."""
    source = tmp_path / "bad.js"
    source.write_text("const = ;\n", encoding="utf-8")

    result = runner.invoke(cli_module.app, ["analyze", str(source)])

    assert result.exit_code == 2
    assert "ParseError" in result.output


def test_convert_invokes_api(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure convert forwards flags to the API layer."""
    seen: dict[str, object] = {}

    def fake_convert_directory(**kwargs: object) -> BatchResult:
        seen.update(kwargs)
        return BatchResult(total_files=4, details=("pages/index.jsx -> src/pages/Home.jsx",))

    monkeypatch.setattr("framework_migrator.api.convert_directory", fake_convert_directory)

    result = runner.invoke(
        cli_module.app,
        [
            "convert",
            str(tmp_path),
            "--no-routing",
            "--strip-types",
            "--profile",
            "nextjs-to-react",
        ],
    )

    assert result.exit_code == 0
    assert seen["convert_routing"] is False
    assert seen["preserve_type_annotations"] is False
    assert seen["profile_name"] == "nextjs-to-react"
    assert seen["output_dir"] is None
    assert "0/4 file(s) modified (0%)" in result.output


def test_convert_reports_profile_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Profile errors exit with their own exit code."""

    def fake_convert_directory(**kwargs: object) -> BatchResult:
        raise ProfileError("Unknown profile 'x'.")

    monkeypatch.setattr("framework_migrator.api.convert_directory", fake_convert_directory)

    result = runner.invoke(cli_module.app, ["convert", str(tmp_path), "--profile", "x"])

    assert result.exit_code == 3
    assert "Unknown profile" in result.output


def test_invalid_log_level(tmp_path: Path) -> None:
    """Reject unknown log levels."""
    result = runner.invoke(cli_module.app, ["--log-level", "LOUD", "doctor"])

    assert result.exit_code != 0


def test_doctor_lists_profiles() -> None:
    """Print toolchain versions and registered profiles."""
    result = runner.invoke(cli_module.app, ["doctor"])

    assert result.exit_code == 0
    assert "Python:" in result.output
    assert "profiles: nextjs-to-react, react-to-nextjs" in result.output
