"""Tests for the command-line interface."""

import json
import tempfile
from pathlib import Path

import pytest
from click.testing import CliRunner

from swarmsight import __version__
from swarmsight.checkers import external_checker
from swarmsight.cli.main import cli


CRITICAL_RUST = "fn main() {\n    let p = Box::into_raw(b);\n}\n"


@pytest.fixture(autouse=True)
def no_tools(monkeypatch):
    """Keep CLI scans independent of installed tools."""
    monkeypatch.setattr(external_checker.shutil, "which", lambda name: None)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def make_project(directory: str) -> Path:
    root = Path(directory)
    (root / "src").mkdir()
    (root / "src" / "main.rs").write_text(CRITICAL_RUST)
    return root


class TestVersion:
    """Tests for version output."""

    def test_version_command(self, runner):
        """Test the version subcommand."""
        result = runner.invoke(cli, ["version"])

        assert result.exit_code == 0
        assert f"SwarmSight {__version__}" in result.output

    def test_version_option(self, runner):
        """Test --version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestScanCommand:
    """Tests for the scan command."""

    def test_scan_writes_report(self, runner):
        """Test a scan writes the report file and exits 0."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = make_project(tmpdir)
            report = root / "out" / "report.json"

            result = runner.invoke(cli, ["scan", str(root), "-c", "rudra", "-o", str(report)])

            assert result.exit_code == 0, result.output
            data = json.loads(report.read_text())
            assert data["summary"]["critical"] == 1
            assert data["score"]["score"] == 96
            assert data["score"]["rating"] == "Good"
            assert data["findings"][0]["file"] == "src/main.rs"

    def test_scan_sarif_format(self, runner):
        """Test the output format flag."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = make_project(tmpdir)
            report = root / "report.sarif"

            result = runner.invoke(cli, ["scan", str(root), "-f", "sarif", "-o", str(report)])

            assert result.exit_code == 0, result.output
            assert json.loads(report.read_text())["version"] == "2.1.0"

    def test_ci_gate_fails(self, runner):
        """Test --ci exits 1 when findings reach --fail-on."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = make_project(tmpdir)
            report = root / "report.json"

            result = runner.invoke(cli, [
                "scan", str(root), "--ci", "--fail-on", "high", "-o", str(report),
            ])

            assert result.exit_code == 1
            assert report.exists()

    def test_ci_gate_passes(self, runner):
        """Test --ci exits 0 when nothing reaches --fail-on."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "main.rs").write_text("fn main() {}\n")

            result = runner.invoke(cli, ["scan", str(root), "--ci", "-o", str(root / "report.json")])

            assert result.exit_code == 0, result.output

    def test_severity_filter(self, runner):
        """Test the severity floor flag."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = make_project(tmpdir)
            (root / "src" / "lib.rs").write_text("let v = a.unwrap();\n")
            report = root / "report.json"

            result = runner.invoke(cli, [
                "scan", str(root), "-c", "rudra", "-s", "critical", "-o", str(report),
            ])

            assert result.exit_code == 0, result.output
            data = json.loads(report.read_text())
            assert [f["rule"] for f in data["findings"]] == ["memory-transmutation"]

    def test_config_file(self, runner):
        """Test options are read from a config file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = make_project(tmpdir)
            report = root / "report.md"
            config = root / "swarmsight.yml"
            config.write_text(f"format: markdown\noutput: {report}\ncheckers: rudra\n")

            result = runner.invoke(cli, ["scan", str(root), "--config", str(config)])

            assert result.exit_code == 0, result.output
            assert report.read_text().startswith("# 🔍 SwarmSight Security Report")

    def test_unsupported_format(self, runner):
        """Test an unknown format exits 1 before scanning."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = make_project(tmpdir)

            result = runner.invoke(cli, ["scan", str(root), "-f", "pdf", "-o", str(root / "r.pdf")])

            assert result.exit_code == 1
            assert not (root / "r.pdf").exists()

    def test_missing_path(self, runner):
        """Test a missing project path exits 1."""
        result = runner.invoke(cli, ["scan", "/nonexistent/swarmsight/project"])

        assert result.exit_code == 1

    def test_invalid_severity_choice(self, runner):
        """Test click rejects an unknown severity."""
        result = runner.invoke(cli, ["scan", ".", "-s", "severe"])

        assert result.exit_code == 2


class TestListCheckers:
    """Tests for the list-checkers command."""

    def test_list(self, runner):
        """Test listing all checkers."""
        result = runner.invoke(cli, ["list-checkers"])
        assert result.exit_code == 0

    def test_list_by_language(self, runner):
        """Test filtering by language."""
        result = runner.invoke(cli, ["list-checkers", "--language", "go"])
        assert result.exit_code == 0


class TestInstallChecker:
    """Tests for the install-checker command."""

    def test_unknown_checker(self, runner):
        """Test an unknown checker exits 1."""
        result = runner.invoke(cli, ["install-checker", "nope"])
        assert result.exit_code == 1

    def test_builtin_checker(self, runner):
        """Test a pattern checker needs no install."""
        result = runner.invoke(cli, ["install-checker", "rudra"])
        assert result.exit_code == 0

    def test_prints_install_command(self, runner):
        """Test the install command is printed, not run."""
        result = runner.invoke(cli, ["install-checker", "kani"])

        assert result.exit_code == 0
        assert "cargo install --locked kani-verifier && cargo kani setup" in result.output
