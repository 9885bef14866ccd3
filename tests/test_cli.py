#!/usr/bin/env python3
"""
Tests for the command-line interface.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from pydantic import ValidationError

from cbom_canary.cli import cli
from cbom_canary.config import Settings
from cbom_canary.models import Bom, Component, Evidence, Occurrence
from cbom_canary.writer import read_bom, serialize_bom


def make_project(root: Path):
    for directory in (root, root / "svc" / "a"):
        directory.mkdir(parents=True, exist_ok=True)
        (directory / "setup.py").write_text("from setuptools import setup\nsetup()\n")


def report_bom() -> Bom:
    return Bom(components=[
        Component(ref="aes", name="AES", evidence=Evidence(occurrences=[
            Occurrence(location="svc/a/enc.py"),
            Occurrence(location="main.py"),
        ])),
    ])


class TestGenerateCommand:
    """Test the generate command."""

    def test_generate_from_report(self):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "project"
            make_project(root)
            report = Path(tmpdir) / "python.cdx.json"
            report.write_text(serialize_bom(report_bom()))
            out = Path(tmpdir) / "out"
            gh_output = Path(tmpdir) / "gh_output"

            with patch.dict(os.environ, {"GITHUB_OUTPUT": str(gh_output)}, clear=True):
                result = runner.invoke(cli, [
                    "generate", str(root),
                    "--scan-report", f"python={report}",
                    "--output-dir", str(out),
                ])

            assert result.exit_code == 0, result.output
            assert read_bom(out / "cbom_svc.a.json").locations() == ["svc/a/enc.py"]
            assert read_bom(out / "cbom.json").finding_count == 2
            assert f"pattern={out.as_posix()}/cbom*.json" in result.output
            assert gh_output.read_text() == f"pattern={out.as_posix()}/cbom*.json\n"

    def test_invalid_scan_report_option(self):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(cli, ["generate", tmpdir, "--scan-report", "cobol=x.json"])

            assert result.exit_code != 0

    def test_missing_java_configuration_fails(self):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            report = Path(tmpdir) / "java.cdx.json"
            report.write_text(serialize_bom(Bom()))

            with patch.dict(os.environ, {}, clear=True):
                result = runner.invoke(cli, [
                    "generate", tmpdir,
                    "--scan-report", f"java={report}",
                    "--output-dir", str(Path(tmpdir) / "out"),
                ])

            assert result.exit_code == 1
            assert "CBOM generation failed" in result.output

    def test_unrecognised_require_build_value_disables_check(self):
        """A non-boolean word in CBOMKIT_JAVA_REQUIRE_BUILD turns the build check off."""
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            report = Path(tmpdir) / "java.cdx.json"
            report.write_text(serialize_bom(Bom()))
            jars = Path(tmpdir) / "jars"
            jars.mkdir()
            env = {"CBOMKIT_JAVA_JAR_DIR": str(jars), "CBOMKIT_JAVA_REQUIRE_BUILD": "enabled"}

            with patch.dict(os.environ, env, clear=True):
                result = runner.invoke(cli, [
                    "generate", tmpdir,
                    "--scan-report", f"java={report}",
                    "--output-dir", str(Path(tmpdir) / "out"),
                ])

            assert result.exit_code == 0, result.output
            assert (Path(tmpdir) / "out" / "cbom.json").exists()

    def test_invalid_settings_reported_without_traceback(self):
        with pytest.raises(ValidationError) as excinfo:
            Settings(java_require_build=["yes"])

        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            report = Path(tmpdir) / "python.cdx.json"
            report.write_text(serialize_bom(Bom()))

            with patch("cbom_canary.cli.Settings", side_effect=excinfo.value):
                result = runner.invoke(cli, ["generate", tmpdir, "--scan-report", f"python={report}"])

            assert result.exit_code == 1
            assert "Invalid configuration" in result.output
            assert not isinstance(result.exception, ValidationError)


class TestSplitCommand:
    """Test the split command."""

    def test_split_existing_cbom(self):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "project"
            make_project(root)
            bom_file = Path(tmpdir) / "cbom.json"
            bom_file.write_text(serialize_bom(report_bom()))
            out = Path(tmpdir) / "out"

            with patch.dict(os.environ, {}, clear=True):
                result = runner.invoke(cli, [
                    "split", str(bom_file), str(root),
                    "--language", "python",
                    "--output-dir", str(out),
                ])

            assert result.exit_code == 0, result.output
            assert sorted(p.name for p in out.iterdir()) == ["cbom_svc.a.json"]
            module_bom = read_bom(out / "cbom_svc.a.json")
            assert module_bom.metadata.get_property("subfolder") == "svc/a"


class TestDetectCommand:
    """Test the detect command."""

    def test_detect_modules(self):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            make_project(root)

            result = runner.invoke(cli, ["detect", str(root)])

            assert result.exit_code == 0
            assert "svc/a" in result.output

    def test_detect_nothing(self):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(cli, ["detect", tmpdir])

            assert result.exit_code == 0
            assert "No build modules found" in result.output
