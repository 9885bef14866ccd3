#!/usr/bin/env python3
"""
End-to-end tests for CBOM generation.
"""

import tempfile
from pathlib import Path
from typing import List

import pytest

from cbom_canary.config import Settings
from cbom_canary.exceptions import ConfigurationError
from cbom_canary.generator import CbomGenerator
from cbom_canary.models import Bom, Component, Dependency, Evidence, Occurrence, ProjectModule
from cbom_canary.scanners.base import Scanner
from cbom_canary.scanners.java import JavaPipeline
from cbom_canary.scanners.python import PythonPipeline
from cbom_canary.writer import read_bom


class StaticScanner(Scanner):
    """Scanner returning a fixed CBOM."""

    def __init__(self, bom: Bom):
        self.bom = bom
        self.scanned: List[ProjectModule] = []

    def scan(self, modules: List[ProjectModule]) -> Bom:
        self.scanned = modules
        return self.bom


def make_component(ref: str, *locations: str) -> Component:
    return Component(
        ref=ref,
        name=ref,
        evidence=Evidence(occurrences=[Occurrence(location=loc) for loc in locations]),
    )


def make_project(root: Path):
    """Project root with module svc/a and nested module svc/a/sub."""
    for directory in (root, root / "svc" / "a", root / "svc" / "a" / "sub"):
        directory.mkdir(parents=True, exist_ok=True)
        (directory / "pyproject.toml").write_text("[project]\nname = 'x'\n")


@pytest.fixture
def project():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir) / "project"
        make_project(root)
        yield root


@pytest.fixture
def python_bom():
    return Bom(
        components=[
            make_component("aes", "svc/a/X.py", "svc/a/sub/Y.py"),
            make_component("rsa", "svc/a/sub/Y.py"),
            make_component("sha", "Z.py"),
        ],
        dependencies=[
            Dependency(ref="aes", depends_on=["rsa", "sha"]),
            Dependency(ref="sha", depends_on=["aes"]),
        ],
    )


def settings_for(project: Path) -> Settings:
    return Settings(project_dir=project, output_dir=project / "cbom", github_output=project / "gh_output")


class TestCbomGenerator:
    """Test generation of module and consolidated CBOMs."""

    def test_end_to_end(self, project, python_bom):
        """Nested module, parent module and consolidated documents split the findings."""
        settings = settings_for(project)
        scanner = StaticScanner(python_bom)
        generator = CbomGenerator(settings, [PythonPipeline(project, lambda ctx: scanner)])

        result = generator.generate()

        out = project / "cbom"
        assert sorted(p.name for p in out.iterdir()) == [
            "cbom.json", "cbom_svc.a.json", "cbom_svc.a.sub.json",
        ]
        assert [m.identifier for m in scanner.scanned] == ["", "svc/a", "svc/a/sub"]

        sub = read_bom(out / "cbom_svc.a.sub.json")
        assert sorted(sub.locations()) == ["svc/a/sub/Y.py", "svc/a/sub/Y.py"]
        assert sub.dependencies == [Dependency(ref="aes", depends_on=["rsa"])]
        assert sub.metadata.get_property("subfolder") == "svc/a/sub"

        parent = read_bom(out / "cbom_svc.a.json")
        assert parent.locations() == ["svc/a/X.py"]
        assert parent.dependencies == []
        assert parent.metadata.get_property("subfolder") == "svc/a"

        consolidated = read_bom(out / "cbom.json")
        assert consolidated.components == python_bom.components
        assert consolidated.dependencies == python_bom.dependencies
        assert consolidated.metadata.get_property("subfolder") is None
        assert result.consolidated.finding_count == 4
        assert result.failed == []

    def test_same_module_from_two_languages(self, project):
        """Findings of both languages for one module land in one document."""
        (project / "svc" / "a" / "pom.xml").write_text("<project/>")
        jars = project / "jars"
        jars.mkdir()
        (project / "svc" / "a" / "target" / "classes").mkdir(parents=True)

        java_bom = Bom(components=[make_component("java:aes", "svc/a/Crypto.java")])
        python_bom = Bom(components=[make_component("py:sha", "svc/a/hash.py")])
        settings = settings_for(project)
        pipelines = [
            JavaPipeline(project, lambda ctx: StaticScanner(java_bom), jar_dir=jars),
            PythonPipeline(project, lambda ctx: StaticScanner(python_bom)),
        ]

        result = CbomGenerator(settings, pipelines).generate()

        module_doc = read_bom(project / "cbom" / "cbom_svc.a.json")
        assert sorted(module_doc.component_refs()) == ["java:aes", "py:sha"]
        assert sorted(result.consolidated.component_refs()) == ["java:aes", "py:sha"]

    def test_misconfigured_language_is_fatal(self, project, python_bom):
        settings = settings_for(project)
        pipelines = [JavaPipeline(project, lambda ctx: StaticScanner(python_bom))]

        with pytest.raises(ConfigurationError):
            CbomGenerator(settings, pipelines).generate()

    def test_write_failure_does_not_abort(self, project, python_bom):
        """A module document that cannot be written is skipped."""
        settings = settings_for(project)
        out = project / "cbom"
        out.mkdir()
        # A directory where the file should go makes the write fail
        (out / "cbom_svc.a.json").mkdir()

        result = CbomGenerator(settings, [PythonPipeline(project, lambda ctx: StaticScanner(python_bom))]).generate()

        assert result.failed == ["cbom_svc.a.json"]
        assert (out / "cbom_svc.a.sub.json").is_file()
        assert (out / "cbom.json").is_file()

    def test_notify(self, project, python_bom):
        settings = settings_for(project)
        generator = CbomGenerator(settings, [])

        assert generator.notify()
        assert settings.github_output.read_text() == f"pattern={generator.output_pattern}\n"
        assert generator.output_pattern.endswith("/cbom/cbom*.json")
