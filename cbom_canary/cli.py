"""
Command-line interface for CBOM Canary.
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import click
from pydantic import ValidationError
from loguru import logger
from rich.console import Console
from rich.table import Table

from . import __version__
from .assembler import BomAssembler
from .config import Settings
from .detectors import ModuleIndexer
from .exceptions import CbomError
from .generator import CbomGenerator, GenerationResult
from .models import Language
from .partitioner import ModulePartitioner
from .scanners.base import LanguagePipeline
from .scanners.java import JavaPipeline
from .scanners.python import PythonPipeline
from .scanners.report import ReportScanner
from .writer import DocumentWriter, read_bom

console = Console()

LANGUAGE_CHOICES = [language.value for language in Language]


def _parse_reports(values: Tuple[str, ...]) -> Dict[Language, Path]:
    reports = {}
    for value in values:
        language, sep, path = value.partition("=")
        if not sep or language not in LANGUAGE_CHOICES:
            raise click.BadParameter(
                f"expected LANG=FILE with LANG one of {', '.join(LANGUAGE_CHOICES)}, got {value!r}",
                param_hint="--scan-report",
            )
        reports[Language(language)] = Path(path)
    return reports


def _load_settings(overrides: Dict[str, Path]) -> Settings:
    try:
        return Settings(**overrides)
    except ValidationError as e:
        console.print(f"❌ Invalid configuration: {e}")
        sys.exit(1)


def build_pipelines(settings: Settings, reports: Dict[Language, Path]) -> List[LanguagePipeline]:
    """Create a pipeline for every language that has a scan report."""
    pipelines: List[LanguagePipeline] = []
    for language, report in reports.items():
        factory = lambda context, report=report: ReportScanner(report)
        if language == Language.JAVA:
            pipelines.append(JavaPipeline(
                settings.project_dir,
                factory,
                jar_dir=settings.java_jar_dir,
                require_build=settings.java_require_build,
            ))
        else:
            pipelines.append(PythonPipeline(settings.project_dir, factory))
    return pipelines


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool):
    """CBOM Canary - Cryptography Bill of Materials assembly"""
    logger.remove()
    if verbose:
        logger.add(sys.stderr, level="DEBUG")
    else:
        logger.add(sys.stderr, level="INFO")


@cli.command()
@click.argument("project_path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--scan-report", "-r", "scan_reports", multiple=True, required=True,
              help="Scanner output per language, as LANG=FILE")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False, path_type=Path),
              help="Output directory (default: $CBOMKIT_OUT_DIR or ./cbom)")
def generate(project_path: Path, scan_reports: Tuple[str, ...], output_dir: Optional[Path]):
    """Generate module CBOMs and the consolidated CBOM for a project."""
    reports = _parse_reports(scan_reports)

    overrides = {"project_dir": project_path}
    if output_dir is not None:
        overrides["output_dir"] = output_dir
    settings = _load_settings(overrides)

    generator = CbomGenerator(settings, build_pipelines(settings, reports))
    try:
        result = generator.generate()
    except CbomError as e:
        console.print(f"❌ CBOM generation failed: {e}")
        sys.exit(1)

    console.print(_summary_table(result))
    if result.failed:
        console.print(f"⚠️ Could not write: {', '.join(result.failed)}")

    if settings.github_output is not None:
        generator.notify()
    click.echo(f"pattern={generator.output_pattern}")


@cli.command()
@click.argument("bom_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("project_path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--language", "-l", type=click.Choice(LANGUAGE_CHOICES), default=Language.JAVA.value,
              help="Language whose build modules define the split")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False, path_type=Path),
              help="Output directory (default: $CBOMKIT_OUT_DIR or ./cbom)")
def split(bom_file: Path, project_path: Path, language: str, output_dir: Optional[Path]):
    """Split an existing CBOM into one CBOM per project module."""
    overrides = {"project_dir": project_path}
    if output_dir is not None:
        overrides["output_dir"] = output_dir
    settings = _load_settings(overrides)

    try:
        bom = read_bom(bom_file)
    except ValueError as e:
        console.print(f"❌ Could not read {bom_file}: {e}")
        sys.exit(1)

    modules = ModuleIndexer(project_path, Language(language)).index()
    assembler = BomAssembler(project_path, settings.provenance)
    writer = DocumentWriter(settings.output_dir)
    settings.output_dir.mkdir(parents=True, exist_ok=True)

    written = 0
    for module, module_bom in ModulePartitioner(project_path).partition(bom, modules):
        if writer.write(assembler.stamp_metadata(module_bom, module), module) is not None:
            written += 1

    console.print(f"✅ Wrote {written} module CBOMs to {settings.output_dir}")


@cli.command()
@click.argument("project_path", type=click.Path(exists=True, file_okay=False, path_type=Path))
def detect(project_path: Path):
    """Detect Java and Python build modules in a project."""
    table = Table(title="Detected Modules")
    table.add_column("Identifier", style="cyan", no_wrap=True)
    table.add_column("Language", style="green")
    table.add_column("Path", style="blue")
    table.add_column("Depth", style="yellow")

    found = 0
    for language in Language:
        for module in ModuleIndexer(project_path, language).index():
            table.add_row(
                module.identifier or "(root)",
                language.value,
                str(module.path),
                str(module.depth),
            )
            found += 1

    if not found:
        console.print("❌ No build modules found")
        return

    console.print(table)


def _summary_table(result: GenerationResult) -> Table:
    table = Table(title="Generated CBOMs")
    table.add_column("Module", style="cyan")
    table.add_column("Components", style="green")
    table.add_column("Findings", style="yellow")

    for identifier, bom in result.module_boms.items():
        table.add_row(identifier, str(len(bom.components)), str(bom.finding_count))
    table.add_row(
        "(consolidated)",
        str(len(result.consolidated.components)),
        str(result.consolidated.finding_count),
    )
    return table


if __name__ == "__main__":
    cli()
