"""
CBOM generation across all configured languages.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from .assembler import BomAssembler
from .config import Settings
from .models import Bom, ProjectModule
from .partitioner import ModulePartitioner
from .scanners.base import LanguagePipeline
from .writer import DocumentWriter


@dataclass
class GenerationResult:
    """Outcome of a generation run."""
    consolidated: Bom
    module_boms: Dict[str, Bom] = field(default_factory=dict)  # keyed by module identifier
    written: List[Path] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)  # file names that could not be written


class CbomGenerator:
    """Generates the project CBOM and one CBOM per module."""

    def __init__(self, settings: Settings, pipelines: List[LanguagePipeline]):
        """Initialize CBOM generator.

        Args:
            settings: Run configuration
            pipelines: Language pipelines, run in order
        """
        self.settings = settings
        self.pipelines = pipelines
        self.project_dir = settings.project_dir.resolve()
        self.assembler = BomAssembler(self.project_dir, settings.provenance)
        self.partitioner = ModulePartitioner(self.project_dir)
        self.writer = DocumentWriter(settings.output_dir)

    @property
    def output_pattern(self) -> str:
        return self.writer.output_pattern

    def generate(self) -> GenerationResult:
        """Scan every language, write module CBOMs and the consolidated CBOM.

        Returns:
            Generation result holding the consolidated CBOM

        Raises:
            CbomError: If a language is misconfigured or lacks required build output
        """
        logger.info(f"Creating cbom output dir {self.settings.output_dir}")
        self.settings.output_dir.mkdir(parents=True, exist_ok=True)

        language_boms: List[Bom] = []
        modules: Dict[str, ProjectModule] = {}
        module_boms: Dict[str, Bom] = {}

        for pipeline in self.pipelines:
            logger.info(f"Generating {pipeline.language.value} CBOM for {self.project_dir}")
            bom, language_modules = pipeline.run()
            language_boms.append(bom)

            for module, module_bom in self.partitioner.partition(bom, language_modules):
                existing = module_boms.get(module.identifier)
                if existing is not None:
                    # Same module identifier from another language: one document for both
                    logger.info(f"Combining {pipeline.language.value} findings into module {module.identifier}")
                    module_bom = self.assembler.merge([existing, module_bom])
                modules.setdefault(module.identifier, module)
                module_boms[module.identifier] = module_bom

        result = GenerationResult(consolidated=self.assembler.merge(language_boms))

        for identifier, module_bom in module_boms.items():
            module = modules[identifier]
            stamped = self.assembler.stamp_metadata(module_bom, module)
            result.module_boms[identifier] = stamped
            self._write(result, stamped, module)

        result.consolidated = self.assembler.stamp_metadata(result.consolidated)
        self._write(result, result.consolidated, None)

        logger.info(
            f"Generated {len(result.written)} CBOMs with {result.consolidated.finding_count} findings"
        )
        return result

    def _write(self, result: GenerationResult, bom: Bom, module: Optional[ProjectModule]):
        path = self.writer.write(bom, module)
        if path is None:
            result.failed.append(self.writer.file_name(module))
        else:
            result.written.append(path)

    def notify(self) -> bool:
        """Publish the output pattern for downstream automation."""
        return self.writer.write_notification(self.settings.github_output)
