"""
Base classes for language scan pipelines.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from loguru import logger

from ..models import Bom, Language, ProjectModule


@dataclass
class ScanContext:
    """Inputs a scanner needs besides the modules to scan."""
    project_dir: Path
    dependency_dir: Optional[Path] = None  # e.g. dependency jars for Java
    class_dirs: List[Path] = field(default_factory=list)  # compiled build output


class Scanner(ABC):
    """Detects cryptographic assets in a set of modules."""

    @abstractmethod
    def scan(self, modules: List[ProjectModule]) -> Bom:
        """Scan modules and return a flat CBOM.

        Args:
            modules: Modules discovered by the indexer

        Returns:
            CBOM with components, their occurrences and dependencies
        """
        pass


class Indexer(ABC):
    """Discovers build modules in a project."""

    @abstractmethod
    def index(self, module_filter: Optional[Callable[[ProjectModule], bool]] = None) -> List[ProjectModule]:
        """Discover modules.

        Args:
            module_filter: Optional predicate restricting the result

        Returns:
            Ordered list of modules
        """
        pass


ScannerFactory = Callable[[ScanContext], Scanner]


class LanguagePipeline(ABC):
    """Indexes and scans a project for one language."""

    language: Language

    def __init__(self, project_dir: Path, scanner_factory: ScannerFactory,
                 indexer: Optional[Indexer] = None):
        """Initialize pipeline.

        Args:
            project_dir: Project root directory
            scanner_factory: Builds the scanner once the scan context is known
            indexer: Module indexer, defaults to the language's built-in one
        """
        self.project_dir = project_dir.resolve()
        self.scanner_factory = scanner_factory
        self.indexer = indexer or self.create_indexer()

    @abstractmethod
    def create_indexer(self) -> Indexer:
        """Create the default module indexer for this language."""
        pass

    def check_prerequisites(self) -> ScanContext:
        """Validate configuration and collect scan inputs.

        Raises:
            CbomError: If the language cannot be scanned
        """
        return ScanContext(project_dir=self.project_dir)

    def run(self) -> Tuple[Bom, List[ProjectModule]]:
        """Index and scan the project.

        Returns:
            The language CBOM and the modules it was scanned from
        """
        context = self.check_prerequisites()
        modules = self.indexer.index()
        logger.info(f"Scanning {len(modules)} {self.language.value} modules")

        scanner = self.scanner_factory(context)
        bom = scanner.scan(modules)
        logger.info(
            f"{self.language.value} scan found {len(bom.components)} components "
            f"with {bom.finding_count} findings"
        )
        return bom, modules
