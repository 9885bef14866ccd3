"""
Java scan pipeline for Maven and Gradle projects.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from ..detectors import JavaModuleIndexer, find_class_directories
from ..exceptions import BuildRequiredError, ConfigurationError
from ..models import Language
from .base import Indexer, LanguagePipeline, ScanContext, ScannerFactory


class JavaPipeline(LanguagePipeline):
    """Scans Java modules against their dependency jars and compiled classes."""

    language = Language.JAVA

    def __init__(self, project_dir: Path, scanner_factory: ScannerFactory,
                 jar_dir: Optional[Path] = None, require_build: bool = True,
                 indexer: Optional[Indexer] = None):
        """Initialize Java pipeline.

        Args:
            project_dir: Project root directory
            scanner_factory: Builds the scanner once the scan context is known
            jar_dir: Directory holding the project's dependency jars
            require_build: Fail when no compiled classes are found
            indexer: Module indexer, defaults to Maven/Gradle discovery
        """
        super().__init__(project_dir, scanner_factory, indexer)
        self.jar_dir = jar_dir
        self.require_build = require_build

    def create_indexer(self) -> Indexer:
        return JavaModuleIndexer(self.project_dir)

    def _dependency_jar_dir(self) -> Path:
        if self.jar_dir is None:
            raise ConfigurationError("Could not load jar dependencies for java scanning")
        if not self.jar_dir.is_dir():
            raise ConfigurationError(
                f"Jar dependencies dir for java scanning does not exist or is not a directory: {self.jar_dir}"
            )
        return self.jar_dir.resolve()

    def check_prerequisites(self) -> ScanContext:
        jar_dir = self._dependency_jar_dir()

        class_dirs = find_class_directories(self.project_dir)
        if not class_dirs:
            if self.require_build:
                raise BuildRequiredError(
                    "No Java class directories found. Project must be built prior to scanning"
                )
            logger.warning(
                "No Java class directories found. Scanning Java code without prior build "
                "may produce less accurate CBOMs."
            )

        return ScanContext(
            project_dir=self.project_dir,
            dependency_dir=jar_dir,
            class_dirs=class_dirs,
        )
