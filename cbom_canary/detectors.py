"""
Module discovery for Java and Python projects.
"""

from pathlib import Path
from typing import Callable, List, Optional, Set

from loguru import logger

from .models import Language, ProjectModule
from .scanners.base import Indexer

ModuleFilter = Callable[[ProjectModule], bool]


class ModuleIndexer(Indexer):
    """Finds build modules by looking for manifest files in a directory tree."""

    # Manifest file names marking a module root, per language
    MODULE_MARKERS = {
        Language.JAVA: {"pom.xml", "build.gradle", "build.gradle.kts"},
        Language.PYTHON: {"pyproject.toml", "setup.py", "setup.cfg"},
    }

    SKIP_DIRS = {
        '.git', '.svn', '.hg',  # Version control
        'node_modules', '__pycache__', '.pytest_cache',  # Build artifacts
        'target', 'build', 'dist', 'out',  # Build directories
        '.idea', '.vscode', '.vs',  # IDE directories
        'venv', '.venv', 'env', '.env',  # Virtual environments
    }

    def __init__(self, project_dir: Path, language: Language, max_depth: int = 10):
        """Initialize the indexer.

        Args:
            project_dir: Project root directory
            language: Language whose build manifests mark modules
            max_depth: Maximum directory depth to search
        """
        self.project_dir = project_dir.resolve()
        self.language = language
        self.max_depth = max_depth

    @property
    def markers(self) -> Set[str]:
        return self.MODULE_MARKERS[self.language]

    def index(self, module_filter: Optional[ModuleFilter] = None) -> List[ProjectModule]:
        """Discover all modules of this indexer's language.

        Args:
            module_filter: Optional predicate; only modules it accepts are returned

        Returns:
            Modules sorted by path, the project root first when it is a module
        """
        modules = []

        for directory in self._walk_directories(self.project_dir):
            if not self._is_module_root(directory):
                continue
            module = ProjectModule(
                identifier=self._identifier(directory),
                path=directory,
            )
            if module_filter is None or module_filter(module):
                modules.append(module)

        modules.sort(key=lambda m: m.identifier)
        logger.info(f"Indexed {len(modules)} {self.language.value} modules in {self.project_dir}")
        return modules

    def _identifier(self, directory: Path) -> str:
        relative = directory.relative_to(self.project_dir)
        if relative == Path("."):
            return ""
        return relative.as_posix()

    def _is_module_root(self, directory: Path) -> bool:
        return any((directory / marker).is_file() for marker in self.markers)

    def _walk_directories(self, root_path: Path) -> List[Path]:
        """Walk directory tree and return all directories up to max_depth.

        Args:
            root_path: Root directory to walk

        Returns:
            List of directory paths, root included
        """
        directories = [root_path]

        def _walk(path: Path, depth: int):
            if depth > self.max_depth:
                return

            try:
                for item in sorted(path.iterdir()):
                    if item.is_dir() and not self._should_skip_directory(item):
                        directories.append(item)
                        _walk(item, depth + 1)
            except (PermissionError, OSError):
                # Skip directories we can't read
                pass

        _walk(root_path, 1)
        return directories

    def _should_skip_directory(self, path: Path) -> bool:
        return path.name in self.SKIP_DIRS or path.name.startswith('.')


class JavaModuleIndexer(ModuleIndexer):
    """Indexes Maven and Gradle modules."""

    def __init__(self, project_dir: Path, max_depth: int = 10):
        super().__init__(project_dir, Language.JAVA, max_depth)


class PythonModuleIndexer(ModuleIndexer):
    """Indexes Python distributions (pyproject.toml, setup.py, setup.cfg)."""

    def __init__(self, project_dir: Path, max_depth: int = 10):
        super().__init__(project_dir, Language.PYTHON, max_depth)


def find_class_directories(project_dir: Path) -> List[Path]:
    """Find compiled Java output, i.e. every directory named ``classes``.

    Build directories are searched too, since that is where compilers put them.
    """
    try:
        return sorted(p.resolve() for p in project_dir.rglob("classes") if p.is_dir())
    except OSError as e:
        logger.error(f"Failed to find class directories: {e}")
        return []
