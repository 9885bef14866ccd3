"""
Python scan pipeline.
"""

from ..detectors import PythonModuleIndexer
from ..models import Language
from .base import Indexer, LanguagePipeline


class PythonPipeline(LanguagePipeline):
    """Scans Python distributions. Source is scanned as-is, no build needed."""

    language = Language.PYTHON

    def create_indexer(self) -> Indexer:
        return PythonModuleIndexer(self.project_dir)
