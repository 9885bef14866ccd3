"""
Scanner contracts and per-language scan pipelines.
"""

from .base import Indexer, LanguagePipeline, ScanContext, Scanner

__all__ = [
    "Indexer",
    "LanguagePipeline",
    "ScanContext",
    "Scanner",
]
