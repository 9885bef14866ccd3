"""
Scanner backed by a CycloneDX report produced by an external scanner.
"""

from pathlib import Path
from typing import List

from loguru import logger

from ..models import Bom, ProjectModule
from ..writer import read_bom
from .base import Scanner


class ReportScanner(Scanner):
    """Loads scan results from a CycloneDX JSON file."""

    def __init__(self, report_path: Path):
        self.report_path = report_path

    def scan(self, modules: List[ProjectModule]) -> Bom:
        logger.info(f"Loading scan report {self.report_path} for {len(modules)} modules")
        return read_bom(self.report_path)
