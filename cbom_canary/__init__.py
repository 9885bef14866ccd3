"""
CBOM Canary - Cryptography Bill of Materials assembly

Merges per-language crypto scan results into a consolidated CBOM and splits
it into one CycloneDX document per project module.
"""

__version__ = "0.1.0"
__author__ = "Code Canary Team"

from .assembler import BomAssembler
from .generator import CbomGenerator
from .partitioner import ModulePartitioner
from .writer import DocumentWriter

__all__ = [
    "BomAssembler",
    "CbomGenerator",
    "ModulePartitioner",
    "DocumentWriter",
]
