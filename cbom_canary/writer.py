"""
Serialization and persistence of CBOM documents.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from .models import Bom, ProjectModule

CBOM_BASE_NAME = "cbom"


def serialize_bom(bom: Bom) -> str:
    """Serialize a CBOM to CycloneDX JSON."""
    return bom.model_dump_json(by_alias=True, indent=2)


def parse_bom(text: str) -> Bom:
    """Parse CycloneDX JSON into a CBOM."""
    return Bom.model_validate_json(text)


def read_bom(path: Path) -> Bom:
    """Read a CycloneDX JSON file."""
    return parse_bom(path.read_text(encoding="utf-8"))


def count_findings(bom: Bom) -> int:
    """Count occurrences across all components of a CBOM."""
    return bom.finding_count


class DocumentWriter:
    """Writes CBOM documents into an output directory."""

    def __init__(self, output_dir: Path, base_name: str = CBOM_BASE_NAME):
        """Initialize writer.

        Args:
            output_dir: Directory documents are written to
            base_name: File name prefix shared by all documents
        """
        self.output_dir = output_dir
        self.base_name = base_name

    @property
    def output_pattern(self) -> str:
        """Glob pattern matching every document this writer produces."""
        return f"{self.output_dir.as_posix()}/{self.base_name}*.json"

    def file_name(self, module: Optional[ProjectModule] = None) -> str:
        """Derive the document file name for a module.

        The consolidated document (no module, or the project root) is
        ``<base>.json``. Module documents are ``<base>_<identifier>.json`` with
        path separators in the identifier replaced by dots.
        """
        if module is None or module.is_root:
            return f"{self.base_name}.json"
        dotted = module.identifier.replace("/", ".").replace("\\", ".")
        return f"{self.base_name}_{dotted}.json"

    def write(self, bom: Bom, module: Optional[ProjectModule] = None) -> Optional[Path]:
        """Serialize and write a CBOM.

        Failures are logged and swallowed so that one bad document does not
        stop the remaining ones from being written.

        Args:
            bom: CBOM to write
            module: Module the CBOM belongs to, None for the consolidated CBOM

        Returns:
            Path of the written file, or None if writing failed
        """
        cbom_file = self.output_dir / self.file_name(module)
        try:
            content = serialize_bom(bom)
            num_findings = count_findings(bom)
            if num_findings == 0:
                logger.warning(f"CBOM {cbom_file} has no findings")
            logger.info(f"Writing cbom {cbom_file} with {num_findings} findings")
            cbom_file.write_text(content, encoding="utf-8")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write cbom {cbom_file}: {e}")
            return None
        return cbom_file

    def write_notification(self, target: Optional[Path]) -> bool:
        """Append the output pattern line to a CI output file.

        Args:
            target: File to append to, usually ``$GITHUB_OUTPUT``

        Returns:
            True if the line was written
        """
        if target is None:
            logger.warning("No output file for the cbom pattern, skipping notification")
            return False
        try:
            with open(target, "a", encoding="utf-8") as fh:
                fh.write(f"pattern={self.output_pattern}\n")
        except OSError as e:
            logger.error(f"Failed to write cbom pattern to {target}: {e}")
            return False
        return True
