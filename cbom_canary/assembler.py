"""
Assembly of CBOMs: merging language CBOMs and stamping document metadata.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .config import CiProvenance
from .models import (
    Bom, Metadata, OrganizationalEntity, ProjectModule, Property,
    ToolInformation, ToolService, new_serial_number,
)

TOOL_NAME = "CBOMkit-action"
TOOL_ORGANIZATION = "PQCA"


class BomAssembler:
    """Merges CBOMs and fills in their metadata."""

    def __init__(self, project_dir: Path, provenance: Optional[CiProvenance] = None,
                 tool_name: str = TOOL_NAME, tool_organization: str = TOOL_ORGANIZATION):
        """Initialize assembler.

        Args:
            project_dir: Project root, module subfolders are relative to it
            provenance: CI provenance attached to every document
            tool_name: Name of the generating tool
            tool_organization: Organization providing the tool
        """
        self.project_dir = project_dir.resolve()
        self.provenance = provenance or CiProvenance()
        self.tool_name = tool_name
        self.tool_organization = tool_organization

    def merge(self, boms: List[Bom]) -> Bom:
        """Concatenate components and dependencies of several CBOMs.

        Ref namespaces of the inputs are assumed to be disjoint, nothing is
        deduplicated.

        Args:
            boms: CBOMs to merge, in order

        Returns:
            New CBOM with a fresh serial number and no metadata
        """
        merged = Bom(serial_number=new_serial_number())
        for bom in boms:
            merged.components.extend(bom.components)
            merged.dependencies.extend(bom.dependencies)

        logger.debug(f"Merged {len(boms)} CBOMs into {len(merged.components)} components")
        return merged

    def stamp_metadata(self, bom: Bom, module: Optional[ProjectModule] = None) -> Bom:
        """Return a copy of a CBOM carrying fresh metadata.

        Args:
            bom: CBOM to stamp
            module: Module the CBOM describes, None for the consolidated CBOM

        Returns:
            Stamped copy of the CBOM
        """
        return bom.model_copy(update={"metadata": self.generate_metadata(module)})

    def generate_metadata(self, module: Optional[ProjectModule] = None) -> Metadata:
        """Build document metadata for a module."""
        tool = ToolService(
            name=self.tool_name,
            provider=OrganizationalEntity(name=self.tool_organization),
        )
        metadata = Metadata(
            timestamp=datetime.now(timezone.utc),
            tools=ToolInformation(services=[tool]),
        )

        # Each provenance value is optional on its own
        if self.provenance.git_url:
            metadata.properties.append(Property(name="gitUrl", value=self.provenance.git_url))
        if self.provenance.ref_name:
            metadata.properties.append(Property(name="revision", value=self.provenance.ref_name))
        if self.provenance.commit:
            metadata.properties.append(Property(name="commit", value=self.provenance.commit))

        subfolder = self.subfolder(module)
        if subfolder is not None:
            metadata.properties.append(Property(name="subfolder", value=subfolder))

        return metadata

    def subfolder(self, module: Optional[ProjectModule]) -> Optional[str]:
        """Module path relative to the project root, None for the root itself."""
        if module is None or module.path.resolve() == self.project_dir:
            return None
        return module.relative_to(self.project_dir).as_posix()
