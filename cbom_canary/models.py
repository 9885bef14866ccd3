"""
Data models for CBOM documents, components, evidence and project modules.
"""

import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path, PurePath
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer


def new_serial_number() -> str:
    """Generate a CycloneDX serial number."""
    return f"urn:uuid:{uuid.uuid4()}"


class Language(Enum):
    """Supported source languages."""
    JAVA = "java"
    PYTHON = "python"


class CycloneDXModel(BaseModel):
    """Base model accepting wire aliases and field names, keeping unknown fields."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @model_serializer(mode="wrap")
    def _drop_unset_fields(self, handler: SerializerFunctionWrapHandler) -> Dict[str, Any]:
        """Omit declared fields that are None. Unknown fields keep explicit nulls."""
        data = handler(self)
        declared = set()
        for name, field in type(self).model_fields.items():
            declared.add(name)
            if field.alias:
                declared.add(field.alias)
        return {key: value for key, value in data.items() if value is not None or key not in declared}


class Occurrence(CycloneDXModel):
    """Evidence that a component was found at a source location."""
    location: str  # Path relative to the project root
    line: Optional[int] = None
    offset: Optional[int] = None
    symbol: Optional[str] = None
    additional_context: Optional[str] = Field(default=None, alias="additionalContext")


class Evidence(CycloneDXModel):
    """Component evidence block."""
    occurrences: List[Occurrence] = Field(default_factory=list)


class Component(CycloneDXModel):
    """A detected cryptographic asset."""
    ref: str = Field(alias="bom-ref")
    name: str
    type: str = "cryptographic-asset"
    crypto_properties: Optional[Dict[str, Any]] = Field(default=None, alias="cryptoProperties")
    evidence: Optional[Evidence] = None

    @property
    def occurrences(self) -> List[Occurrence]:
        """Occurrences of this component, empty when it carries no evidence."""
        if self.evidence is None:
            return []
        return self.evidence.occurrences


class Dependency(CycloneDXModel):
    """Directed edge from one component to the components it depends on."""
    ref: str
    depends_on: List[str] = Field(default_factory=list, alias="dependsOn")


class Property(CycloneDXModel):
    """Free-form name/value pair."""
    name: str
    value: str


class OrganizationalEntity(CycloneDXModel):
    name: str


class ToolService(CycloneDXModel):
    name: str
    provider: Optional[OrganizationalEntity] = None


class ToolInformation(CycloneDXModel):
    services: List[ToolService] = Field(default_factory=list)


class Metadata(CycloneDXModel):
    """Document metadata: generation time, tool identity and provenance."""
    timestamp: Optional[datetime] = None
    # CycloneDX 1.4 documents carry a plain list of tools
    tools: Optional[Union[ToolInformation, List[Dict[str, Any]]]] = None
    properties: List[Property] = Field(default_factory=list)

    def get_property(self, name: str) -> Optional[str]:
        """Get the value of a metadata property by name."""
        for prop in self.properties:
            if prop.name == name:
                return prop.value
        return None


class Bom(CycloneDXModel):
    """Cryptography Bill of Materials."""
    bom_format: str = Field(default="CycloneDX", alias="bomFormat")
    spec_version: str = Field(default="1.6", alias="specVersion")
    serial_number: str = Field(default_factory=new_serial_number, alias="serialNumber")
    version: int = 1
    metadata: Optional[Metadata] = None
    components: List[Component] = Field(default_factory=list)
    dependencies: List[Dependency] = Field(default_factory=list)

    def component_refs(self) -> List[str]:
        """Get the refs of all components, in document order."""
        return [component.ref for component in self.components]

    def get_component(self, ref: str) -> Optional[Component]:
        """Get component by its ref."""
        for component in self.components:
            if component.ref == ref:
                return component
        return None

    def locations(self) -> List[str]:
        """Get every occurrence location, one entry per occurrence."""
        return [
            occurrence.location
            for component in self.components
            for occurrence in component.occurrences
        ]

    @property
    def finding_count(self) -> int:
        """Total number of occurrences across all components."""
        return sum(len(component.occurrences) for component in self.components)


class ProjectModule(BaseModel):
    """A build module discovered inside the project."""
    identifier: str  # Empty string denotes the project root
    path: Path

    @property
    def is_root(self) -> bool:
        return self.identifier == ""

    @property
    def depth(self) -> int:
        """Number of segments in the module path."""
        return len(self.path.parts)

    def relative_to(self, project_dir: Path) -> PurePath:
        """Module path relative to the project directory."""
        return self.path.resolve().relative_to(project_dir.resolve())
