"""
Configuration for CBOM generation.

Settings are read from the environment once, at process start, and handed
to the generator explicitly.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CiProvenance(BaseModel):
    """Where the scanned revision came from."""
    server_url: Optional[str] = None
    repository: Optional[str] = None
    ref_name: Optional[str] = None
    sha: Optional[str] = None

    @property
    def git_url(self) -> Optional[str]:
        if self.server_url and self.repository:
            return f"{self.server_url}/{self.repository}"
        return None

    @property
    def commit(self) -> Optional[str]:
        """Abbreviated commit hash."""
        if self.sha:
            return self.sha[:7]
        return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore", env_ignore_empty=True)

    project_dir: Path = Field(default=Path("."), validation_alias="GITHUB_WORKSPACE")
    output_dir: Path = Field(default=Path("cbom"), validation_alias="CBOMKIT_OUT_DIR")

    # Java scanning
    java_jar_dir: Optional[Path] = Field(default=None, validation_alias="CBOMKIT_JAVA_JAR_DIR")
    java_require_build: bool = Field(default=True, validation_alias="CBOMKIT_JAVA_REQUIRE_BUILD")

    # CI provenance
    git_server_url: Optional[str] = Field(default=None, validation_alias="GITHUB_SERVER_URL")
    git_repository: Optional[str] = Field(default=None, validation_alias="GITHUB_REPOSITORY")
    git_ref_name: Optional[str] = Field(default=None, validation_alias="GITHUB_REF_NAME")
    git_sha: Optional[str] = Field(default=None, validation_alias="GITHUB_SHA")

    # File the pattern line is appended to for downstream automation
    github_output: Optional[Path] = Field(default=None, validation_alias="GITHUB_OUTPUT")

    @field_validator("java_require_build", mode="before")
    @classmethod
    def parse_flag(cls, value):
        """Only "true", in any case, enables the flag. Any other text disables it."""
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return value

    @property
    def provenance(self) -> CiProvenance:
        return CiProvenance(
            server_url=self.git_server_url,
            repository=self.git_repository,
            ref_name=self.git_ref_name,
            sha=self.git_sha,
        )
