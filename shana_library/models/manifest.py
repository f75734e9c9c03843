"""Go module graph models.

Covers both what is parsed from a project's go.mod/go.work and the
rewritten versions rendered into a workspace.
"""

from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ModuleVersion(BaseModel):
    """A module path with an optional version.

    Replacement targets that are filesystem paths have an empty version.
    """

    path: str = Field(description="Module path or filesystem path")
    version: str = Field(default="", description="Semantic version, empty for local paths")

    def __str__(self) -> str:
        return f"{self.path} {self.version}" if self.version else self.path


class Requirement(BaseModel):
    """A require directive entry."""

    mod: ModuleVersion
    indirect: bool = Field(default=False, description="Marked with // indirect")


class Replacement(BaseModel):
    """A replace directive entry (old => new)."""

    old: ModuleVersion
    new: ModuleVersion

    @property
    def is_local(self) -> bool:
        """True when the replacement points at a directory instead of a version."""
        return not self.new.version


class ModFile(BaseModel):
    """Parsed or synthesized go.mod contents."""

    module: str = Field(default="", description="Module path from the module directive")
    go: str | None = Field(default=None, description="Version from the go directive")
    toolchain: str | None = Field(default=None, description="Toolchain directive, e.g. go1.22.1")
    requires: list[Requirement] = Field(default_factory=list)
    replaces: list[Replacement] = Field(default_factory=list)


class WorkFile(BaseModel):
    """Parsed or synthesized go.work contents."""

    go: str | None = None
    toolchain: str | None = None
    uses: list[str] = Field(default_factory=list, description="Directories of workspace modules")
    replaces: list[Replacement] = Field(default_factory=list)


class ProjectManifest(BaseModel):
    """The project's module graph as declared on disk. Loaded once, read-only."""

    model_config = ConfigDict(frozen=True)

    project_root: Path = Field(description="Absolute directory holding go.mod")
    mod_file: ModFile
    work_file: WorkFile | None = Field(default=None, description="Project go.work, if one sits beside go.mod")

    @property
    def module_path(self) -> str:
        return self.mod_file.module


class DependencyOverride(BaseModel):
    """The replace entry targeting the core dependency.

    Exactly one of version/local path is meaningful. Local paths are stored
    already normalized to absolute form.
    """

    replacement: Replacement

    @property
    def is_local(self) -> bool:
        return self.replacement.is_local

    @property
    def local_path(self) -> Path | None:
        if not self.is_local:
            return None
        return Path(self.replacement.new.path)
