"""Workspace models: template data and the materialized directory."""

from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from .manifest import ModFile
from .manifest import WorkFile


class RunContext(BaseModel):
    """Everything the workspace templates render from.

    Assembled from resolver and discoverer output before anything is
    written to disk.
    """

    model_config = ConfigDict(frozen=True)

    pkg_name: str = Field(description="Module path of the real project, used as the package prefix")
    project_root: Path
    core_package: str
    service_pkgs: list[str] = Field(description="Sorted import paths blank-imported by main.go")
    mod_file: ModFile
    work_file: WorkFile | None = Field(default=None, description="Rendered only when the toolchain supports go.work")


class Workspace(BaseModel):
    """An ephemeral build directory owned by a single run."""

    path: Path
    files: list[str] = Field(default_factory=list, description="Names of generated and linked files")
