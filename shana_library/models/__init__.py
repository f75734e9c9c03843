"""Models for shana library."""

from .manifest import DependencyOverride
from .manifest import ModFile
from .manifest import ModuleVersion
from .manifest import ProjectManifest
from .manifest import Replacement
from .manifest import Requirement
from .manifest import WorkFile
from .pipeline import PipelineState
from .pipeline import RunOutcome
from .pipeline import StageName
from .pipeline import StageStatus
from .workspace import RunContext
from .workspace import Workspace

__all__ = [
    "DependencyOverride",
    "ModFile",
    "ModuleVersion",
    "ProjectManifest",
    "Replacement",
    "Requirement",
    "WorkFile",
    "PipelineState",
    "RunOutcome",
    "StageName",
    "StageStatus",
    "RunContext",
    "Workspace",
]
