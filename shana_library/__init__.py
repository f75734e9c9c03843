"""Shana library layer.

Business logic behind the `shana` command line tool: resolving a Go
project's module graph, generating a temporary workspace, and running the
service through the go toolchain.

Public Interface:
    Modules:
    - config: Runner configuration loading
    - models: Shared data structures
    - modules: go.mod parsing, resolution and package discovery
    - workspace: Workspace synthesis
    - pipeline: tidy/build/run process pipeline
    - runner: End-to-end `shana run`
"""

from .errors import ConfigurationError
from .errors import GenerationError
from .errors import ProcessError
from .errors import ResolutionError
from .errors import ShanaError
from .models import RunOutcome
from .runner import run_service

__all__ = [
    "ConfigurationError",
    "GenerationError",
    "ProcessError",
    "ResolutionError",
    "ShanaError",
    "RunOutcome",
    "run_service",
]
