"""Go module handling: go.mod/go.work parsing, graph resolution, package discovery.

Public Interface:
    - ModuleGraphResolver: Locate and rewrite the project's module graph
    - discover_sub_packages: List importable packages of the project
    - parse_mod_file / parse_work_file: Parse module files
"""

from .discovery import discover_sub_packages
from .gomod import parse_mod_file
from .gomod import parse_work_file
from .gomod import supports_workspaces
from .resolver import ModuleGraphResolver

__all__ = [
    "ModuleGraphResolver",
    "discover_sub_packages",
    "parse_mod_file",
    "parse_work_file",
    "supports_workspaces",
]
