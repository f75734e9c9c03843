"""Go package discovery.

Walks a project tree and lists the import paths of every directory that
holds buildable, non-test Go source.

Contract:
- Inputs: Project root, module path, directory names to skip
- Outputs: Sorted list of import paths
- Side Effects: None (read-only discovery)
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


def _is_package_source(name: str) -> bool:
    return name.endswith(".go") and not name.endswith("_test.go")


def _list_package_dirs(directory: Path, skip_dirs: frozenset[str], is_root: bool) -> list[Path]:
    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except OSError as e:
        raise ConfigurationError(f"Fail to list {directory}: {e}") from e

    names = {entry.name for entry in entries}
    # A nested go.mod starts a different module
    if not is_root and "go.mod" in names:
        return []

    dirs: list[Path] = []
    has_go_file = False

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            if entry.name in skip_dirs or entry.name.startswith((".", "_")):
                continue
            dirs.extend(_list_package_dirs(Path(entry.path), skip_dirs, is_root=False))
        elif _is_package_source(entry.name):
            has_go_file = True

    if has_go_file:
        dirs.append(directory)
    return dirs


def discover_sub_packages(project_root: Path, module_path: str, skip_dirs: Iterable[str]) -> list[str]:
    """List importable packages of a Go module.

    Args:
        project_root: Directory holding go.mod
        module_path: Module path that replaces the root prefix in import paths
        skip_dirs: Directory names never descended into (e.g. "internal")

    Returns:
        Import paths sorted lexicographically, e.g.
        ["example.com/svc", "example.com/svc/api/hello"]

    Raises:
        ConfigurationError: If no directory contains buildable Go source
    """
    project_root = Path(project_root)
    package_dirs = _list_package_dirs(project_root, frozenset(skip_dirs), is_root=True)

    pkgs = set()
    for package_dir in package_dirs:
        relative = package_dir.relative_to(project_root).as_posix()
        pkgs.add(module_path if relative == "." else f"{module_path}/{relative}")

    if not pkgs:
        raise ConfigurationError("Fail to find any Go package in current project.")

    logger.debug(f"Discovered {len(pkgs)} packages under {project_root}")
    return sorted(pkgs)
