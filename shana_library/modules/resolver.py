"""Go module graph resolver.

Locates the current project's go.mod through the go tool, parses it, and
derives the rewritten module graph used by a throwaway workspace.

Contract:
- Inputs: Working directory, ShanaSettings
- Outputs: ProjectManifest, DependencyOverride, rewritten ModFile/WorkFile
- Side Effects: None (runs `go env GOMOD`, reads files)
"""

import logging
import os
import subprocess
from pathlib import Path

from ..config import ShanaSettings
from ..errors import ResolutionError
from ..models import DependencyOverride
from ..models import ModFile
from ..models import ModuleVersion
from ..models import ProjectManifest
from ..models import Replacement
from ..models import Requirement
from ..models import WorkFile
from .gomod import parse_mod_file
from .gomod import parse_work_file

logger = logging.getLogger(__name__)


def normalize_replacement(replacement: Replacement, project_root: Path) -> Replacement:
    """Return a copy whose local target path is absolute and normalized.

    Versioned replacements are returned unchanged.
    """
    if not replacement.is_local:
        return replacement

    local_path = os.path.normpath(os.path.join(project_root, replacement.new.path))
    return Replacement(old=replacement.old, new=ModuleVersion(path=local_path))


class ModuleGraphResolver:
    """Resolves the module graph of the Go project around a directory.

    Example:
        >>> resolver = ModuleGraphResolver(ShanaSettings(), cwd=Path("."))
        >>> manifest = resolver.load()
        >>> mod_file = resolver.rewrite_mod_file(manifest)
    """

    def __init__(self, settings: ShanaSettings, cwd: Path | None = None) -> None:
        """Initialize resolver.

        Args:
            settings: Runner settings (go binary, core package, workspace module)
            cwd: Directory the go tool is queried from (default: process cwd)
        """
        self.settings = settings
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()

    def locate_manifest(self) -> Path:
        """Ask the go tool which go.mod is active.

        Returns:
            Absolute path to go.mod

        Raises:
            ResolutionError: If the go tool fails or no go.mod is active
        """
        try:
            result = subprocess.run(
                [self.settings.go_binary, "env", "GOMOD"],
                cwd=str(self.cwd),
                capture_output=True,
                text=True,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as e:
            raise ResolutionError("Fail to find go.mod in current project.") from e

        go_mod = result.stdout.strip()
        if not go_mod or go_mod == os.devnull:
            raise ResolutionError("Fail to find go.mod in current project.")

        logger.debug(f"Active go.mod: {go_mod}")
        return Path(go_mod)

    def load(self) -> ProjectManifest:
        """Load the project's go.mod, and go.work if it sits beside it.

        Raises:
            ResolutionError: If a file can't be read or parsed, or go.mod has no module directive
        """
        go_mod = self.locate_manifest()
        project_root = go_mod.parent

        mod_file = parse_mod_file(self._read(go_mod), filename=str(go_mod))
        if not mod_file.module:
            raise ResolutionError(f"{go_mod}: no module directive found")

        work_file = None
        go_work = project_root / "go.work"
        if go_work.is_file():
            work_file = parse_work_file(self._read(go_work), filename=str(go_work))

        logger.info(f"Resolved module {mod_file.module} at {project_root}")
        return ProjectManifest(project_root=project_root, mod_file=mod_file, work_file=work_file)

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise ResolutionError(f"Fail to read {path}: {e}") from e

    def core_override(self, manifest: ProjectManifest) -> DependencyOverride | None:
        """Find the project's replace directive for the core package.

        A local target path is resolved relative to the project root.
        """
        for replace in manifest.mod_file.replaces:
            if replace.old.path == self.settings.core_package:
                return DependencyOverride(replacement=normalize_replacement(replace, manifest.project_root))
        return None

    def rewrite_mod_file(self, manifest: ProjectManifest) -> ModFile:
        """Build the go.mod of the workspace module.

        Keeps the go/toolchain directives, the core requirement and the core
        override, and maps the project module to the project root so the
        workspace can import it without it being published.
        """
        core = self.settings.core_package
        requires = [Requirement(mod=r.mod) for r in manifest.mod_file.requires if r.mod.path == core]

        replaces = []
        override = self.core_override(manifest)
        if override is not None:
            replaces.append(override.replacement)
        replaces.append(
            Replacement(
                old=ModuleVersion(path=manifest.module_path),
                new=ModuleVersion(path=str(manifest.project_root)),
            )
        )

        return ModFile(
            module=self.settings.workspace_module,
            go=manifest.mod_file.go,
            toolchain=manifest.mod_file.toolchain,
            requires=requires,
            replaces=replaces,
        )

    def rewrite_work_file(self, manifest: ProjectManifest) -> WorkFile:
        """Build the go.work of the workspace.

        Members are the workspace itself, the project, and a local core
        checkout when go.mod overrides core with a path. Core replaces from
        the project's own go.work are carried forward.
        """
        uses = [".", str(manifest.project_root)]
        override = self.core_override(manifest)
        if override is not None and override.local_path is not None and str(override.local_path) not in uses:
            uses.append(str(override.local_path))

        work_file = WorkFile(go=manifest.mod_file.go, toolchain=manifest.mod_file.toolchain, uses=uses)

        if manifest.work_file is not None:
            if manifest.work_file.go:
                work_file.go = manifest.work_file.go
            if manifest.work_file.toolchain:
                work_file.toolchain = manifest.work_file.toolchain
            for replace in manifest.work_file.replaces:
                if replace.old.path == self.settings.core_package:
                    work_file.replaces.append(normalize_replacement(replace, manifest.project_root))

        return work_file
