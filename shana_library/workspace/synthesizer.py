"""Workspace synthesis.

Renders go.mod, go.work and main.go for a run, then materializes them in a
fresh temporary directory that is removed when the run ends.

Contract:
- Inputs: Server protocol, RunContext
- Outputs: Workspace (inside a context manager)
- Side Effects: Creates and removes a temporary directory, hard links the
  service config into it
"""

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from jinja2 import TemplateError

from ..config import ShanaSettings
from ..errors import GenerationError
from ..models import RunContext
from ..models import Workspace
from .templates import GO_MOD_TEMPLATE
from .templates import GO_WORK_TEMPLATE
from .templates import create_environment
from .templates import main_template_name

logger = logging.getLogger(__name__)


class WorkspaceSynthesizer:
    """Builds throwaway Go workspaces for `shana run`.

    Example:
        >>> synthesizer = WorkspaceSynthesizer(ShanaSettings())
        >>> with synthesizer.materialize("httpjson", context) as workspace:
        ...     print(sorted(workspace.files))
        ['go.mod', 'go.work', 'main.go']
    """

    def __init__(self, settings: ShanaSettings) -> None:
        self.settings = settings
        self.env = create_environment()

    def render(self, protocol: str, context: RunContext) -> dict[str, str]:
        """Render all workspace files in memory.

        Args:
            protocol: Server protocol selecting the main.go template
            context: Template data

        Returns:
            Mapping of file name to contents

        Raises:
            ConfigurationError: If the protocol is unsupported
            GenerationError: If a template fails to render
        """
        templates = {"main.go": main_template_name(protocol), "go.mod": GO_MOD_TEMPLATE}
        if context.work_file is not None:
            templates["go.work"] = GO_WORK_TEMPLATE

        data = {
            "pkg_name": context.pkg_name,
            "project_root": context.project_root,
            "core_package": context.core_package,
            "service_pkgs": context.service_pkgs,
            "mod_file": context.mod_file,
            "work_file": context.work_file,
        }

        files = {}
        for filename, template_name in templates.items():
            try:
                files[filename] = self.env.get_template(template_name).render(**data)
            except TemplateError as e:
                raise GenerationError(f"Fail to render {filename}: {e}") from e
        return files

    @contextmanager
    def materialize(self, protocol: str, context: RunContext) -> Iterator[Workspace]:
        """Create the workspace directory and remove it on exit.

        Everything is rendered before the directory is created, so an
        unsupported protocol or a broken template leaves nothing behind.

        Raises:
            ConfigurationError: If the protocol is unsupported
            GenerationError: If rendering, directory creation, linking or writing fails
        """
        files = self.render(protocol, context)

        try:
            path = Path(tempfile.mkdtemp(prefix=self.settings.workspace_prefix))
        except OSError as e:
            raise GenerationError(f"Fail to create workspace directory: {e}") from e

        logger.debug(f"Created workspace {path}")
        try:
            workspace = Workspace(path=path)
            if self._link_runtime_config(context.project_root, path):
                workspace.files.append(self.settings.runtime_config_name)

            for filename, content in files.items():
                try:
                    (path / filename).write_text(content, encoding="utf-8")
                except OSError as e:
                    raise GenerationError(f"Fail to write {filename}: {e}") from e
                workspace.files.append(filename)

            yield workspace
        finally:
            self._remove(path)

    def _link_runtime_config(self, project_root: Path, workspace_dir: Path) -> bool:
        """Hard link the service config into the workspace if the project has one."""
        config_file = project_root / self.settings.runtime_config_name
        if not config_file.is_file():
            return False

        try:
            (workspace_dir / self.settings.runtime_config_name).hardlink_to(config_file)
        except OSError as e:
            raise GenerationError(f"Fail to link {config_file} into workspace: {e}") from e
        return True

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            shutil.rmtree(path)
            logger.debug(f"Removed workspace {path}")
        except OSError as e:
            logger.warning(f"Failed to remove workspace {path}: {e}")
