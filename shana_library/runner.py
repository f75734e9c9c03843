"""Run the current Go microservice as a local development server.

Contract:
- Inputs: Server protocol, go build flags, settings, working directory
- Outputs: RunOutcome
- Side Effects: Creates and removes a temporary workspace, runs go and the service
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from .config import ShanaSettings
from .models import RunContext
from .models import RunOutcome
from .modules import ModuleGraphResolver
from .modules import discover_sub_packages
from .modules import supports_workspaces
from .pipeline import InterruptListener
from .pipeline import PipelineController
from .workspace import WorkspaceSynthesizer
from .workspace.templates import main_template_name

logger = logging.getLogger(__name__)


def build_run_context(resolver: ModuleGraphResolver, settings: ShanaSettings) -> RunContext:
    """Resolve the module graph and discover packages into template data."""
    manifest = resolver.load()
    pkgs = discover_sub_packages(manifest.project_root, manifest.module_path, settings.skip_dirs)

    mod_file = resolver.rewrite_mod_file(manifest)
    work_file = resolver.rewrite_work_file(manifest) if supports_workspaces(mod_file.go) else None

    return RunContext(
        pkg_name=manifest.module_path,
        project_root=manifest.project_root,
        core_package=settings.core_package,
        service_pkgs=pkgs,
        mod_file=mod_file,
        work_file=work_file,
    )


def run_service(
    protocol: str,
    build_flags: Sequence[str] = (),
    settings: ShanaSettings | None = None,
    cwd: Path | None = None,
    controller: PipelineController | None = None,
) -> RunOutcome:
    """Build and run the service in a throwaway workspace.

    Args:
        protocol: Server protocol of the generated main.go (e.g. "httpjson")
        build_flags: Extra go build flags
        settings: Runner settings (default: ShanaSettings())
        cwd: Directory inside the Go project (default: process cwd)
        controller: Pipeline controller to use (default: a new one)

    Returns:
        RunOutcome of the pipeline

    Raises:
        ShanaError: Any resolution, configuration, generation or process failure
    """
    settings = settings or ShanaSettings()

    # Fail on unknown protocols before touching the go tool or the filesystem
    main_template_name(protocol)

    context = build_run_context(ModuleGraphResolver(settings, cwd=cwd), settings)
    logger.info(f"Found {len(context.service_pkgs)} packages in {context.pkg_name}")

    synthesizer = WorkspaceSynthesizer(settings)
    controller = controller or PipelineController(settings)

    with InterruptListener(controller.interrupt), synthesizer.materialize(protocol, context) as workspace:
        logger.debug(f"Workspace files: {', '.join(workspace.files)}")
        return controller.run(workspace.path, build_flags)
