"""Process pipeline controller.

Runs `go mod tidy`, `go build` and the built service, one after another,
inside a workspace directory.

Contract:
- Inputs: Workspace directory, extra go build flags
- Outputs: RunOutcome
- Side Effects: Spawns child processes that share the terminal
"""

import logging
import threading
from collections.abc import Callable
from collections.abc import Sequence
from pathlib import Path

import psutil

from ..config import ShanaSettings
from ..errors import ProcessError
from ..models import PipelineState
from ..models import RunOutcome
from ..models import StageName
from ..models import StageStatus
from .slot import ProcessSlot

logger = logging.getLogger(__name__)

_OUTPUT_FLAGS = ("-o", "--o")


def strip_output_flags(build_flags: Sequence[str]) -> list[str]:
    """Drop any -o flag (and its value) so the binary name stays fixed.

    Example:
        >>> strip_output_flags(["-race", "-o", "svc", "-tags=dev"])
        ['-race', '-tags=dev']
    """
    result = []
    skip_next = False

    for flag in build_flags:
        if skip_next:
            skip_next = False
            continue
        if flag in _OUTPUT_FLAGS:
            skip_next = True
            continue
        if flag.startswith(tuple(f"{f}=" for f in _OUTPUT_FLAGS)):
            continue
        result.append(flag)

    return result


class PipelineController:
    """Drives one tidy -> compile -> execute run.

    A controller is single use: once interrupted it stays interrupted.
    interrupt() may be called from any thread.

    Example:
        >>> controller = PipelineController(ShanaSettings())
        >>> outcome = controller.run(workspace.path, ["-race"])
    """

    def __init__(self, settings: ShanaSettings, popen: Callable[..., psutil.Popen] = psutil.Popen) -> None:
        """Initialize controller.

        Args:
            settings: Runner settings (go binary, binary name)
            popen: Process factory, psutil.Popen compatible
        """
        self.settings = settings
        self.popen = popen
        self.slot = ProcessSlot()
        self.state = PipelineState()
        self._interrupted = threading.Event()
        # Serializes interrupt() against spawn+publish so no child starts unsignalled
        self._lock = threading.Lock()

    @property
    def interrupted(self) -> bool:
        return self._interrupted.is_set()

    def interrupt(self) -> None:
        """Mark the run interrupted and terminate the active process.

        Only the first call has an effect.
        """
        with self._lock:
            if self._interrupted.is_set():
                return
            self._interrupted.set()
            self.state.interrupted = True
            logger.warning("Caught SIGINT")
            self.slot.signal()

    def run(self, workspace_dir: Path, build_flags: Sequence[str] = ()) -> RunOutcome:
        """Run all stages in the workspace.

        Args:
            workspace_dir: Directory holding the generated go.mod and main.go
            build_flags: Extra go build flags; any -o flag is dropped

        Returns:
            RunOutcome.INTERRUPTED if an interrupt was observed, else COMPLETED

        Raises:
            ProcessError: If tidy or build fails, or the service fails without being interrupted
        """
        go = self.settings.go_binary
        binary = self.settings.binary_name

        self._run_stage(StageName.TIDY, [go, "mod", "tidy"], workspace_dir, "Fail to tidy the go.mod file.")

        build_args = [go, "build", "-o", binary, *strip_output_flags(build_flags)]
        self._run_stage(StageName.COMPILE, build_args, workspace_dir, "Fail to build the service.")

        if not self.interrupted:
            logger.info("Service is about to be launched. Press Ctrl+C to stop the service.")

        try:
            self._run_stage(StageName.EXECUTE, [f"./{binary}"], workspace_dir, "Service exited with error.")
        except ProcessError:
            # Expected when the service is stopped by Ctrl+C
            if not self.interrupted:
                raise
            logger.debug("Service exited after interrupt")

        if self.state.status_of(StageName.EXECUTE) != StageStatus.PENDING:
            logger.info("Service is stopped.")

        return RunOutcome.INTERRUPTED if self.interrupted else RunOutcome.COMPLETED

    def _run_stage(self, stage: StageName, args: list[str], cwd: Path, failure_message: str) -> None:
        with self._lock:
            if self._interrupted.is_set():
                logger.debug(f"Skipping {stage.value}: interrupted")
                return

            logger.debug(f"Running {stage.value}: {' '.join(args)}")
            try:
                process = self.popen(args, cwd=str(cwd))
            except OSError as e:
                self.state.mark(stage, StageStatus.FAILED)
                raise ProcessError(f"{failure_message} {e}", stage=stage.value) from e

            self.slot.publish(process)
            self.state.mark(stage, StageStatus.RUNNING)

        try:
            returncode = process.wait()
        finally:
            self.slot.clear()

        if returncode != 0:
            self.state.mark(stage, StageStatus.FAILED)
            raise ProcessError(f"{failure_message} (exit status {returncode})", stage=stage.value, returncode=returncode)

        self.state.mark(stage, StageStatus.FINISHED)
