"""Pipeline state models."""

from enum import Enum

from pydantic import BaseModel
from pydantic import Field


class StageName(str, Enum):
    """Pipeline stages in execution order."""

    TIDY = "tidy"
    COMPILE = "compile"
    EXECUTE = "execute"


class StageStatus(str, Enum):
    """Stage lifecycle status.

    State transitions:
    - PENDING: Not started (stays here if skipped after an interrupt)
    - RUNNING: External process is alive
    - FINISHED: Process exited with status 0
    - FAILED: Process failed to start or exited non-zero
    """

    PENDING = "pending"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"


class RunOutcome(str, Enum):
    """How a pipeline run ended without error.

    INTERRUPTED is the graceful-shutdown outcome: an interrupt arrived and
    no further reportable failure happened.
    """

    COMPLETED = "completed"
    INTERRUPTED = "interrupted"


def _pending_stages() -> dict[StageName, StageStatus]:
    return {stage: StageStatus.PENDING for stage in StageName}


class PipelineState(BaseModel):
    """Progress of one pipeline run."""

    stages: dict[StageName, StageStatus] = Field(default_factory=_pending_stages)
    interrupted: bool = Field(default=False, description="Set once an interrupt was observed, never reset")

    def mark(self, stage: StageName, status: StageStatus) -> None:
        self.stages[stage] = status

    def status_of(self, stage: StageName) -> StageStatus:
        return self.stages[stage]
