"""Error taxonomy for the shana runner.

Every failure raised by the library derives from ShanaError so the CLI can
report it with a single handler. Graceful interruption is not an error; it is
reported as RunOutcome.INTERRUPTED by the pipeline.
"""


class ShanaError(Exception):
    """Base class for all shana errors."""


class ResolutionError(ShanaError):
    """go.mod could not be located, read or parsed."""


class ConfigurationError(ShanaError):
    """Unsupported server protocol, bad settings, or nothing to build."""


class GenerationError(ShanaError):
    """Workspace file creation or template rendering failed."""


class ProcessError(ShanaError):
    """An external process failed to start or exited with non-zero status.

    Attributes:
        stage: Pipeline stage name the process belonged to
        returncode: Exit status, or None if the process never started
    """

    def __init__(self, message: str, stage: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.returncode = returncode
