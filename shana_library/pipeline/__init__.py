"""Process pipeline for shana_library.

Public Interface:
    - PipelineController: Run tidy, build and the service in a workspace
    - InterruptListener: Forward SIGINT to a controller
    - ProcessSlot: Register of the running child process
    - strip_output_flags: Remove -o from go build flags
"""

from .controller import PipelineController
from .controller import strip_output_flags
from .listener import InterruptListener
from .slot import ProcessSlot

__all__ = [
    "PipelineController",
    "InterruptListener",
    "ProcessSlot",
    "strip_output_flags",
]
