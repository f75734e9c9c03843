"""Workspace synthesis for shana_library.

Public Interface:
    - WorkspaceSynthesizer: Render and materialize a temporary Go workspace
    - SERVER_PROTOCOLS: Supported server protocols
"""

from .synthesizer import WorkspaceSynthesizer
from .templates import SERVER_PROTOCOLS

__all__ = [
    "WorkspaceSynthesizer",
    "SERVER_PROTOCOLS",
]
