"""
Core utilities shared by every pipeline stage.

Public API:
    - MediaArtifact: Immutable media payload passed between stages
    - StateMachine: Table-driven state machine
    - InvalidTransitionError: Raised on disallowed transitions
    - setup_logging: Console + rotating file logging

Usage:
    from core import MediaArtifact

    artifact = MediaArtifact(data=b"...", mime_type="video/webm")
"""

from core.logging_config import setup_logging
from core.media import MediaArtifact
from core.state_machine import InvalidTransitionError, StateMachine

__all__ = [
    "InvalidTransitionError",
    "MediaArtifact",
    "StateMachine",
    "setup_logging",
]
