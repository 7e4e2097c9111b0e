"""
Pipeline Models

Result of a completed feedback run.
"""

from dataclasses import dataclass
from typing import Optional

from storage.constants import FeedbackMode
from storage.models.feedback import FeedbackAnswer

__all__ = ["FeedbackAnswer", "PipelineResult"]


@dataclass(frozen=True)
class PipelineResult:
    """
    What a successful run produced.

    Text runs have no remote file, so remote_id, remote_name, file_size
    and duration stay None.
    """

    session_id: str
    mode: FeedbackMode
    consent: bool
    answer_count: int
    remote_id: Optional[str] = None
    remote_name: Optional[str] = None
    file_size: Optional[int] = None
    duration_seconds: Optional[float] = None

    @property
    def has_upload(self) -> bool:
        return self.remote_id is not None
