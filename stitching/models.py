"""
Stitching Models

Data types for one stitching run.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from core.media import MediaArtifact
from recording.constants import RecordingMode


@dataclass
class StitchJob:
    """
    Inputs and result of assembling one feedback video.

    Attributes:
        prompt_clips: Ordered prompt clip references (URLs or paths)
        user_artifact: The continuous user recording
        mode: Recording mode of the user artifact
        duration_hint: Recording length in seconds (bounds audio-mode video)
        output: Final artifact, set once
    """

    prompt_clips: Tuple[str, ...]
    user_artifact: MediaArtifact
    mode: RecordingMode
    duration_hint: float
    output: Optional[MediaArtifact] = None

    def set_output(self, artifact: MediaArtifact) -> None:
        if self.output is not None:
            raise RuntimeError("StitchJob output already set")
        self.output = artifact

    @property
    def is_done(self) -> bool:
        return self.output is not None
