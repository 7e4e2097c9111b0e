"""
Media Artifact

Immutable binary payload passed between pipeline stages:
recording session -> stitching engine -> upload engine.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MediaArtifact:
    """
    A complete media object held in memory.

    Attributes:
        data: Raw bytes of the media container
        mime_type: Declared media type (e.g. "video/webm")
        duration_seconds: Known duration, if any
    """

    data: bytes
    mime_type: str
    duration_seconds: Optional[float] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """File extension derived from the media subtype ("video/mp4" -> "mp4")"""
        subtype = self.mime_type.split(";")[0].split("/")[-1].strip()
        return subtype or "bin"

    def __repr__(self) -> str:
        return (
            f"MediaArtifact(mime_type={self.mime_type!r}, size={self.size}, "
            f"duration_seconds={self.duration_seconds})"
        )
