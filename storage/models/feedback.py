"""
Feedback Models

Data classes representing a feedback session and what it collected.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from storage.constants import FeedbackMode


@dataclass
class FeedbackAnswer:
    """
    One answered question.

    Media modes only mark the question as answered (the recording is
    continuous); text mode also carries the typed response and rating.
    """

    question_number: int  # 1-based
    text_response: Optional[str] = None
    star_rating: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage"""
        return {
            "question_number": self.question_number,
            "text_response": self.text_response,
            "star_rating": self.star_rating,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeedbackAnswer":
        """Create FeedbackAnswer from dictionary (database row)"""
        return cls(
            question_number=data["question_number"],
            text_response=data.get("text_response"),
            star_rating=data.get("star_rating"),
        )


@dataclass
class MediaFeedback:
    """The single uploaded recording of a media-mode session"""

    session_id: str
    mode: FeedbackMode
    remote_id: str  # Drive file id
    file_size: int  # bytes
    duration: Optional[float] = None  # seconds
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "mode": self.mode.value,
            "remote_id": self.remote_id,
            "file_size": self.file_size,
            "duration": self.duration,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MediaFeedback":
        return cls(
            session_id=data["session_id"],
            mode=FeedbackMode(data["mode"]),
            remote_id=data["remote_id"],
            file_size=data["file_size"],
            duration=data.get("duration"),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class FeedbackSession:
    """
    A participant's feedback session.

    Lifecycle: created when mode + consent are known, completed once the
    recording has been uploaded (media) or the answers saved (text).
    """

    id: str
    consent: bool
    mode: FeedbackMode
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    completed: bool = False
    drive_file_id: Optional[str] = None

    # Filled in by get_session()
    answers: List[FeedbackAnswer] = field(default_factory=list)
    media: List[MediaFeedback] = field(default_factory=list)

    def mark_completed(self, drive_file_id: Optional[str]) -> None:
        """Mark session as completed"""
        self.completed = True
        self.drive_file_id = drive_file_id
        self.updated_at = datetime.now()

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage (session row only)"""
        return {
            "id": self.id,
            "consent": self.consent,
            "selected_mode": self.mode.value,
            "completed": self.completed,
            "drive_file_id": self.drive_file_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeedbackSession":
        """Create FeedbackSession from dictionary (database row)"""
        return cls(
            id=data["id"],
            consent=bool(data["consent"]),
            mode=FeedbackMode(data["selected_mode"]),
            completed=bool(data["completed"]),
            drive_file_id=data.get("drive_file_id"),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )

    def __repr__(self) -> str:
        return (
            f"FeedbackSession(id='{self.id}', mode={self.mode.value}, "
            f"completed={self.completed})"
        )
