"""
Feedback Store Interface

Abstract interface for feedback persistence following Dependency Inversion
Principle. The pipeline depends on this interface, not concrete stores.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from storage.constants import FeedbackMode
from storage.models.feedback import FeedbackAnswer, FeedbackSession


class FeedbackStoreInterface(ABC):
    """
    Abstract base class for feedback persistence.

    Any store must provide these methods. This allows easy swapping between
    the SQLite store and an in-memory store for testing.
    """

    @abstractmethod
    def create_session(self, consent: bool, mode: FeedbackMode) -> str:
        """
        Create a new feedback session.

        Args:
            consent: Whether the participant agreed to social media use
            mode: Selected feedback mode

        Returns:
            New session id

        Raises:
            StorageError: If the session cannot be stored
        """

    @abstractmethod
    def save_text_feedback(
        self,
        session_id: str,
        answers: Iterable[FeedbackAnswer],
    ) -> None:
        """
        Save typed answers of a text-mode session.

        Raises:
            FeedbackValidationError: If an answer is invalid (nothing saved)
            SessionNotFoundError: If the session does not exist
            StorageError: If the write fails
        """

    @abstractmethod
    def save_media_feedback(
        self,
        session_id: str,
        mode: FeedbackMode,
        remote_id: str,
        file_size: int,
        duration: Optional[float] = None,
    ) -> None:
        """
        Record the uploaded recording of a media-mode session.

        Raises:
            SessionNotFoundError: If the session does not exist
            StorageError: If the write fails
        """

    @abstractmethod
    def complete_session(self, session_id: str, remote_id: Optional[str] = None) -> None:
        """
        Mark session completed, storing the Drive file id if any.

        Raises:
            SessionNotFoundError: If the session does not exist
        """

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[FeedbackSession]:
        """
        Get session with its answers and media.

        Returns:
            FeedbackSession or None if not found
        """

    def cleanup(self) -> None:
        """Release resources (database connections, etc.)"""


class StorageError(Exception):
    """
    Custom exception for storage-related errors.

    Makes it easy to catch storage-specific errors:
        except StorageError as e:
            logger.error(f"Storage failed: {e}")
    """


class SessionNotFoundError(StorageError):
    """Operation referenced an unknown session id"""

    def __init__(self, session_id: str):
        super().__init__(f"Feedback session not found: {session_id}")
        self.session_id = session_id


class FeedbackValidationError(StorageError):
    """A text answer was rejected; message is user-facing"""

    def __init__(self, message: str, question_number: Optional[int] = None):
        super().__init__(message)
        self.question_number = question_number
