"""
Mock Feedback Store

In-memory feedback store for testing without a database.
Validates answers exactly like the SQLite store.
"""

import copy
import logging
import uuid
from typing import Dict, Iterable, List, Optional

from storage.constants import FeedbackMode
from storage.interfaces.feedback_store_interface import (
    FeedbackStoreInterface,
    FeedbackValidationError,
    SessionNotFoundError,
    StorageError,
)
from storage.models.feedback import FeedbackAnswer, FeedbackSession, MediaFeedback
from storage.utils.validation_utils import validate_text_answer


class MockFeedbackStore(FeedbackStoreInterface):
    """
    Mock store for testing.

    Keeps sessions in a dict and records every operation so tests can
    assert on call order.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

        self._sessions: Dict[str, FeedbackSession] = {}

        # Track operations for test verification
        self.operation_log: List[str] = []

        # Next write raises StorageError when set
        self._fail_next: Optional[str] = None

        self.logger.info("[MOCK] Feedback store initialized (simulation mode)")

    def _log_operation(self, operation: str) -> None:
        """Log operation for test verification"""
        self.operation_log.append(operation)
        self.logger.debug(f"[MOCK] {operation}")

    def _check_failure(self) -> None:
        if self._fail_next:
            message, self._fail_next = self._fail_next, None
            raise StorageError(message)

    def _require_session(self, session_id: str) -> FeedbackSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def create_session(self, consent: bool, mode: FeedbackMode) -> str:
        self._check_failure()
        session = FeedbackSession(id=str(uuid.uuid4()), consent=consent, mode=mode)
        self._sessions[session.id] = session
        self._log_operation(f"create_session:{mode.value}")
        return session.id

    def save_text_feedback(
        self,
        session_id: str,
        answers: Iterable[FeedbackAnswer],
    ) -> None:
        answers = list(answers)
        for answer in answers:
            valid, error = validate_text_answer(answer)
            if not valid:
                raise FeedbackValidationError(error, answer.question_number)

        self._check_failure()
        session = self._require_session(session_id)
        session.answers.extend(copy.copy(answer) for answer in answers)
        self._log_operation(f"save_text_feedback:{len(answers)}")

    def save_media_feedback(
        self,
        session_id: str,
        mode: FeedbackMode,
        remote_id: str,
        file_size: int,
        duration: Optional[float] = None,
    ) -> None:
        if not mode.is_media:
            raise StorageError(f"Media feedback requires video or audio mode, got {mode.value}")

        self._check_failure()
        session = self._require_session(session_id)
        session.media.append(
            MediaFeedback(
                session_id=session_id,
                mode=mode,
                remote_id=remote_id,
                file_size=file_size,
                duration=duration,
            ),
        )
        self._log_operation(f"save_media_feedback:{remote_id}")

    def complete_session(self, session_id: str, remote_id: Optional[str] = None) -> None:
        self._check_failure()
        self._require_session(session_id).mark_completed(remote_id)
        self._log_operation("complete_session")

    def get_session(self, session_id: str) -> Optional[FeedbackSession]:
        session = self._sessions.get(session_id)
        return copy.deepcopy(session) if session else None

    # =========================================================================
    # TESTING HELPER METHODS
    # =========================================================================

    def simulate_failure(self, message: str = "Simulated database failure") -> None:
        """Make the next write raise StorageError"""
        self._fail_next = message

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def get_operation_log(self) -> List[str]:
        """Get list of all operations for test verification"""
        return self.operation_log.copy()

    def clear_operation_log(self) -> None:
        """Clear operation log"""
        self.operation_log.clear()
