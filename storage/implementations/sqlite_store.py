"""
SQLite Feedback Store

Persists feedback sessions, typed answers and uploaded recordings in a
local SQLite database.
"""

import logging
import sqlite3
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union

from storage.constants import FEEDBACK_DB_PATH, FeedbackMode
from storage.interfaces.feedback_store_interface import (
    FeedbackStoreInterface,
    FeedbackValidationError,
    SessionNotFoundError,
    StorageError,
)
from storage.models.feedback import FeedbackAnswer, FeedbackSession, MediaFeedback
from storage.utils.validation_utils import validate_text_answer

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS feedback_sessions (
        id TEXT PRIMARY KEY,
        consent INTEGER NOT NULL,
        selected_mode TEXT NOT NULL,
        completed INTEGER NOT NULL DEFAULT 0,
        drive_file_id TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS text_feedback (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        session_id TEXT NOT NULL
            REFERENCES feedback_sessions(id) ON DELETE CASCADE,
        question_number INTEGER NOT NULL,
        text_response TEXT NOT NULL,
        star_rating INTEGER NOT NULL CHECK (star_rating BETWEEN 1 AND 5),
        created_at TEXT NOT NULL,
        UNIQUE (session_id, question_number)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS media_feedback (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        session_id TEXT NOT NULL
            REFERENCES feedback_sessions(id) ON DELETE CASCADE,
        mode TEXT NOT NULL CHECK (mode IN ('video', 'audio')),
        remote_id TEXT NOT NULL,
        file_size INTEGER NOT NULL,
        duration REAL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_text_session ON text_feedback(session_id)",
    "CREATE INDEX IF NOT EXISTS idx_media_session ON media_feedback(session_id)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_created ON feedback_sessions(created_at)",
]


class SQLiteFeedbackStore(FeedbackStoreInterface):
    """
    Feedback store backed by SQLite.

    Thread Safety:
    - Writes are serialized with a threading.Lock
    - Reads proceed without locking (SQLite handles read/write conflicts)
    - The connection is shared across threads so calls can be pushed to
      a worker thread with asyncio.to_thread()
    """

    def __init__(self, db_path: Union[Path, str] = FEEDBACK_DB_PATH):
        self.logger = logging.getLogger(__name__)
        self.db_path = Path(db_path)
        self._connection: Optional[sqlite3.Connection] = None
        self._write_lock = threading.Lock()

        self._initialize_db()

        self.logger.info(f"Feedback store initialized (db: {self.db_path})")

    # =========================================================================
    # CONNECTION / SCHEMA
    # =========================================================================

    def _initialize_db(self) -> None:
        """Create database file and tables if they don't exist"""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create database directory: {e}") from e

        try:
            conn = self._get_connection()
            cursor = conn.cursor()
            for statement in SCHEMA:
                cursor.execute(statement)
            conn.commit()
            self.logger.debug("Database schema initialized")

        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize database: {e}") from e

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection (reuses existing or creates new)"""
        if self._connection is None:
            try:
                self._connection = sqlite3.connect(
                    str(self.db_path),
                    check_same_thread=False,
                )
                self._connection.row_factory = sqlite3.Row
                self._connection.execute("PRAGMA foreign_keys = ON")
            except sqlite3.Error as e:
                raise StorageError(f"Failed to connect to database: {e}") from e

        return self._connection

    def _require_session(self, cursor: sqlite3.Cursor, session_id: str) -> None:
        cursor.execute("SELECT 1 FROM feedback_sessions WHERE id = ?", (session_id,))
        if cursor.fetchone() is None:
            raise SessionNotFoundError(session_id)

    # =========================================================================
    # WRITES
    # =========================================================================

    def create_session(self, consent: bool, mode: FeedbackMode) -> str:
        session = FeedbackSession(id=str(uuid.uuid4()), consent=consent, mode=mode)
        data = session.to_dict()

        with self._write_lock:
            try:
                conn = self._get_connection()
                conn.execute(
                    """
                    INSERT INTO feedback_sessions (
                        id, consent, selected_mode, completed,
                        drive_file_id, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                    (
                        data["id"],
                        int(data["consent"]),
                        data["selected_mode"],
                        int(data["completed"]),
                        data["drive_file_id"],
                        data["created_at"],
                        data["updated_at"],
                    ),
                )
                conn.commit()

            except sqlite3.Error as e:
                raise StorageError(f"Failed to create session: {e}") from e

        self.logger.info(
            f"Created feedback session {session.id} "
            f"(mode={mode.value}, consent={consent})",
        )
        return session.id

    def save_text_feedback(
        self,
        session_id: str,
        answers: Iterable[FeedbackAnswer],
    ) -> None:
        """
        Save typed answers in a single transaction.

        Every answer is validated first; one invalid answer means
        nothing is written.
        """
        answers = list(answers)
        for answer in answers:
            valid, error = validate_text_answer(answer)
            if not valid:
                raise FeedbackValidationError(error, answer.question_number)

        now = datetime.now().isoformat()

        with self._write_lock:
            conn = self._get_connection()
            try:
                cursor = conn.cursor()
                self._require_session(cursor, session_id)
                cursor.executemany(
                    """
                    INSERT INTO text_feedback (
                        session_id, question_number, text_response,
                        star_rating, created_at
                    ) VALUES (?, ?, ?, ?, ?)
                """,
                    [
                        (
                            session_id,
                            answer.question_number,
                            answer.text_response,
                            answer.star_rating,
                            now,
                        )
                        for answer in answers
                    ],
                )
                conn.commit()

            except sqlite3.IntegrityError as e:
                conn.rollback()
                raise StorageError(
                    f"Text feedback already saved for session {session_id}: {e}",
                ) from e
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageError(f"Failed to save text feedback: {e}") from e

        self.logger.info(f"Saved {len(answers)} text answer(s) for session {session_id}")

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

        media = MediaFeedback(
            session_id=session_id,
            mode=mode,
            remote_id=remote_id,
            file_size=file_size,
            duration=duration,
        )
        data = media.to_dict()

        with self._write_lock:
            try:
                conn = self._get_connection()
                cursor = conn.cursor()
                self._require_session(cursor, session_id)
                cursor.execute(
                    """
                    INSERT INTO media_feedback (
                        session_id, mode, remote_id, file_size,
                        duration, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                    (
                        data["session_id"],
                        data["mode"],
                        data["remote_id"],
                        data["file_size"],
                        data["duration"],
                        data["created_at"],
                    ),
                )
                conn.commit()

            except sqlite3.Error as e:
                raise StorageError(f"Failed to save {mode.value} feedback: {e}") from e

        self.logger.info(
            f"Saved {mode.value} feedback for session {session_id} "
            f"(remote_id={remote_id}, size={file_size})",
        )

    def complete_session(self, session_id: str, remote_id: Optional[str] = None) -> None:
        with self._write_lock:
            try:
                conn = self._get_connection()
                cursor = conn.cursor()
                cursor.execute(
                    """
                    UPDATE feedback_sessions SET
                        completed = 1,
                        drive_file_id = ?,
                        updated_at = ?
                    WHERE id = ?
                """,
                    (remote_id, datetime.now().isoformat(), session_id),
                )
                conn.commit()

            except sqlite3.Error as e:
                raise StorageError(f"Failed to complete session: {e}") from e

            if cursor.rowcount == 0:
                raise SessionNotFoundError(session_id)

        self.logger.info(f"Session {session_id} completed (drive_file_id={remote_id})")

    # =========================================================================
    # READS
    # =========================================================================

    def get_session(self, session_id: str) -> Optional[FeedbackSession]:
        try:
            conn = self._get_connection()
            cursor = conn.cursor()

            cursor.execute("SELECT * FROM feedback_sessions WHERE id = ?", (session_id,))
            row = cursor.fetchone()
            if row is None:
                return None

            session = FeedbackSession.from_dict(dict(row))

            cursor.execute(
                "SELECT * FROM text_feedback WHERE session_id = ? ORDER BY question_number",
                (session_id,),
            )
            session.answers = [FeedbackAnswer.from_dict(dict(r)) for r in cursor.fetchall()]

            cursor.execute(
                "SELECT * FROM media_feedback WHERE session_id = ? ORDER BY id",
                (session_id,),
            )
            session.media = [MediaFeedback.from_dict(dict(r)) for r in cursor.fetchall()]

            return session

        except sqlite3.Error as e:
            raise StorageError(f"Failed to get session: {e}") from e

    def list_sessions(self, completed: Optional[bool] = None) -> List[FeedbackSession]:
        """
        List sessions, newest first.

        Args:
            completed: Filter on completion (None = all)
        """
        try:
            conn = self._get_connection()
            cursor = conn.cursor()

            if completed is None:
                cursor.execute("SELECT * FROM feedback_sessions ORDER BY created_at DESC")
            else:
                cursor.execute(
                    "SELECT * FROM feedback_sessions WHERE completed = ? "
                    "ORDER BY created_at DESC",
                    (int(completed),),
                )

            return [FeedbackSession.from_dict(dict(row)) for row in cursor.fetchall()]

        except sqlite3.Error as e:
            raise StorageError(f"Failed to list sessions: {e}") from e

    def cleanup(self) -> None:
        """Close database connection"""
        if self._connection:
            try:
                self._connection.close()
                self._connection = None
                self.logger.debug("Database connection closed")
            except sqlite3.Error as e:
                self.logger.warning(f"Error closing database: {e}")
