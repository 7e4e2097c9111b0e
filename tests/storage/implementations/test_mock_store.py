"""
Tests for MockFeedbackStore and StorageFactory
"""

import pytest

from storage.constants import FeedbackMode
from storage.factory import StorageFactory, create_store
from storage.implementations.mock_store import MockFeedbackStore
from storage.implementations.sqlite_store import SQLiteFeedbackStore
from storage.interfaces.feedback_store_interface import (
    FeedbackValidationError,
    SessionNotFoundError,
    StorageError,
)
from storage.models.feedback import FeedbackAnswer

pytestmark = pytest.mark.unit


class TestMockFeedbackStore:
    def test_full_media_session(self, mock_store):
        session_id = mock_store.create_session(True, FeedbackMode.VIDEO)
        mock_store.save_media_feedback(session_id, FeedbackMode.VIDEO, "f1", 10, 3.0)
        mock_store.complete_session(session_id, "f1")

        session = mock_store.get_session(session_id)
        assert session.completed
        assert session.drive_file_id == "f1"
        assert session.media[0].remote_id == "f1"
        assert mock_store.get_operation_log() == [
            "create_session:video",
            "save_media_feedback:f1",
            "complete_session",
        ]

    def test_validates_like_sqlite(self, mock_store):
        session_id = mock_store.create_session(True, FeedbackMode.TEXT)

        with pytest.raises(FeedbackValidationError, match="star rating"):
            mock_store.save_text_feedback(session_id, [FeedbackAnswer(1, "ok", None)])

    def test_get_session_returns_copy(self, mock_store, text_answers):
        session_id = mock_store.create_session(True, FeedbackMode.TEXT)
        mock_store.save_text_feedback(session_id, text_answers)

        mock_store.get_session(session_id).answers.clear()

        assert len(mock_store.get_session(session_id).answers) == 3

    def test_unknown_session(self, mock_store):
        with pytest.raises(SessionNotFoundError):
            mock_store.complete_session("nope")

    def test_simulated_failure_is_one_shot(self, mock_store):
        mock_store.simulate_failure("db offline")

        with pytest.raises(StorageError, match="db offline"):
            mock_store.create_session(True, FeedbackMode.TEXT)
        assert mock_store.create_session(True, FeedbackMode.TEXT)
        assert mock_store.session_count == 1


class TestStorageFactory:
    def test_mock_mode(self):
        assert isinstance(StorageFactory.create_store(mode="mock"), MockFeedbackStore)
        assert isinstance(create_store(force_mock=True), MockFeedbackStore)

    def test_real_mode_with_path(self, tmp_path):
        store = StorageFactory.create_store(mode="real", db_path=tmp_path / "f.db")
        try:
            assert isinstance(store, SQLiteFeedbackStore)
            assert (tmp_path / "f.db").exists()
        finally:
            store.cleanup()
