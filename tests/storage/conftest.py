"""
Storage Test Configuration and Fixtures

This file contains pytest fixtures shared across storage tests.

To use pytest:
    pytest tests/storage/
"""

import pytest

from storage.implementations.mock_store import MockFeedbackStore
from storage.implementations.sqlite_store import SQLiteFeedbackStore
from storage.models.feedback import FeedbackAnswer


# =============================================================================
# STORE FIXTURES
# =============================================================================


@pytest.fixture
def sqlite_store(tmp_path):
    """
    Provide a SQLiteFeedbackStore backed by a temporary database file.

    Usage:
        def test_something(sqlite_store):
            session_id = sqlite_store.create_session(True, FeedbackMode.TEXT)
    """
    store = SQLiteFeedbackStore(tmp_path / "data" / "feedback.db")
    yield store
    store.cleanup()


@pytest.fixture
def mock_store():
    """Provide a fresh MockFeedbackStore instance for each test"""
    return MockFeedbackStore()


# =============================================================================
# ANSWER FIXTURES
# =============================================================================


@pytest.fixture
def text_answers():
    """Three valid typed answers, one per question"""
    return [
        FeedbackAnswer(1, "The coaches are friendly", 5),
        FeedbackAnswer(2, "More evening classes please", 4),
        FeedbackAnswer(3, "Showers could be warmer", 3),
    ]
