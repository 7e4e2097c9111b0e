"""
Storage Module

Feedback persistence for the media pipeline: sessions, typed answers and
the uploaded recording of each session.

Architecture mirrors the other packages:
- interfaces/: Abstract base classes (contracts)
- implementations/: Concrete implementations (SQLite and mock)
- models/: Data structures
- utils/: Answer validation
"""

# ============================================================================
# storage/__init__.py - Main Package Exports
# ============================================================================

from storage.constants import FeedbackMode
from storage.factory import StorageFactory, create_store
from storage.implementations.mock_store import MockFeedbackStore
from storage.implementations.sqlite_store import SQLiteFeedbackStore
from storage.interfaces.feedback_store_interface import (
    FeedbackStoreInterface,
    FeedbackValidationError,
    SessionNotFoundError,
    StorageError,
)
from storage.models.feedback import FeedbackAnswer, FeedbackSession, MediaFeedback
from storage.utils.validation_utils import (
    validate_star_rating,
    validate_text_answer,
    validate_text_response,
)

# Public API - what users import
__all__ = [
    "FeedbackAnswer",
    "FeedbackMode",
    "FeedbackSession",
    "FeedbackStoreInterface",
    "FeedbackValidationError",
    "MediaFeedback",
    "MockFeedbackStore",
    "SQLiteFeedbackStore",
    "SessionNotFoundError",
    "StorageError",
    "StorageFactory",
    "create_store",
    "validate_star_rating",
    "validate_text_answer",
    "validate_text_response",
]
