"""
Storage Factory

Factory pattern for creating feedback store implementations.
Follows the same pattern as upload/factory.py.
"""

import logging
from pathlib import Path
from typing import Literal, Optional, Union

from storage.implementations.mock_store import MockFeedbackStore
from storage.implementations.sqlite_store import SQLiteFeedbackStore
from storage.interfaces.feedback_store_interface import FeedbackStoreInterface

# Type alias for better type hints
StorageMode = Literal["auto", "real", "mock"]


class StorageFactory:
    """
    Factory for creating feedback store implementations.

    Usage:
        # SQLite database at FEEDBACK_DB_PATH
        store = StorageFactory.create_store()

        # Force mock mode (useful for testing)
        store = StorageFactory.create_store(mode="mock")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_store(
        cls,
        mode: StorageMode = "auto",
        db_path: Optional[Union[Path, str]] = None,
    ) -> FeedbackStoreInterface:
        """
        Create a feedback store instance.

        Args:
            mode: "auto" (use real), "real" (force real), "mock" (force simulation)
            db_path: Database file (None = FEEDBACK_DB_PATH)

        Returns:
            FeedbackStoreInterface implementation
        """
        if mode == "mock":
            cls._logger.info("Creating Mock Feedback Store (forced)")
            return MockFeedbackStore()

        # "auto" or "real": a local SQLite file is always available
        cls._logger.info("Creating SQLite Feedback Store")
        if db_path is None:
            return SQLiteFeedbackStore()
        return SQLiteFeedbackStore(db_path)


# Convenience function
def create_store(force_mock: bool = False) -> FeedbackStoreInterface:
    """
    Convenience function to create a feedback store.

    Args:
        force_mock: If True, use the in-memory store
    """
    mode: StorageMode = "mock" if force_mock else "auto"
    return StorageFactory.create_store(mode=mode)
