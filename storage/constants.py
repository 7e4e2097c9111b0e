"""
Storage Module Enums and Constants

Type definitions for the feedback persistence layer.
Configuration values (database path, validation limits) live in
config/settings.py; this module re-exports what the storage package uses.
"""

from enum import Enum

from config.settings import (
    FEEDBACK_DB_PATH,
    MAX_STAR_RATING,
    MAX_TEXT_RESPONSE_LENGTH,
    MIN_STAR_RATING,
)

__all__ = [
    "BANNED_WORDS",
    "FEEDBACK_DB_PATH",
    "FeedbackMode",
    "MAX_STAR_RATING",
    "MAX_TEXT_RESPONSE_LENGTH",
    "MIN_STAR_RATING",
    "MSG_BANNED_CONTENT",
    "MSG_EMPTY_RESPONSE",
    "MSG_MISSING_RATING",
    "MSG_RESPONSE_TOO_LONG",
]

# =============================================================================
# ENUMS
# =============================================================================


class FeedbackMode(Enum):
    """How a participant chose to answer the questions"""

    VIDEO = "video"  # continuous camera + microphone recording
    AUDIO = "audio"  # continuous microphone recording
    TEXT = "text"  # typed answers with a star rating per question

    @property
    def is_media(self) -> bool:
        """True for modes that produce an uploaded recording"""
        return self in (FeedbackMode.VIDEO, FeedbackMode.AUDIO)


# =============================================================================
# TEXT ANSWER VALIDATION
# =============================================================================

# Case-insensitive substrings that reject a typed answer
BANNED_WORDS = [
    "inappropriate",
    "offensive",
    "spam",
]

# User-facing validation messages
MSG_EMPTY_RESPONSE = "Please provide a response"
MSG_RESPONSE_TOO_LONG = (
    f"Response must be {MAX_TEXT_RESPONSE_LENGTH} characters or less"
)
MSG_BANNED_CONTENT = "We cannot accept this kind of response. Please try again."
MSG_MISSING_RATING = "Please provide a star rating"
