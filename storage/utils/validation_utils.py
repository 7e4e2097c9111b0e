"""
Validation Utilities

Functions for validating typed feedback answers before they are accepted.
"""

from typing import Optional, Tuple

from storage.constants import (
    BANNED_WORDS,
    MAX_STAR_RATING,
    MAX_TEXT_RESPONSE_LENGTH,
    MIN_STAR_RATING,
    MSG_BANNED_CONTENT,
    MSG_EMPTY_RESPONSE,
    MSG_MISSING_RATING,
    MSG_RESPONSE_TOO_LONG,
)
from storage.models.feedback import FeedbackAnswer


def contains_banned_words(text: str) -> bool:
    """Case-insensitive substring check against BANNED_WORDS"""
    lowered = text.lower()
    return any(word in lowered for word in BANNED_WORDS)


def validate_text_response(
    text: Optional[str],
    max_length: int = MAX_TEXT_RESPONSE_LENGTH,
) -> Tuple[bool, Optional[str]]:
    """
    Validate a typed answer.

    Checks, in order:
    1. Not empty (whitespace only counts as empty)
    2. At most max_length characters
    3. No banned words

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        valid, error = validate_text_response("Great coaching")
        if not valid:
            show(error)
    """
    if not text or not text.strip():
        return False, MSG_EMPTY_RESPONSE

    if len(text) > max_length:
        return False, MSG_RESPONSE_TOO_LONG

    if contains_banned_words(text):
        return False, MSG_BANNED_CONTENT

    return True, None


def validate_star_rating(rating: Optional[int]) -> Tuple[bool, Optional[str]]:
    """Rating must be an integer in [MIN_STAR_RATING, MAX_STAR_RATING]"""
    if not rating:
        return False, MSG_MISSING_RATING

    if isinstance(rating, bool) or not isinstance(rating, int):
        return False, "Star rating must be a whole number"

    if not MIN_STAR_RATING <= rating <= MAX_STAR_RATING:
        return (
            False,
            f"Star rating must be between {MIN_STAR_RATING} and {MAX_STAR_RATING}",
        )

    return True, None


def validate_text_answer(answer: FeedbackAnswer) -> Tuple[bool, Optional[str]]:
    """Validate both parts of a text-mode answer (response first)"""
    if answer.question_number < 1:
        return False, f"Invalid question number: {answer.question_number}"

    valid, error = validate_text_response(answer.text_response)
    if not valid:
        return valid, error

    return validate_star_rating(answer.star_rating)
