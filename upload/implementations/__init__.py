"""
Implementations Package

Concrete uploader implementations.
"""

from upload.implementations.mock_uploader import MockUploader
from upload.implementations.resumable_uploader import ResumableUploader

__all__ = [
    "MockUploader",
    "ResumableUploader",
]
