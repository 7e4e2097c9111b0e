"""
Upload Constants

Centralized configuration for the Google Drive upload module.
Protocol values are fixed by the Drive resumable upload API; tunables are
re-exported from config/settings.py.
"""

from enum import Enum

from config.settings import (
    DRIVE_PRIVATE_FOLDER_ID,
    DRIVE_SCOPES,
    DRIVE_SOCIAL_FOLDER_ID,
    DRIVE_UPLOAD_URL,
    UPLOAD_CHUNK_SIZE,
    UPLOAD_CHUNK_TIMEOUT,
    UPLOAD_INITIATE_TIMEOUT,
    UPLOAD_MAX_RETRIES,
    UPLOAD_RETRY_BASE_DELAY,
    UPLOAD_STATUS_TIMEOUT,
)

__all__ = [
    "AUTH_ERROR_STATUSES",
    "COMPLETE_STATUSES",
    "DRIVE_API_SERVICE_NAME",
    "DRIVE_API_VERSION",
    "DRIVE_PRIVATE_FOLDER_ID",
    "DRIVE_SCOPES",
    "DRIVE_SOCIAL_FOLDER_ID",
    "DRIVE_UPLOAD_URL",
    "METADATA_CONTENT_TYPE",
    "STATUS_RESUME_INCOMPLETE",
    "TransferState",
    "UPLOAD_CHUNK_SIZE",
    "UPLOAD_CHUNK_TIMEOUT",
    "UPLOAD_INITIATE_TIMEOUT",
    "UPLOAD_MAX_RETRIES",
    "UPLOAD_RETRY_BASE_DELAY",
    "UPLOAD_STATUS_TIMEOUT",
    "UploadStatus",
]

# =============================================================================
# GOOGLE DRIVE API CONFIGURATION
# =============================================================================

# Drive API service details (connection test)
DRIVE_API_SERVICE_NAME = "drive"
DRIVE_API_VERSION = "v3"

# Session initiation body is JSON file metadata
METADATA_CONTENT_TYPE = "application/json; charset=UTF-8"

# =============================================================================
# RESUMABLE PROTOCOL STATUS CODES
# =============================================================================

# Upload finished, body carries the file resource
COMPLETE_STATUSES = frozenset({200, 201})

# "Resume Incomplete": Range header tells how many bytes the server holds
STATUS_RESUME_INCOMPLETE = 308

# Credential rejected or lacks permission
AUTH_ERROR_STATUSES = frozenset({401, 403})

# =============================================================================
# UPLOAD STATUS
# =============================================================================


class UploadStatus(Enum):
    """Upload operation status codes"""

    SUCCESS = "success"
    FAILED = "failed"
    AUTH_ERROR = "auth_error"
    NETWORK_ERROR = "network_error"
    INVALID_FILE = "invalid_file"
    INITIATION_FAILED = "initiation_failed"
    PROTOCOL_ERROR = "protocol_error"
    RETRIES_EXHAUSTED = "retries_exhausted"


class TransferState(Enum):
    """Lifecycle of a single resumable transfer"""

    PENDING = "pending"
    INITIATING = "initiating"
    TRANSFERRING = "transferring"
    BACKING_OFF = "backing-off"
    COMPLETE = "complete"
    FAILED = "failed"
