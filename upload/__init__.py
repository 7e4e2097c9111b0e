"""
Upload Module

Resumable Google Drive uploads with OAuth authentication.

Public API:
    - UploadController: High-level upload coordinator
    - ResumableUploader: Chunked upload engine
    - UploadResult: Upload operation result
    - UploadStatus: Status codes
    - create_uploader: Factory function

Usage:
    from upload import UploadController

    controller = UploadController()
    result = await controller.upload_artifact(artifact, "video_stitched_1", consent=True)
"""

from upload.constants import UploadStatus
from upload.controllers.upload_controller import UploadController
from upload.factory import create_credential_provider, create_uploader
from upload.implementations.resumable_uploader import ResumableUploader
from upload.interfaces.uploader_interface import (
    UploadDestination,
    UploaderError,
    UploadResult,
)

# Public API
__all__ = [
    "ResumableUploader",
    "UploadController",
    "UploadDestination",
    "UploadResult",
    "UploadStatus",
    "UploaderError",
    "create_credential_provider",
    "create_uploader",
]
