"""
Upload Interfaces Package

Exposes abstract interfaces and data types for upload components.
"""

from upload.interfaces.credential_provider_interface import (
    CredentialError,
    CredentialProviderInterface,
)
from upload.interfaces.uploader_interface import (
    ChunkRejectedError,
    InvalidArtifactError,
    ProgressCallback,
    UploadDestination,
    UploaderError,
    UploaderInterface,
    UploadInitiationError,
    UploadProtocolError,
    UploadResult,
    UploadRetriesExhaustedError,
    UploadTransfer,
)

# Public API
__all__ = [
    "ChunkRejectedError",
    "CredentialError",
    "CredentialProviderInterface",
    "InvalidArtifactError",
    "ProgressCallback",
    "UploadDestination",
    "UploadInitiationError",
    "UploadProtocolError",
    "UploadResult",
    "UploadRetriesExhaustedError",
    "UploadTransfer",
    "UploaderError",
    "UploaderInterface",
]
