"""
Uploader Interface

Abstract interface for upload implementations.
Follows Dependency Inversion Principle - high-level code depends on this abstraction,
not on the concrete resumable HTTP implementation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from core.media import MediaArtifact
from upload.interfaces.credential_provider_interface import CredentialProviderInterface
from upload.constants import AUTH_ERROR_STATUSES, TransferState, UploadStatus
from upload.utils.protocol_utils import progress_percent

# Receives whole percent confirmed, 0-100
ProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class UploadDestination:
    """
    Where an artifact goes.

    Attributes:
        folder_id: Parent folder of the remote file
        name: Remote file name
    """

    folder_id: str
    name: str


@dataclass
class UploadTransfer:
    """
    State of one resumable transfer.

    confirmed_bytes is the offset the server last reported holding and is
    where the next chunk starts. It can move back when a status check shows
    the server kept fewer bytes. peak_confirmed_bytes never decreases and
    drives reported progress.
    """

    source: MediaArtifact
    destination: UploadDestination
    session_uri: Optional[str] = None
    confirmed_bytes: int = 0
    peak_confirmed_bytes: int = 0
    state: TransferState = TransferState.PENDING
    remote_id: Optional[str] = None
    retries: int = 0

    @property
    def total_bytes(self) -> int:
        return self.source.size

    @property
    def progress(self) -> int:
        return progress_percent(self.peak_confirmed_bytes, self.total_bytes)

    @property
    def is_complete(self) -> bool:
        return self.remote_id is not None

    def confirm(self, offset: int) -> None:
        """
        Record the offset the server reports holding.

        The server is authoritative: a lower offset than before rewinds
        the transfer so the missing bytes are sent again.

        Raises:
            UploadProtocolError: If the offset is negative or past the end
        """
        if offset < 0 or offset > self.total_bytes:
            raise UploadProtocolError(
                f"Server offset {offset} outside 0-{self.total_bytes}",
            )
        self.confirmed_bytes = offset
        self.peak_confirmed_bytes = max(self.peak_confirmed_bytes, offset)

    def complete(self, remote_id: str) -> None:
        """Mark the transfer finished; the remote id is set once"""
        if self.remote_id is not None and self.remote_id != remote_id:
            raise UploadProtocolError(
                f"Server reported a second file id: {remote_id} (had {self.remote_id})",
            )
        self.remote_id = remote_id
        self.confirmed_bytes = self.total_bytes
        self.peak_confirmed_bytes = self.total_bytes
        self.state = TransferState.COMPLETE


@dataclass
class UploadResult:
    """
    Result of an upload operation.

    Attributes:
        success: True if upload completed successfully
        remote_id: Remote file id (if successful)
        status: Upload status code
        error_message: Error description (if failed)
        upload_duration: Time taken to upload in seconds
        file_size: Size of uploaded artifact in bytes
        remote_name: Name the file was stored under
    """

    success: bool
    remote_id: Optional[str] = None
    status: UploadStatus = UploadStatus.SUCCESS
    error_message: Optional[str] = None
    upload_duration: float = 0.0
    file_size: int = 0
    remote_name: Optional[str] = None


class UploaderInterface(ABC):
    """
    Abstract base class for uploaders.

    Any uploader implementation (Drive resumable, mock, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def transfer(
        self,
        artifact: MediaArtifact,
        destination: UploadDestination,
        credential: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Upload an in-memory artifact.

        Args:
            artifact: Media to upload (must not be empty)
            destination: Parent folder and remote file name
            credential: Bearer access token
            on_progress: Called with whole percent after each acknowledged chunk

        Returns:
            Remote file id

        Raises:
            UploadInitiationError: Upload session could not be created
            UploadRetriesExhaustedError: Transfer failed MAX_RETRIES times in a row
            UploaderError: Any other upload failure

        Example:
            remote_id = await uploader.transfer(
                artifact,
                UploadDestination("folder123", "video_stitched_1.mp4"),
                token,
                on_progress=lambda pct: print(f"{pct}%"),
            )
        """

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if uploader is ready to upload.

        Returns:
            True if the uploader can attempt transfers
        """

    @abstractmethod
    async def test_connection(self, credentials: CredentialProviderInterface) -> bool:
        """
        Test connection to the upload service.

        Verifies authentication and network connectivity without uploading.

        Returns:
            True if connection successful

        Example:
            if not await uploader.test_connection(oauth_manager):
                print("Cannot connect to Google Drive")
        """


class UploaderError(Exception):
    """
    Exception raised for upload-related errors.

    Examples:
    - Authentication failed
    - Network error
    - Protocol violation by the server
    - Retry budget exhausted
    """

    def __init__(self, message: str, status: UploadStatus = UploadStatus.FAILED):
        super().__init__(message)
        self.status = status


class InvalidArtifactError(UploaderError):
    """Artifact cannot be uploaded (empty)"""

    def __init__(self, message: str):
        super().__init__(message, UploadStatus.INVALID_FILE)


class UploadInitiationError(UploaderError):
    """Upload session could not be created"""

    def __init__(self, message: str, http_status: Optional[int] = None):
        status = (
            UploadStatus.AUTH_ERROR
            if http_status in AUTH_ERROR_STATUSES
            else UploadStatus.INITIATION_FAILED
        )
        super().__init__(message, status)
        self.http_status = http_status


class UploadProtocolError(UploaderError):
    """Server answer violates the resumable protocol"""

    def __init__(self, message: str):
        super().__init__(message, UploadStatus.PROTOCOL_ERROR)


class ChunkRejectedError(UploaderError):
    """Server answered a chunk or status check with an unexpected status"""

    def __init__(self, message: str, http_status: int):
        status = (
            UploadStatus.AUTH_ERROR
            if http_status in AUTH_ERROR_STATUSES
            else UploadStatus.NETWORK_ERROR
        )
        super().__init__(message, status)
        self.http_status = http_status


class UploadRetriesExhaustedError(UploaderError):
    """
    Transfer failed MAX_RETRIES consecutive times.

    Attributes:
        attempts: Failed attempts made
        confirmed_bytes: Offset the server held when giving up
        last_error: Final failure
    """

    def __init__(
        self,
        message: str,
        attempts: int,
        confirmed_bytes: int = 0,
        last_error: Optional[BaseException] = None,
    ):
        status = UploadStatus.RETRIES_EXHAUSTED
        if isinstance(last_error, UploaderError) and last_error.status == UploadStatus.AUTH_ERROR:
            status = UploadStatus.AUTH_ERROR
        super().__init__(message, status)
        self.attempts = attempts
        self.confirmed_bytes = confirmed_bytes
        self.last_error = last_error
