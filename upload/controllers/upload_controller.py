"""
Upload Controller

High-level coordinator for feedback media uploads.
Simplifies upload operations for the pipeline orchestrator.

- Clean, simple API: one call per artifact, result object back
- Picks the destination folder and remote file name
- Handles credential lookup and invalidation internally
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from core.media import MediaArtifact
from upload.constants import (
    DRIVE_PRIVATE_FOLDER_ID,
    DRIVE_SOCIAL_FOLDER_ID,
    UploadStatus,
)
from upload.factory import create_credential_provider, create_uploader
from upload.interfaces.credential_provider_interface import (
    CredentialError,
    CredentialProviderInterface,
)
from upload.interfaces.uploader_interface import (
    ProgressCallback,
    UploadDestination,
    UploaderError,
    UploaderInterface,
    UploadResult,
)
from upload.utils.protocol_utils import build_remote_name


class UploadController:
    """
    High-level upload controller.

    This class:
    - Provides simple upload API for the pipeline
    - Chooses social or private folder from consent
    - Names remote files "<base>_<timestamp>.<ext>"
    - Converts transfer failures into UploadResult objects

    Usage:
        controller = UploadController()

        result = await controller.upload_artifact(
            artifact,
            base_name="video_stitched_1700000000000",
            consent=True,
            on_progress=lambda pct: print(f"{pct}%"),
        )

        if result.success:
            print(f"Uploaded: {result.remote_id}")
    """

    def __init__(
        self,
        uploader: Optional[UploaderInterface] = None,
        credentials: Optional[CredentialProviderInterface] = None,
        social_folder_id: Optional[str] = DRIVE_SOCIAL_FOLDER_ID,
        private_folder_id: Optional[str] = DRIVE_PRIVATE_FOLDER_ID,
        now: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize upload controller.

        Args:
            uploader: UploaderInterface implementation, or None to auto-create
            credentials: Bearer token source, or None to auto-create
            social_folder_id: Drive folder for feedback with sharing consent
            private_folder_id: Drive folder for feedback without consent
            now: Clock used for remote file names

        Example:
            # Normal usage - auto-creates from .env
            controller = UploadController()

            # Testing
            controller = UploadController(
                uploader=MockUploader(),
                credentials=StaticCredentialProvider("token"),
                social_folder_id="social",
                private_folder_id="private",
            )
        """
        self.logger = logging.getLogger(__name__)

        self.credentials = credentials or create_credential_provider()
        self.uploader = uploader or create_uploader()
        self.social_folder_id = social_folder_id
        self.private_folder_id = private_folder_id
        self._now = now or (lambda: datetime.now(timezone.utc))

        if not self.uploader.is_available():
            self.logger.warning(
                "Uploader initialized but not available. "
                "Check authentication and network connection.",
            )

        self.logger.info("Upload Controller initialized")

    async def upload_artifact(
        self,
        artifact: MediaArtifact,
        base_name: str,
        consent: bool,
        on_progress: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """
        Upload an artifact to the folder matching the consent choice.

        This is the main method for the pipeline to call. Never raises for
        transfer failures; inspect the returned result instead.

        Args:
            artifact: Media to upload
            base_name: Remote name without timestamp or extension
            consent: True to upload into the social folder
            on_progress: Called with whole percent as chunks are confirmed

        Returns:
            UploadResult with success status and details

        Example:
            result = await controller.upload_artifact(artifact, "audio_stitched_1", False)
            if not result.success:
                logger.error(f"Upload failed: {result.error_message}")
        """
        destination = self.build_destination(artifact, base_name, consent)
        if destination is None:
            self.logger.error("❌ Upload failed: Google Drive folder ID not configured")
            return UploadResult(
                success=False,
                status=UploadStatus.FAILED,
                error_message="Google Drive folder ID not configured",
                file_size=artifact.size,
            )

        try:
            token = await asyncio.to_thread(self.credentials.get_access_token)
        except CredentialError as e:
            self.logger.error(f"❌ Upload failed: {e} (status: auth_error)")
            return UploadResult(
                success=False,
                status=UploadStatus.AUTH_ERROR,
                error_message=str(e),
                file_size=artifact.size,
                remote_name=destination.name,
            )

        self.logger.info(
            f"Uploading {artifact.mime_type} artifact as {destination.name} "
            f"({'social' if consent else 'private'} folder)",
        )
        start_time = time.monotonic()

        try:
            remote_id = await self.uploader.transfer(
                artifact,
                destination,
                token,
                on_progress=on_progress,
            )
        except UploaderError as e:
            if e.status == UploadStatus.AUTH_ERROR:
                self.credentials.invalidate()
            self.logger.error(
                f"❌ Upload failed: {e} (status: {e.status.value})",
            )
            return UploadResult(
                success=False,
                status=e.status,
                error_message=str(e),
                upload_duration=time.monotonic() - start_time,
                file_size=artifact.size,
                remote_name=destination.name,
            )

        duration = time.monotonic() - start_time
        self.logger.info(
            f"✅ Upload successful: {remote_id} "
            f"({duration:.1f}s, {artifact.size / (1024 * 1024):.1f} MB)",
        )
        return UploadResult(
            success=True,
            remote_id=remote_id,
            status=UploadStatus.SUCCESS,
            upload_duration=duration,
            file_size=artifact.size,
            remote_name=destination.name,
        )

    def build_destination(
        self,
        artifact: MediaArtifact,
        base_name: str,
        consent: bool,
    ) -> Optional[UploadDestination]:
        """
        Folder and timestamped name for an artifact.

        Returns:
            UploadDestination, or None if the target folder is not configured
        """
        folder_id = self.social_folder_id if consent else self.private_folder_id
        if not folder_id:
            return None

        name = build_remote_name(base_name, artifact.extension, self._now())
        return UploadDestination(folder_id=folder_id, name=name)

    async def test_connection(self) -> bool:
        """
        Test connection to Google Drive.

        Use this before uploading to verify system is ready.

        Returns:
            True if connection successful
        """
        self.logger.info("Testing Google Drive connection...")

        try:
            result = await self.uploader.test_connection(self.credentials)

            if result:
                self.logger.info("✅ Connection test passed")
            else:
                self.logger.warning("❌ Connection test failed")

            return result

        except Exception as e:
            self.logger.error(f"Connection test error: {e}")
            return False

    def is_ready(self) -> bool:
        """True if uploader is available and credentials are valid"""
        return self.uploader.is_available() and self.credentials.is_authenticated()

    def get_status(self) -> Dict[str, Any]:
        """
        Get current controller status.

        Returns:
            Dictionary with status information
        """
        return {
            "ready": self.is_ready(),
            "social_folder_id": self.social_folder_id,
            "private_folder_id": self.private_folder_id,
            "uploader_type": type(self.uploader).__name__,
            "credentials_type": type(self.credentials).__name__,
        }
