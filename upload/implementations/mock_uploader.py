"""
Mock Uploader Implementation

Simulated uploader for testing without Google Drive.
Similar to MockCaptureDevice in the recording module.
"""

import asyncio
import logging
import random
import time
from typing import Optional
from uuid import uuid4

from core.media import MediaArtifact
from upload.constants import UploadStatus
from upload.interfaces.credential_provider_interface import CredentialProviderInterface
from upload.interfaces.uploader_interface import (
    InvalidArtifactError,
    ProgressCallback,
    UploadDestination,
    UploaderError,
    UploaderInterface,
)


class MockUploader(UploaderInterface):
    """
    Mock uploader for testing.

    This simulates upload progress and behavior without actually uploading.
    Useful for:
    - Unit tests
    - Development without Drive credentials
    - CI/CD pipelines
    """

    def __init__(
        self,
        simulate_timing: bool = False,
        fail_rate: float = 0.0,
        progress_steps: int = 4,
    ):
        """
        Initialize mock uploader.

        Args:
            simulate_timing: If True, sleep briefly between progress steps
            fail_rate: Probability of upload failure (0.0 to 1.0)
            progress_steps: Progress callbacks per upload (last one is 100)

        Example:
            # Fast mock for unit tests
            uploader = MockUploader()

            # Test error handling
            uploader = MockUploader(fail_rate=1.0)
        """
        self.logger = logging.getLogger(__name__)
        self.simulate_timing = simulate_timing
        self.fail_rate = fail_rate
        self.progress_steps = max(1, progress_steps)

        # Track upload history for testing
        self.upload_history: list[dict] = []

        # Configuration for test scenarios
        self._next_error: Optional[UploaderError] = None
        self._gate: Optional[asyncio.Event] = None

        self.logger.info(
            f"Mock Uploader initialized "
            f"(timing: {simulate_timing}, fail_rate: {fail_rate})",
        )

    async def transfer(
        self,
        artifact: MediaArtifact,
        destination: UploadDestination,
        credential: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Simulate an upload.

        Reports evenly spaced progress and returns a fake remote id.
        """
        if artifact.size == 0:
            raise InvalidArtifactError("Cannot upload an empty artifact")

        self.logger.info(
            f"[MOCK] Starting upload: {destination.name} ({artifact.size} bytes)",
        )

        if self._gate is not None:
            await self._gate.wait()

        if self._next_error is not None:
            error, self._next_error = self._next_error, None
            self.logger.error(f"[MOCK] Upload failed: {error}")
            raise error

        if random.random() < self.fail_rate:
            raise UploaderError(
                "Simulated upload failure",
                status=UploadStatus.NETWORK_ERROR,
            )

        for step in range(1, self.progress_steps + 1):
            if self.simulate_timing:
                await asyncio.sleep(0.01)
            else:
                await asyncio.sleep(0)
            self._trigger_progress(on_progress, round(step * 100 / self.progress_steps))

        remote_id = f"mock_{uuid4().hex[:16]}"
        self.upload_history.append(
            {
                "remote_id": remote_id,
                "name": destination.name,
                "folder_id": destination.folder_id,
                "mime_type": artifact.mime_type,
                "file_size": artifact.size,
                "data": artifact.data,
                "credential": credential,
                "timestamp": time.time(),
            },
        )

        self.logger.info(f"[MOCK] ✅ Upload successful: {remote_id}")
        return remote_id

    def _trigger_progress(self, on_progress: Optional[ProgressCallback], percent: int) -> None:
        if on_progress:
            try:
                on_progress(percent)
            except Exception as e:
                self.logger.error(f"Error in progress callback: {e}")

    def is_available(self) -> bool:
        """Mock uploader is always available"""
        return True

    async def test_connection(self, credentials: CredentialProviderInterface) -> bool:
        """Mock connection test always succeeds"""
        self.logger.info("[MOCK] Connection test: OK")
        return True

    # =========================================================================
    # TESTING HELPER METHODS
    # =========================================================================

    def simulate_failure(self, error: Optional[UploaderError] = None) -> None:
        """
        Make the next transfer raise `error`.

        Example:
            uploader.simulate_failure(UploaderError("boom", UploadStatus.AUTH_ERROR))
        """
        self._next_error = error or UploaderError(
            "Simulated upload failure",
            status=UploadStatus.NETWORK_ERROR,
        )

    def hold(self) -> None:
        """Block transfers until release() is called"""
        self._gate = asyncio.Event()

    def release(self) -> None:
        """Let held transfers continue"""
        if self._gate is not None:
            self._gate.set()
        self._gate = None

    def get_upload_history(self) -> list[dict]:
        """
        Get list of all uploads performed.

        Returns:
            List of upload records
        """
        return self.upload_history.copy()

    def clear_history(self) -> None:
        """Clear upload history"""
        self.upload_history.clear()
        self.logger.debug("[MOCK] Upload history cleared")

    def get_last_upload(self) -> Optional[dict]:
        """
        Get most recent upload.

        Returns:
            Last upload record, or None
        """
        return self.upload_history[-1] if self.upload_history else None
