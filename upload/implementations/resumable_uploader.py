"""
Resumable Uploader Implementation

Chunked, byte-range-addressed upload to Google Drive using the resumable
upload protocol over httpx.

Protocol:
1. POST file metadata -> 200 + Location header (the session URI)
2. PUT slices with Content-Range until the server answers 200/201
   308 means "partial", its Range header says how much the server holds
3. After a failure: back off exponentially, then ask the server for its
   authoritative offset (zero-length PUT, "bytes */total") and resume there
"""

import asyncio
import json
import logging
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

import httpx
from googleapiclient.discovery import build

from core.media import MediaArtifact
from upload.interfaces.credential_provider_interface import CredentialProviderInterface
from upload.constants import (
    COMPLETE_STATUSES,
    DRIVE_API_SERVICE_NAME,
    DRIVE_API_VERSION,
    DRIVE_UPLOAD_URL,
    METADATA_CONTENT_TYPE,
    STATUS_RESUME_INCOMPLETE,
    UPLOAD_CHUNK_SIZE,
    UPLOAD_CHUNK_TIMEOUT,
    UPLOAD_INITIATE_TIMEOUT,
    UPLOAD_MAX_RETRIES,
    UPLOAD_RETRY_BASE_DELAY,
    UPLOAD_STATUS_TIMEOUT,
    TransferState,
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
    UploadRetriesExhaustedError,
    UploadTransfer,
)
from upload.utils.protocol_utils import (
    backoff_delay,
    format_content_range,
    format_status_range,
    format_timestamp,
    parse_range_header,
)

# Failures that consume one unit of the retry budget
RETRYABLE_ERRORS = (httpx.HTTPError, UploaderError)


class ResumableUploader(UploaderInterface):
    """
    Google Drive resumable uploader.

    Features:
    - 5 MiB chunks, never re-sending bytes the server confirmed
    - Server-authoritative resync after every failure
    - Exponential backoff (1s, 2s, 4s, 8s), 5 consecutive failures max
    - Progress callback after every acknowledged chunk

    Usage:
        async with httpx.AsyncClient() as client:
            uploader = ResumableUploader(client=client)
            remote_id = await uploader.transfer(
                artifact,
                UploadDestination(folder_id, "video_stitched_1.mp4"),
                access_token,
                on_progress=print,
            )
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        upload_url: str = DRIVE_UPLOAD_URL,
        chunk_size: int = UPLOAD_CHUNK_SIZE,
        max_retries: int = UPLOAD_MAX_RETRIES,
        base_delay: float = UPLOAD_RETRY_BASE_DELAY,
        initiate_timeout: float = UPLOAD_INITIATE_TIMEOUT,
        chunk_timeout: float = UPLOAD_CHUNK_TIMEOUT,
        status_timeout: float = UPLOAD_STATUS_TIMEOUT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        now: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize resumable uploader.

        Args:
            client: Shared httpx client, or None to open one per transfer
            upload_url: Session initiation endpoint
            chunk_size: Bytes per PUT
            max_retries: Consecutive failures before giving up
            base_delay: First backoff delay in seconds
            initiate_timeout: Timeout of the initiation POST
            chunk_timeout: Timeout of each chunk PUT
            status_timeout: Timeout of each status check
            sleep: Awaitable used for backoff (injectable for tests)
            now: Clock for the metadata timestamps
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.logger = logging.getLogger(__name__)
        self._client = client
        self.upload_url = upload_url
        self.chunk_size = chunk_size
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.initiate_timeout = initiate_timeout
        self.chunk_timeout = chunk_timeout
        self.status_timeout = status_timeout
        self._sleep = sleep
        self._now = now or (lambda: datetime.now(timezone.utc))

        # Most recent transfer, kept for diagnostics
        self.last_transfer: Optional[UploadTransfer] = None

        self.logger.info(
            f"Resumable Uploader initialized "
            f"(chunk: {chunk_size} bytes, max retries: {max_retries})",
        )

    async def transfer(
        self,
        artifact: MediaArtifact,
        destination: UploadDestination,
        credential: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        if artifact.size == 0:
            raise InvalidArtifactError("Cannot upload an empty artifact")

        transfer = UploadTransfer(source=artifact, destination=destination)
        self.last_transfer = transfer

        self.logger.info(
            f"Starting upload: {destination.name} "
            f"({artifact.size} bytes, {artifact.mime_type})",
        )
        start_time = time.monotonic()

        if self._client is not None:
            remote_id = await self._run(self._client, transfer, credential, on_progress)
        else:
            async with httpx.AsyncClient() as client:
                remote_id = await self._run(client, transfer, credential, on_progress)

        self.logger.info(
            f"Upload complete: {remote_id} ({time.monotonic() - start_time:.1f}s)",
        )
        return remote_id

    async def _run(
        self,
        client: httpx.AsyncClient,
        transfer: UploadTransfer,
        credential: str,
        on_progress: Optional[ProgressCallback],
    ) -> str:
        transfer.state = TransferState.INITIATING
        try:
            transfer.session_uri = await self._initiate(client, transfer, credential)
        except UploadInitiationError:
            transfer.state = TransferState.FAILED
            raise

        transfer.state = TransferState.TRANSFERRING
        last_error: Optional[BaseException] = None

        while (
            transfer.confirmed_bytes < transfer.total_bytes
            and transfer.retries < self.max_retries
        ):
            try:
                await self._send_next_chunk(client, transfer)
            except RETRYABLE_ERRORS as e:
                last_error = e
                transfer.retries += 1
                self.logger.warning(
                    f"Chunk upload failed "
                    f"(attempt {transfer.retries}/{self.max_retries}): {e}",
                )

                if transfer.retries >= self.max_retries:
                    break

                delay = backoff_delay(transfer.retries, self.base_delay)
                transfer.state = TransferState.BACKING_OFF
                self.logger.info(f"Retrying in {delay:.1f}s...")
                await self._sleep(delay)

                transfer.state = TransferState.TRANSFERRING
                await self._resync(client, transfer)
                if transfer.is_complete:
                    self._report_progress(transfer, on_progress)
                continue

            transfer.retries = 0
            self._report_progress(transfer, on_progress)

        if transfer.is_complete:
            return transfer.remote_id

        if transfer.confirmed_bytes >= transfer.total_bytes:
            # Every byte acknowledged through 308 but no file resource yet
            try:
                await self._query_status(client, transfer)
            except RETRYABLE_ERRORS as e:
                last_error = e
            if transfer.is_complete:
                return transfer.remote_id
            transfer.state = TransferState.FAILED
            raise UploadProtocolError(
                "Upload completed but no file id was received",
            ) from last_error

        transfer.state = TransferState.FAILED
        self.logger.error(
            f"Upload failed after {transfer.retries} attempts "
            f"at byte {transfer.confirmed_bytes}/{transfer.total_bytes}",
        )
        raise UploadRetriesExhaustedError(
            f"Upload failed after {transfer.retries} attempts: {last_error}",
            attempts=transfer.retries,
            confirmed_bytes=transfer.confirmed_bytes,
            last_error=last_error,
        ) from last_error

    # =========================================================================
    # PROTOCOL STEPS
    # =========================================================================

    async def _initiate(
        self,
        client: httpx.AsyncClient,
        transfer: UploadTransfer,
        credential: str,
    ) -> str:
        """POST the file metadata and return the session URI"""
        artifact = transfer.source
        timestamp = format_timestamp(self._now())
        metadata = {
            "name": transfer.destination.name,
            "parents": [transfer.destination.folder_id],
            "mimeType": artifact.mime_type,
            "createdTime": timestamp,
            "modifiedTime": timestamp,
        }
        headers = {
            "Authorization": f"Bearer {credential}",
            "Content-Type": METADATA_CONTENT_TYPE,
            "X-Upload-Content-Type": artifact.mime_type,
            "X-Upload-Content-Length": str(artifact.size),
        }

        try:
            response = await client.post(
                self.upload_url,
                headers=headers,
                content=json.dumps(metadata).encode("utf-8"),
                timeout=self.initiate_timeout,
            )
        except httpx.HTTPError as e:
            raise UploadInitiationError(f"Failed to initiate upload: {e}") from e

        if response.status_code != 200:
            raise UploadInitiationError(
                f"Failed to initiate upload: {response.status_code} {response.text}",
                http_status=response.status_code,
            )

        session_uri = response.headers.get("Location")
        if not session_uri:
            raise UploadInitiationError("No upload URL received from Google Drive")

        self.logger.debug(f"Upload session created: {session_uri}")
        return session_uri

    async def _send_next_chunk(
        self,
        client: httpx.AsyncClient,
        transfer: UploadTransfer,
    ) -> None:
        """PUT the slice starting at the confirmed offset"""
        start = transfer.confirmed_bytes
        end = min(start + self.chunk_size, transfer.total_bytes)
        total = transfer.total_bytes

        self.logger.debug(f"Uploading bytes {start}-{end - 1}/{total}")

        response = await client.put(
            transfer.session_uri,
            headers={
                "Content-Range": format_content_range(start, end - 1, total),
                "Content-Type": transfer.source.mime_type,
            },
            content=transfer.source.data[start:end],
            timeout=self.chunk_timeout,
        )

        if response.status_code in COMPLETE_STATUSES:
            transfer.complete(self._parse_remote_id(response))
            return

        if response.status_code == STATUS_RESUME_INCOMPLETE:
            offset = self._parse_offset(response)
            if offset is None:
                await self._query_status(client, transfer)
            else:
                transfer.confirm(offset)

            if transfer.confirmed_bytes <= start and not transfer.is_complete:
                raise UploadProtocolError(
                    f"Server acknowledged no new bytes after chunk at {start}",
                )
            return

        raise ChunkRejectedError(
            f"Chunk upload failed with status {response.status_code}",
            response.status_code,
        )

    async def _query_status(self, client: httpx.AsyncClient, transfer: UploadTransfer) -> None:
        """Ask the server how many bytes it holds (zero-length PUT)"""
        response = await client.put(
            transfer.session_uri,
            headers={"Content-Range": format_status_range(transfer.total_bytes)},
            content=b"",
            timeout=self.status_timeout,
        )

        if response.status_code in COMPLETE_STATUSES:
            transfer.complete(self._parse_remote_id(response))
            return

        if response.status_code == STATUS_RESUME_INCOMPLETE:
            offset = self._parse_offset(response)
            transfer.confirm(offset if offset is not None else 0)
            return

        raise ChunkRejectedError(
            f"Upload status check failed with status {response.status_code}",
            response.status_code,
        )

    async def _resync(self, client: httpx.AsyncClient, transfer: UploadTransfer) -> None:
        """
        Re-read the authoritative offset after a backoff.

        A failed status check is not retried on its own; the next chunk attempt
        starts from the last confirmed offset and its outcome counts.
        """
        assumed = transfer.confirmed_bytes
        try:
            await self._query_status(client, transfer)
            if transfer.confirmed_bytes < assumed:
                self.logger.warning(
                    f"Server holds only {transfer.confirmed_bytes} bytes "
                    f"(had {assumed}), rewinding",
                )
            self.logger.info(
                f"Resuming upload at byte {transfer.confirmed_bytes}/{transfer.total_bytes}",
            )
        except RETRYABLE_ERRORS as e:
            self.logger.warning(
                f"Status check failed, resuming from byte {transfer.confirmed_bytes}: {e}",
            )

    # =========================================================================
    # RESPONSE PARSING
    # =========================================================================

    def _parse_offset(self, response: httpx.Response) -> Optional[int]:
        try:
            return parse_range_header(response.headers.get("Range"))
        except ValueError as e:
            raise UploadProtocolError(str(e)) from e

    def _parse_remote_id(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError as e:
            raise UploadProtocolError(f"Upload response is not valid JSON: {e}") from e

        remote_id = body.get("id") if isinstance(body, dict) else None
        if not remote_id:
            raise UploadProtocolError("Upload response did not include a file id")
        return str(remote_id)

    def _report_progress(
        self,
        transfer: UploadTransfer,
        on_progress: Optional[ProgressCallback],
    ) -> None:
        percent = transfer.progress
        self.logger.debug(
            f"Upload progress: {percent}% "
            f"({transfer.confirmed_bytes}/{transfer.total_bytes})",
        )
        if on_progress:
            try:
                on_progress(percent)
            except Exception as e:
                self.logger.error(f"Error in progress callback: {e}")

    def is_available(self) -> bool:
        """Needs nothing beyond a credential supplied per transfer"""
        return True

    async def test_connection(self, credentials: CredentialProviderInterface) -> bool:
        """
        Test connection to the Drive API.

        Fetches the authenticated user through the Drive v3 discovery client.
        """
        try:
            email = await asyncio.to_thread(self._fetch_drive_user, credentials)
            self.logger.info(f"Drive connection OK (user: {email})")
            return True
        except Exception as e:
            self.logger.error(f"Drive connection test failed: {e}")
            return False

    def _fetch_drive_user(self, credentials: CredentialProviderInterface) -> str:
        service = build(
            DRIVE_API_SERVICE_NAME,
            DRIVE_API_VERSION,
            credentials=credentials.get_credentials(),
            cache_discovery=False,
        )
        about = service.about().get(fields="user").execute()
        return about.get("user", {}).get("emailAddress", "unknown")
