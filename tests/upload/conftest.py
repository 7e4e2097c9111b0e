"""
Upload Test Configuration and Fixtures

Provides an in-memory Google Drive resumable endpoint served through
httpx.MockTransport, so the real uploader runs without network access.
"""

import json
import re
from collections import deque
from datetime import datetime, timezone
from typing import Optional

import httpx
import pytest

from core.media import MediaArtifact
from upload.auth.oauth_manager import StaticCredentialProvider
from upload.implementations.mock_uploader import MockUploader
from upload.implementations.resumable_uploader import ResumableUploader

UPLOAD_URL = "https://drive.test/upload/drive/v3/files?uploadType=resumable"
SESSION_URI = "https://drive.test/upload/drive/v3/files?upload_id=session-1"
FIXED_NOW = datetime(2025, 3, 4, 5, 6, 7, 890000, tzinfo=timezone.utc)

_CHUNK_RANGE = re.compile(r"^bytes (\d+)-(\d+)/(\d+)$")
_STATUS_RANGE = re.compile(r"^bytes \*/(\d+)$")


class FakeDriveServer:
    """
    Minimal resumable upload server.

    Stores every chunk it accepts and answers like Drive does:
    308 + Range while incomplete, 200 + file JSON once every byte arrived.
    Scripted responses replace the default behavior for the next requests.
    """

    def __init__(self, file_id: str = "drive-file-1"):
        self.file_id = file_id
        self.upload_url = UPLOAD_URL
        self.session_uri = SESSION_URI
        self.received = bytearray()
        self.requests: list[httpx.Request] = []

        self._initiate_script: deque = deque()
        self._chunk_script: deque = deque()
        self._status_script: deque = deque()

    # -------------------------------------------------------------------------
    # Request routing
    # -------------------------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.method == "POST":
            if self._initiate_script:
                return self._initiate_script.popleft()(self, request)
            return httpx.Response(200, headers={"Location": SESSION_URI})

        content_range = request.headers["Content-Range"]
        query = _STATUS_RANGE.match(content_range)
        if query:
            if self._status_script:
                return self._status_script.popleft()(self, request)
            return self.status_response(int(query.group(1)))

        if self._chunk_script:
            return self._chunk_script.popleft()(self, request)
        return self.accept(request)

    def accept(self, request: httpx.Request, limit: Optional[int] = None) -> httpx.Response:
        """Store the chunk body (optionally only `limit` bytes) and answer"""
        start, _, total = (int(g) for g in _CHUNK_RANGE.match(request.headers["Content-Range"]).groups())
        assert start == len(self.received), "chunk does not continue stored bytes"

        body = request.content if limit is None else request.content[:limit]
        self.received.extend(body)
        return self.status_response(total)

    def status_response(self, total: int) -> httpx.Response:
        if len(self.received) >= total:
            return httpx.Response(200, json={"id": self.file_id, "name": "uploaded"})
        if not self.received:
            return httpx.Response(308)
        return httpx.Response(308, headers={"Range": f"bytes=0-{len(self.received) - 1}"})

    # -------------------------------------------------------------------------
    # Scripting helpers
    # -------------------------------------------------------------------------

    def fail_initiate(self, status: int, text: str = "error") -> None:
        self._initiate_script.append(lambda server, request: httpx.Response(status, text=text))

    def initiate_without_location(self) -> None:
        self._initiate_script.append(lambda server, request: httpx.Response(200))

    def fail_chunks(self, count: int, status: int = 503) -> None:
        for _ in range(count):
            self._chunk_script.append(lambda server, request: httpx.Response(status))

    def drop_connection_on_chunks(self, count: int) -> None:
        def drop(server, request):
            raise httpx.ConnectError("connection reset", request=request)

        for _ in range(count):
            self._chunk_script.append(drop)

    def store_then_drop_connection(self) -> None:
        """Server keeps the chunk but the response never arrives"""

        def lost(server, request):
            server.accept(request)
            raise httpx.ReadTimeout("response lost", request=request)

        self._chunk_script.append(lost)

    def pass_through(self) -> None:
        """Queue one normally accepted chunk (keeps later scripted entries in order)"""
        self._chunk_script.append(lambda server, request: server.accept(request))

    def store_partially(self, limit: int) -> None:
        self._chunk_script.append(lambda server, request: server.accept(request, limit=limit))

    def answer_chunk(self, response: httpx.Response, store: bool = True) -> None:
        def scripted(server, request):
            if store:
                server.accept(request)
            return response

        self._chunk_script.append(scripted)

    def answer_status_check(self, response: httpx.Response) -> None:
        self._status_script.append(lambda server, request: response)

    def lose_bytes_after(self, keep: int) -> None:
        """Next status check finds only the first `keep` bytes stored"""

        def truncated(server, request):
            del server.received[keep:]
            return server.status_response(int(_STATUS_RANGE.match(request.headers["Content-Range"]).group(1)))

        self._status_script.append(truncated)

    # -------------------------------------------------------------------------
    # Inspection helpers
    # -------------------------------------------------------------------------

    def chunk_requests(self) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == "PUT" and not r.headers["Content-Range"].startswith("bytes */")
        ]

    def status_requests(self) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == "PUT" and r.headers["Content-Range"].startswith("bytes */")
        ]

    def initiate_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def content_ranges(self) -> list[str]:
        return [r.headers["Content-Range"] for r in self.chunk_requests()]

    def initiate_metadata(self) -> dict:
        return json.loads(self.initiate_requests()[0].content)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def drive_server():
    """In-memory Drive resumable endpoint"""
    return FakeDriveServer()


@pytest.fixture
def drive_client(drive_server):
    """httpx client routed to the fake Drive server"""
    return httpx.AsyncClient(transport=httpx.MockTransport(drive_server.handler))


@pytest.fixture
def make_uploader(drive_client, sleep_recorder):
    """
    Build a ResumableUploader against the fake server.

    Usage:
        uploader = make_uploader(chunk_size=2 * 1024 * 1024)
    """

    def _make(**kwargs):
        kwargs.setdefault("client", drive_client)
        kwargs.setdefault("upload_url", UPLOAD_URL)
        kwargs.setdefault("sleep", sleep_recorder)
        kwargs.setdefault("now", lambda: FIXED_NOW)
        return ResumableUploader(**kwargs)

    return _make


@pytest.fixture
def make_artifact():
    """
    Build a MediaArtifact of a given size with position-dependent bytes.

    Usage:
        artifact = make_artifact(12 * 1024 * 1024)
    """

    def _make(size: int, mime_type: str = "video/mp4") -> MediaArtifact:
        data = (bytes(range(251)) * (size // 251 + 1))[:size]
        return MediaArtifact(data=data, mime_type=mime_type, duration_seconds=10.0)

    return _make


@pytest.fixture
def static_credentials():
    """Credential provider serving a fixed token"""
    return StaticCredentialProvider("test-token")


@pytest.fixture
def mock_uploader():
    """Create a mock uploader with fast timing"""
    return MockUploader(simulate_timing=False)
