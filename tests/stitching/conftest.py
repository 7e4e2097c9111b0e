"""
Stitching Test Configuration and Fixtures

Prompt clips are served by an in-memory media host through
httpx.MockTransport; media processing uses MockMediaProcessor.
"""

from collections import defaultdict, deque

import httpx
import pytest

from core.media import MediaArtifact
from stitching.controllers.stitching_engine import StitchingEngine
from stitching.implementations.clip_fetcher import ClipFetcher
from stitching.implementations.mock_processor import MockMediaProcessor

MEDIA_ROOT = "https://media.test/storage/v1/object/public/feedback_videos"


class FakeMediaHost:
    """Serves registered URLs; scripted failures are consumed first"""

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.requests: list[str] = []
        self._failures: dict[str, deque] = defaultdict(deque)

    def add(self, name: str, data: bytes) -> str:
        url = f"{MEDIA_ROOT}/{name}"
        self.files[url] = data
        return url

    def fail(self, url: str, status: int, times: int = 1) -> None:
        self._failures[url].extend([status] * times)

    def drop_connection(self, url: str, times: int = 1) -> None:
        self._failures[url].extend([None] * times)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)

        if self._failures[url]:
            status = self._failures[url].popleft()
            if status is None:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(status)

        if url in self.files:
            return httpx.Response(200, content=self.files[url])
        return httpx.Response(404)

    def count(self, url: str) -> int:
        return self.requests.count(url)


@pytest.fixture
def media_host():
    """In-memory prompt clip host with question1..3 and the placeholder"""
    host = FakeMediaHost()
    host.add("question1.mp4", b"P1")
    host.add("question2.mp4", b"P2")
    host.add("question3.mp4", b"P3")
    host.add("microphone_background.png", b"IMG")
    return host


@pytest.fixture
def prompt_urls(media_host):
    return [f"{MEDIA_ROOT}/question{i}.mp4" for i in (1, 2, 3)]


@pytest.fixture
def placeholder_url():
    return f"{MEDIA_ROOT}/microphone_background.png"


@pytest.fixture
def clip_fetcher(media_host, sleep_recorder):
    client = httpx.AsyncClient(transport=httpx.MockTransport(media_host.handler))
    return ClipFetcher(client=client, sleep=sleep_recorder)


@pytest.fixture
def mock_processor():
    return MockMediaProcessor()


@pytest.fixture
def stitching_engine(mock_processor, clip_fetcher, placeholder_url):
    return StitchingEngine(
        processor=mock_processor,
        fetcher=clip_fetcher,
        placeholder_image=placeholder_url,
    )


@pytest.fixture
def video_recording():
    return MediaArtifact(data=b"U", mime_type="video/webm", duration_seconds=60.0)


@pytest.fixture
def audio_recording():
    return MediaArtifact(data=b"A", mime_type="audio/webm", duration_seconds=45.0)
