"""
Pipeline Test Configuration and Fixtures

The orchestrator runs against real controllers with mock collaborators:
MockCaptureDevice (manual chunks), MockMediaProcessor, MockUploader,
MockFeedbackStore. Prompt clips come from an httpx.MockTransport.
"""

from datetime import datetime, timezone

import httpx
import pytest

from pipeline.controllers.pipeline_orchestrator import PipelineOrchestrator
from recording.constants import RecordingMode
from recording.controllers.recording_session import RecordingSession
from recording.implementations.mock_capture import MockCaptureDevice
from stitching.controllers.stitching_engine import StitchingEngine
from stitching.implementations.clip_fetcher import ClipFetcher
from stitching.implementations.mock_processor import MockMediaProcessor
from storage.implementations.mock_store import MockFeedbackStore
from upload.auth.oauth_manager import StaticCredentialProvider
from upload.controllers.upload_controller import UploadController
from upload.implementations.mock_uploader import MockUploader

PROMPT_ROOT = "https://media.test/storage/v1/object/public/feedback_videos"
PROMPT_URLS = [f"{PROMPT_ROOT}/question{i}.mp4" for i in (1, 2, 3)]
PLACEHOLDER_URL = f"{PROMPT_ROOT}/microphone_background.png"

# 2023-11-14T22:13:20Z
WALL_CLOCK = 1700000000.0
UPLOAD_NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def serve_prompts(request: httpx.Request) -> httpx.Response:
    """P1, P2, P3 for the three questions and IMG for the placeholder"""
    files = {url: f"P{i}".encode() for i, url in enumerate(PROMPT_URLS, start=1)}
    files[PLACEHOLDER_URL] = b"IMG"

    data = files.get(str(request.url))
    if data is None:
        return httpx.Response(404)
    return httpx.Response(200, content=data)


class DeviceProvider:
    """device_factory that keeps every device it hands out"""

    def __init__(self):
        self.devices = []
        self.requested_modes = []

    def __call__(self, recording_mode: RecordingMode) -> MockCaptureDevice:
        device = MockCaptureDevice(simulate_timing=False)
        self.devices.append(device)
        self.requested_modes.append(recording_mode)
        return device

    @property
    def last(self) -> MockCaptureDevice:
        return self.devices[-1]


# =============================================================================
# COLLABORATOR FIXTURES
# =============================================================================


@pytest.fixture
def devices():
    provider = DeviceProvider()
    yield provider
    for device in provider.devices:
        device.cleanup()


@pytest.fixture
def feedback_store():
    return MockFeedbackStore()


@pytest.fixture
def media_processor():
    return MockMediaProcessor()


@pytest.fixture
def stitcher(media_processor, sleep_recorder):
    client = httpx.AsyncClient(transport=httpx.MockTransport(serve_prompts))
    return StitchingEngine(
        processor=media_processor,
        fetcher=ClipFetcher(client=client, sleep=sleep_recorder),
        placeholder_image=PLACEHOLDER_URL,
    )


@pytest.fixture
def mock_drive():
    return MockUploader()


@pytest.fixture
def make_upload_controller():
    """Build an UploadController around any uploader"""

    def make(uploader):
        return UploadController(
            uploader=uploader,
            credentials=StaticCredentialProvider("test-token"),
            social_folder_id="social-folder",
            private_folder_id="private-folder",
            now=lambda: UPLOAD_NOW,
        )

    return make


# =============================================================================
# ORCHESTRATOR FIXTURES
# =============================================================================


@pytest.fixture
def make_pipeline(feedback_store, stitcher, mock_drive, make_upload_controller, devices, fake_clock):
    """
    Build a PipelineOrchestrator; keyword arguments override collaborators.

    Recording sessions use fake_clock and a short stop timeout.
    """

    def make(**overrides):
        kwargs = {
            "store": feedback_store,
            "stitching_engine": stitcher,
            "upload_controller": make_upload_controller(mock_drive),
            "device_factory": devices,
            "prompt_sources": PROMPT_URLS,
            "session_factory": lambda mode, device: RecordingSession(
                device, mode, stop_timeout=0.05, clock=fake_clock,
            ),
            "clock": lambda: WALL_CLOCK,
        }
        kwargs.update(overrides)
        return PipelineOrchestrator(**kwargs)

    return make


@pytest.fixture
def pipeline(make_pipeline):
    return make_pipeline()
