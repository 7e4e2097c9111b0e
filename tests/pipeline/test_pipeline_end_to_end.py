"""
End-to-end pipeline test with the real resumable uploader

Audio run: three prompt clips, 45 seconds of recording, a Drive endpoint
simulated through httpx.MockTransport that accepts small chunks.
"""

from datetime import datetime, timezone

import httpx
import pytest

from pipeline.constants import FeedbackMode, PipelineState
from pipeline.models import FeedbackAnswer
from upload.implementations.resumable_uploader import ResumableUploader

SESSION_URI = "https://www.googleapis.com/upload/drive/v3/files?upload_id=e2e"


class AcceptingDrive:
    """Stores every chunk and acknowledges it with a Range header"""

    def __init__(self):
        self.received = bytearray()
        self.metadata = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self.metadata = request.read()
            return httpx.Response(200, headers={"Location": SESSION_URI})

        self.received += request.content
        total = int(request.headers["Content-Range"].rsplit("/", 1)[1])
        if len(self.received) >= total:
            return httpx.Response(200, json={"id": "drive-file-45"})
        return httpx.Response(308, headers={"Range": f"bytes=0-{len(self.received) - 1}"})


@pytest.mark.unit_integration
@pytest.mark.asyncio
async def test_audio_feedback_end_to_end(
    make_pipeline, make_upload_controller, devices, fake_clock, feedback_store, sleep_recorder
):
    drive = AcceptingDrive()
    uploader = ResumableUploader(
        client=httpx.AsyncClient(transport=httpx.MockTransport(drive.handler)),
        chunk_size=16,
        sleep=sleep_recorder,
        now=lambda: datetime(2025, 1, 2, tzinfo=timezone.utc),
    )
    pipeline = make_pipeline(upload_controller=make_upload_controller(uploader))

    seen = []

    def on_progress(percent):
        session = feedback_store.get_session(pipeline.session_id)
        seen.append((percent, pipeline.state, session.drive_file_id))

    pipeline.on_progress = on_progress

    session_id = await pipeline.begin(FeedbackMode.AUDIO, consent=False)
    devices.last.emit_chunk(b"voice-1;")
    fake_clock.advance(45)
    devices.last.emit_chunk(b"voice-2;")
    for number in (1, 2, 3):
        pipeline.record_answer(FeedbackAnswer(number))

    result = await pipeline.complete()

    expected = b"P1|P2|P3|still(IMG+voice-1;voice-2;final;,45)"
    assert bytes(drive.received) == expected
    assert result.remote_id == "drive-file-45"
    assert result.file_size == len(expected)
    assert result.duration_seconds == 45.0

    # Progress reaches 100 while uploading, before the id is persisted
    percents = [percent for percent, _, _ in seen]
    assert percents[-1] == 100
    assert percents == sorted(percents)
    assert all(state == PipelineState.UPLOADING for _, state, _ in seen)
    assert all(drive_file_id is None for _, _, drive_file_id in seen)

    session = feedback_store.get_session(session_id)
    assert session.completed
    assert session.drive_file_id == "drive-file-45"
    assert session.media[0].duration == 45.0
    assert sleep_recorder.delays == []
