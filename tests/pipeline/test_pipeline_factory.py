"""
Tests for pipeline constants and PipelineFactory
"""

import pytest

from pipeline.constants import (
    PIPELINE_TRANSITIONS,
    FeedbackMode,
    PipelineState,
    get_recording_mode,
)
from pipeline.factory import (
    MOCK_PRIVATE_FOLDER_ID,
    MOCK_SOCIAL_FOLDER_ID,
    PipelineFactory,
    create_pipeline,
)
from recording.constants import RecordingMode
from recording.implementations.mock_capture import MockCaptureDevice
from stitching.implementations.mock_processor import MockMediaProcessor
from storage.implementations.mock_store import MockFeedbackStore
from storage.implementations.sqlite_store import SQLiteFeedbackStore
from upload.implementations.mock_uploader import MockUploader

pytestmark = pytest.mark.unit


class TestConstants:
    def test_recording_modes(self):
        assert get_recording_mode(FeedbackMode.VIDEO) == RecordingMode.VIDEO
        assert get_recording_mode(FeedbackMode.AUDIO) == RecordingMode.AUDIO

    def test_text_mode_does_not_record(self):
        with pytest.raises(ValueError):
            get_recording_mode(FeedbackMode.TEXT)

    def test_every_working_state_can_fail_and_restart(self):
        for state in PipelineState:
            if state in (PipelineState.IDLE, PipelineState.DONE, PipelineState.FAILED):
                continue
            assert PipelineState.FAILED in PIPELINE_TRANSITIONS[state]
            assert PipelineState.IDLE in PIPELINE_TRANSITIONS[state]

    def test_terminal_states_only_restart(self):
        assert PIPELINE_TRANSITIONS[PipelineState.DONE] == {PipelineState.IDLE}
        assert PIPELINE_TRANSITIONS[PipelineState.FAILED] == {PipelineState.IDLE}


class TestPipelineFactory:
    def test_mock_mode(self):
        pipeline = PipelineFactory.create_pipeline(mode="mock", prompt_sources=["q1.mp4"])

        assert isinstance(pipeline.store, MockFeedbackStore)
        assert isinstance(pipeline.stitching_engine.processor, MockMediaProcessor)
        assert isinstance(pipeline.upload_controller.uploader, MockUploader)
        assert pipeline.upload_controller.social_folder_id == MOCK_SOCIAL_FOLDER_ID
        assert pipeline.upload_controller.private_folder_id == MOCK_PRIVATE_FOLDER_ID
        assert pipeline.question_count == 1

        device = pipeline.device_factory(RecordingMode.AUDIO)
        try:
            assert isinstance(device, MockCaptureDevice)
        finally:
            device.cleanup()

    def test_default_prompts_from_settings(self):
        pipeline = create_pipeline(force_mock=True)

        assert pipeline.question_count == 5
        assert pipeline.prompt_sources[0].endswith("question1.mp4")

    def test_auto_mode_uses_sqlite(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            "upload.factory.UploaderFactory.is_drive_available",
            classmethod(lambda cls: False),
        )

        pipeline = PipelineFactory.create_pipeline(
            mode="auto",
            prompt_sources=["q1.mp4"],
            db_path=tmp_path / "feedback.db",
        )
        try:
            assert isinstance(pipeline.store, SQLiteFeedbackStore)
        finally:
            pipeline.store.cleanup()
