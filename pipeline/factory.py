"""
Pipeline Factory

Wires a PipelineOrchestrator from settings, using the other packages'
factories so one mode switch selects real or mock collaborators.
"""

import logging
from pathlib import Path
from typing import Literal, Optional, Sequence, Union

from pipeline.controllers.pipeline_orchestrator import DeviceFactory, PipelineOrchestrator
from recording.constants import RecordingMode
from recording.factory import RecordingFactory
from stitching.constants import get_prompt_clip_sources
from stitching.factory import StitchingFactory
from storage.factory import StorageFactory
from upload.controllers.upload_controller import UploadController
from upload.factory import UploaderFactory
from upload.implementations.mock_uploader import MockUploader

# Type alias for better type hints
PipelineMode = Literal["auto", "real", "mock"]

# Folder ids used whenever uploads are simulated
MOCK_SOCIAL_FOLDER_ID = "mock-social-folder"
MOCK_PRIVATE_FOLDER_ID = "mock-private-folder"


class PipelineFactory:
    """
    Factory for creating a fully wired pipeline.

    Usage:
        # FFmpeg capture/processing and Drive when available, mocks otherwise
        pipeline = PipelineFactory.create_pipeline()

        # Everything simulated except prompt clip fetching
        pipeline = PipelineFactory.create_pipeline(mode="mock")

        # Raise instead of falling back to mocks
        pipeline = PipelineFactory.create_pipeline(mode="real")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_pipeline(
        cls,
        mode: PipelineMode = "auto",
        prompt_sources: Optional[Sequence[str]] = None,
        db_path: Optional[Union[Path, str]] = None,
    ) -> PipelineOrchestrator:
        """
        Create a pipeline orchestrator.

        Args:
            mode: "auto" (detect each part), "real" (force), "mock" (simulate)
            prompt_sources: Prompt clips in question order (None = settings)
            db_path: Feedback database (None = FEEDBACK_DB_PATH)

        Returns:
            PipelineOrchestrator

        Raises:
            RuntimeError: mode="real" but FFmpeg or Drive is unavailable
        """
        cls._logger.info(f"Creating pipeline (mode: {mode})")

        processor_mode = {"auto": "auto", "real": "ffmpeg", "mock": "mock"}[mode]
        upload_mode = {"auto": "auto", "real": "drive", "mock": "mock"}[mode]

        store = StorageFactory.create_store(
            mode="mock" if mode == "mock" else "real",
            db_path=db_path,
        )

        if mode == "real":
            # Fail early instead of at the first begin(); audio is the least a host must record
            RecordingFactory.create_device(mode="real", recording_mode=RecordingMode.AUDIO).cleanup()

        return PipelineOrchestrator(
            store=store,
            stitching_engine=StitchingFactory.create_engine(mode=processor_mode),
            upload_controller=cls._create_upload_controller(upload_mode),
            device_factory=cls._device_factory(mode),
            prompt_sources=(
                list(prompt_sources) if prompt_sources is not None
                else get_prompt_clip_sources()
            ),
        )

    @staticmethod
    def _device_factory(mode: PipelineMode) -> DeviceFactory:
        """Per-run device creation for the recording mode of that run"""

        def create(recording_mode: RecordingMode):
            return RecordingFactory.create_device(mode=mode, recording_mode=recording_mode)

        return create

    @classmethod
    def _create_upload_controller(cls, upload_mode: str) -> UploadController:
        uploader = UploaderFactory.create_uploader(mode=upload_mode)
        credentials = UploaderFactory.create_credential_provider(mode=upload_mode)

        if isinstance(uploader, MockUploader):
            return UploadController(
                uploader=uploader,
                credentials=credentials,
                social_folder_id=MOCK_SOCIAL_FOLDER_ID,
                private_folder_id=MOCK_PRIVATE_FOLDER_ID,
            )

        return UploadController(uploader=uploader, credentials=credentials)


# Convenience function
def create_pipeline(force_mock: bool = False) -> PipelineOrchestrator:
    """
    Quick pipeline creation with simple mock override.

    Example:
        pipeline = create_pipeline()
        pipeline = create_pipeline(force_mock=True)
    """
    mode: PipelineMode = "mock" if force_mock else "auto"
    return PipelineFactory.create_pipeline(mode=mode)
