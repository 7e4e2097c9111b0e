"""
Pipeline Orchestrator

Drives one feedback run: mode and consent selection, answer collection,
then stop -> stitch -> upload -> persist for media modes, or straight to
persistence for text mode.

The orchestrator owns no UI. It is driven by calls mirroring UI events
(begin, record_answer, complete, restart) and reports back through
callbacks.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from core.state_machine import StateMachine
from pipeline.constants import (
    PIPELINE_TRANSITIONS,
    STITCHED_NAME_TEMPLATE,
    FeedbackMode,
    PipelineState,
    get_recording_mode,
)
from pipeline.models import FeedbackAnswer, PipelineResult
from recording.constants import RecordingMode
from recording.controllers.recording_session import RecordingError, RecordingSession
from recording.factory import RecordingFactory
from recording.interfaces.capture_device_interface import CaptureDeviceInterface, LiveStream
from stitching.controllers.stitching_engine import StitchingEngine
from stitching.interfaces.media_processor_interface import StitchingError
from storage.interfaces.feedback_store_interface import (
    FeedbackStoreInterface,
    FeedbackValidationError,
    StorageError,
)
from storage.utils.validation_utils import validate_text_answer
from upload.controllers.upload_controller import UploadController

DeviceFactory = Callable[[RecordingMode], CaptureDeviceInterface]
SessionFactory = Callable[[RecordingMode, CaptureDeviceInterface], RecordingSession]


class PipelineError(Exception):
    """
    A feedback run failed.

    The message is the human-readable cause; `stage` is the state the
    pipeline was in when it failed.
    """

    def __init__(self, message: str, stage: Optional[PipelineState] = None):
        super().__init__(message)
        self.stage = stage


class PipelineStateError(PipelineError):
    """Operation not allowed in the current state"""


class PipelineRestartedError(PipelineError):
    """restart() was called while this operation was in flight"""


class PipelineOrchestrator:
    """
    Coordinates one feedback run at a time.

    Features:
    - Single RecordingSession per run, started on begin()
    - Stitching and uploading strictly sequential
    - Failures land in FAILED with a cause; nothing is retried here
    - restart() interrupts recording and discards in-flight results

    Usage:
        pipeline = create_pipeline()
        pipeline.on_progress = lambda pct: print(f"{pct}%")

        await pipeline.begin(FeedbackMode.VIDEO, consent=True)
        for number in range(1, pipeline.question_count + 1):
            pipeline.record_answer(FeedbackAnswer(number))
        result = await pipeline.complete()
    """

    def __init__(
        self,
        store: FeedbackStoreInterface,
        stitching_engine: StitchingEngine,
        upload_controller: UploadController,
        device_factory: DeviceFactory,
        prompt_sources: Sequence[str],
        session_factory: Optional[SessionFactory] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            store: Persistence collaborator
            stitching_engine: Builds prompts + recording into one video
            upload_controller: Uploads the stitched video to Drive
            device_factory: Creates a capture device for each media run,
                called with the RecordingMode it has to support
            prompt_sources: One prompt clip per question, in order
            session_factory: Creates the RecordingSession (tests inject clocks)
            clock: Wall clock in seconds, used for remote file names
        """
        self.logger = logging.getLogger(__name__)
        self.store = store
        self.stitching_engine = stitching_engine
        self.upload_controller = upload_controller
        self.device_factory = device_factory
        self.prompt_sources = list(prompt_sources)
        self._session_factory = session_factory or RecordingFactory.create_session
        self._clock = clock

        self._machine = StateMachine(
            PipelineState.IDLE,
            PIPELINE_TRANSITIONS,
            name="Pipeline",
        )
        self._machine.on_state_change = self._on_machine_state_change

        # Bumped by begin() and restart(); stale coroutines compare against it
        self._generation = 0

        # Run data
        self._mode: Optional[FeedbackMode] = None
        self._consent = False
        self._session_id: Optional[str] = None
        self._recording: Optional[RecordingSession] = None
        self._answers: Dict[int, FeedbackAnswer] = {}
        self._result: Optional[PipelineResult] = None
        self._error_message: Optional[str] = None

        # Callbacks for events
        self.on_state_change: Optional[Callable[[PipelineState, PipelineState], None]] = None
        self.on_progress: Optional[Callable[[int], None]] = None
        self.on_error: Optional[Callable[[str], None]] = None

        self.logger.info(
            f"Pipeline Orchestrator initialized ({len(self.prompt_sources)} questions)",
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> PipelineState:
        return self._machine.current_state

    @property
    def mode(self) -> Optional[FeedbackMode]:
        return self._mode

    @property
    def consent(self) -> bool:
        return self._consent

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def recording(self) -> Optional[RecordingSession]:
        return self._recording

    @property
    def live_stream(self) -> Optional[LiveStream]:
        """Stream for live preview while recording"""
        return self._recording.live_stream if self._recording else None

    @property
    def question_count(self) -> int:
        return len(self.prompt_sources)

    @property
    def answers(self) -> List[FeedbackAnswer]:
        """Recorded answers ordered by question number"""
        return [self._answers[number] for number in sorted(self._answers)]

    @property
    def answered_count(self) -> int:
        return len(self._answers)

    @property
    def all_answered(self) -> bool:
        return self.answered_count == self.question_count

    @property
    def result(self) -> Optional[PipelineResult]:
        return self._result

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    # =========================================================================
    # UI EVENTS
    # =========================================================================

    async def begin(self, mode: FeedbackMode, consent: bool) -> str:
        """
        Start a run once mode and consent are known.

        Creates the persistence session and, for video/audio, starts the
        single continuous recording.

        Returns:
            Feedback session id

        Raises:
            PipelineStateError: Pipeline is not idle
            PipelineError: Session or recording could not be started
            PipelineRestartedError: restart() was called meanwhile
        """
        if self.state != PipelineState.IDLE:
            raise PipelineStateError(
                f"Cannot begin - pipeline in state: {self.state.value}",
                self.state,
            )

        self._generation += 1
        generation = self._generation
        self._reset_run()
        self._mode = mode
        self._consent = consent
        self._machine.transition_to(
            PipelineState.COLLECTING_ANSWERS,
            f"{mode.value} mode, consent={consent}",
        )

        try:
            session_id = await asyncio.to_thread(self.store.create_session, consent, mode)
        except StorageError as e:
            self._ensure_current(generation)
            raise self._fail(f"Failed to create feedback session: {e}", e) from e

        self._ensure_current(generation)
        self._session_id = session_id

        if mode.is_media:
            await self._start_recording(generation)

        return session_id

    def record_answer(self, answer: FeedbackAnswer) -> int:
        """
        Record the answer to one question.

        Answering a question again replaces the earlier answer. Text
        answers are validated before they are accepted.

        Returns:
            Number of questions answered so far

        Raises:
            PipelineStateError: Not collecting answers
            FeedbackValidationError: Text answer rejected (run continues)
            ValueError: Question number out of range
        """
        if self.state != PipelineState.COLLECTING_ANSWERS:
            raise PipelineStateError(
                f"Cannot record answer - pipeline in state: {self.state.value}",
                self.state,
            )

        if not 1 <= answer.question_number <= self.question_count:
            raise ValueError(
                f"Question number {answer.question_number} out of range "
                f"(1-{self.question_count})",
            )

        if self._mode == FeedbackMode.TEXT:
            valid, error = validate_text_answer(answer)
            if not valid:
                raise FeedbackValidationError(error, answer.question_number)

        self._answers[answer.question_number] = answer
        self.logger.info(
            f"Answer recorded for question {answer.question_number} "
            f"({self.answered_count}/{self.question_count})",
        )
        return self.answered_count

    async def complete(self) -> PipelineResult:
        """
        Finish the run after the last question was answered.

        Media: stop recording -> stitch -> upload -> persist.
        Text: persist answers.

        Returns:
            PipelineResult (also available as .result)

        Raises:
            PipelineStateError: Not collecting, or questions unanswered
            PipelineError: A step failed; pipeline is now FAILED
            PipelineRestartedError: restart() was called meanwhile
        """
        if self.state != PipelineState.COLLECTING_ANSWERS:
            raise PipelineStateError(
                f"Cannot complete - pipeline in state: {self.state.value}",
                self.state,
            )

        if self._session_id is None:
            raise PipelineStateError("Cannot complete - feedback session not created yet", self.state)

        if not self.all_answered:
            raise PipelineStateError(
                f"Cannot complete - {self.answered_count} of "
                f"{self.question_count} questions answered",
                self.state,
            )

        generation = self._generation

        try:
            if self._mode.is_media:
                result = await self._complete_media(generation)
            else:
                result = await self._complete_text(generation)
        except PipelineError:
            raise
        except Exception as e:
            self._ensure_current(generation)
            self.logger.error(f"Unexpected pipeline error: {e}", exc_info=True)
            raise self._fail(f"Unexpected error: {e}", e) from e

        self._result = result
        self._machine.transition_to(PipelineState.DONE, f"session {result.session_id}")
        return result

    def restart(self) -> None:
        """
        Return to IDLE from any state.

        Interrupts recording (device released). An upload in flight is not
        cancelled, but its result is discarded.
        """
        self._generation += 1

        recording, self._recording = self._recording, None
        if recording is not None:
            recording.abort("restart")

        self._reset_run()
        self._mode = None
        self._consent = False

        if self.state != PipelineState.IDLE:
            self._machine.transition_to(PipelineState.IDLE, "restart")

        self.logger.info("Pipeline restarted")

    # =========================================================================
    # RUN STEPS
    # =========================================================================

    async def _start_recording(self, generation: int) -> None:
        recording_mode = get_recording_mode(self._mode)

        try:
            device = self.device_factory(recording_mode)
            recording = self._session_factory(recording_mode, device)
        except Exception as e:
            self.logger.error(f"Capture device unavailable: {e}", exc_info=True)
            raise self._fail(f"Failed to start recording: {e}", e) from e

        self._recording = recording

        try:
            await recording.start()
        except RecordingError as e:
            self._ensure_current(generation)
            raise self._fail(str(e), e) from e

        self._ensure_current(generation)
        recording.on_error = self._recording_error_handler(generation)

    async def _complete_text(self, generation: int) -> PipelineResult:
        self._machine.transition_to(PipelineState.PERSISTING, "text answers")
        answers = self.answers

        try:
            await asyncio.to_thread(self.store.save_text_feedback, self._session_id, answers)
            await asyncio.to_thread(self.store.complete_session, self._session_id, None)
        except StorageError as e:
            self._ensure_current(generation)
            raise self._fail(f"Failed to save feedback: {e}", e) from e

        self._ensure_current(generation)
        return PipelineResult(
            session_id=self._session_id,
            mode=self._mode,
            consent=self._consent,
            answer_count=len(answers),
        )

    async def _complete_media(self, generation: int) -> PipelineResult:
        recording = self._recording

        # Stop and wait for the final chunk
        self._machine.transition_to(
            PipelineState.RECORDING_STOP_PENDING,
            "all questions answered",
        )
        try:
            artifact = await recording.stop()
        except RecordingError as e:
            self._ensure_current(generation)
            raise self._fail(f"Recording failed: {e}", e) from e
        self._ensure_current(generation)

        # Prompts first, recording last
        self._machine.transition_to(PipelineState.STITCHING, f"{artifact.size} bytes recorded")
        try:
            stitched = await self.stitching_engine.build(
                self.prompt_sources,
                artifact,
                recording.mode,
                artifact.duration_seconds or 0,
            )
        except StitchingError as e:
            self._ensure_current(generation)
            raise self._fail(f"Failed to process recording: {e}", e) from e
        self._ensure_current(generation)

        # Upload
        self._machine.transition_to(PipelineState.UPLOADING, f"{stitched.size} bytes stitched")
        base_name = STITCHED_NAME_TEMPLATE.format(
            mode=self._mode.value,
            timestamp_ms=int(self._clock() * 1000),
        )
        upload = await self.upload_controller.upload_artifact(
            stitched,
            base_name,
            self._consent,
            on_progress=self._progress_handler(generation),
        )
        self._ensure_current(generation)

        if not upload.success:
            raise self._fail(f"Upload failed: {upload.error_message}")

        # Persist
        self._machine.transition_to(PipelineState.PERSISTING, f"uploaded {upload.remote_id}")
        try:
            await asyncio.to_thread(
                self.store.save_media_feedback,
                self._session_id,
                self._mode,
                upload.remote_id,
                upload.file_size,
                artifact.duration_seconds,
            )
            await asyncio.to_thread(
                self.store.complete_session,
                self._session_id,
                upload.remote_id,
            )
        except StorageError as e:
            self._ensure_current(generation)
            raise self._fail(f"Failed to save feedback: {e}", e) from e
        self._ensure_current(generation)

        return PipelineResult(
            session_id=self._session_id,
            mode=self._mode,
            consent=self._consent,
            answer_count=self.answered_count,
            remote_id=upload.remote_id,
            remote_name=upload.remote_name,
            file_size=upload.file_size,
            duration_seconds=artifact.duration_seconds,
        )

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _reset_run(self) -> None:
        self._session_id = None
        self._answers = {}
        self._result = None
        self._error_message = None

    def _ensure_current(self, generation: int) -> None:
        """Raise if restart() happened since `generation` started"""
        if generation != self._generation:
            self.logger.info("Discarding result of a restarted run")
            raise PipelineRestartedError("Pipeline was restarted; result discarded")

    def _fail(self, message: str, cause: Optional[BaseException] = None) -> PipelineError:
        """Move to FAILED, release the device, notify, and build the error to raise"""
        stage = self.state
        self._error_message = message
        self.logger.error(f"Pipeline failed during {stage.value}: {message}")

        if self._machine.can_transition(PipelineState.FAILED):
            self._machine.transition_to(PipelineState.FAILED, message)

        if self._recording is not None:
            self._recording.abort(message)

        self._trigger_error_callback(message)
        return PipelineError(message, stage)

    def _recording_error_handler(self, generation: int) -> Callable[[str], None]:
        """Device failures while answering fail the run right away"""

        def handle(message: str) -> None:
            if generation == self._generation and self.state == PipelineState.COLLECTING_ANSWERS:
                self._fail(f"Recording failed: {message}")

        return handle

    def _progress_handler(self, generation: int) -> Callable[[int], None]:
        def handle(percent: int) -> None:
            if generation == self._generation:
                self._trigger_progress(percent)

        return handle

    def _on_machine_state_change(self, old: Enum, new: Enum, reason: str) -> None:
        if self.on_state_change:
            try:
                self.on_state_change(old, new)
            except Exception as e:
                self.logger.error(f"Error in state change callback: {e}")

    def _trigger_progress(self, percent: int) -> None:
        """Trigger on_progress callback"""
        if self.on_progress:
            try:
                self.on_progress(percent)
            except Exception as e:
                self.logger.error(f"Error in progress callback: {e}")

    def _trigger_error_callback(self, error_message: str) -> None:
        """Trigger on_error callback"""
        if self.on_error:
            try:
                self.on_error(error_message)
            except Exception as e:
                self.logger.error(f"Error in error callback: {e}")

    # =========================================================================
    # STATUS AND INFO
    # =========================================================================

    def get_status(self) -> Dict[str, Any]:
        """
        Get current pipeline status.

        Returns:
            Dictionary with status information
        """
        return {
            "state": self.state.value,
            "mode": self._mode.value if self._mode else None,
            "consent": self._consent,
            "session_id": self._session_id,
            "answered": self.answered_count,
            "questions": self.question_count,
            "recording": self._recording.get_status() if self._recording else None,
            "remote_id": self._result.remote_id if self._result else None,
            "error": self._error_message,
        }
