"""
Pipeline Constants

States and transition table of the feedback pipeline, plus the mapping
between feedback modes and recording modes.
"""

from enum import Enum

from recording.constants import RecordingMode
from storage.constants import FeedbackMode

__all__ = [
    "FeedbackMode",
    "PIPELINE_TRANSITIONS",
    "PipelineState",
    "STITCHED_NAME_TEMPLATE",
    "get_recording_mode",
]


# =============================================================================
# PIPELINE STATE TRACKING
# =============================================================================


class PipelineState(Enum):
    """
    States of one feedback run.

    Media modes: IDLE -> COLLECTING_ANSWERS -> RECORDING_STOP_PENDING
                 -> STITCHING -> UPLOADING -> PERSISTING -> DONE
    Text mode:   IDLE -> COLLECTING_ANSWERS -> PERSISTING -> DONE
    FAILED is reachable from every working state; restart() returns to IDLE.
    """

    IDLE = "idle"
    COLLECTING_ANSWERS = "collecting-answers"
    RECORDING_STOP_PENDING = "recording-stop-pending"
    STITCHING = "stitching"
    UPLOADING = "uploading"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


_WORKING_STATES = (
    PipelineState.COLLECTING_ANSWERS,
    PipelineState.RECORDING_STOP_PENDING,
    PipelineState.STITCHING,
    PipelineState.UPLOADING,
    PipelineState.PERSISTING,
)

PIPELINE_TRANSITIONS = {
    PipelineState.IDLE: {PipelineState.COLLECTING_ANSWERS},
    PipelineState.COLLECTING_ANSWERS: {
        PipelineState.RECORDING_STOP_PENDING,
        PipelineState.PERSISTING,
    },
    PipelineState.RECORDING_STOP_PENDING: {PipelineState.STITCHING},
    PipelineState.STITCHING: {PipelineState.UPLOADING},
    PipelineState.UPLOADING: {PipelineState.PERSISTING},
    PipelineState.PERSISTING: {PipelineState.DONE},
    PipelineState.DONE: {PipelineState.IDLE},
    PipelineState.FAILED: {PipelineState.IDLE},
}

for _state in _WORKING_STATES:
    PIPELINE_TRANSITIONS[_state] |= {PipelineState.FAILED, PipelineState.IDLE}


# =============================================================================
# MODES AND NAMING
# =============================================================================

# Remote file base name; the upload controller appends timestamp + extension
STITCHED_NAME_TEMPLATE = "{mode}_stitched_{timestamp_ms}"

_RECORDING_MODES = {
    FeedbackMode.VIDEO: RecordingMode.VIDEO,
    FeedbackMode.AUDIO: RecordingMode.AUDIO,
}


def get_recording_mode(mode: FeedbackMode) -> RecordingMode:
    """
    Recording mode for a media feedback mode.

    Raises:
        ValueError: Text mode never records
    """
    try:
        return _RECORDING_MODES[mode]
    except KeyError:
        raise ValueError(f"{mode.value} feedback does not record media") from None
