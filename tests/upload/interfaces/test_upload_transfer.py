"""
Tests for upload data types and error statuses
"""

import pytest

from core.media import MediaArtifact
from upload.constants import TransferState, UploadStatus
from upload.interfaces.uploader_interface import (
    ChunkRejectedError,
    InvalidArtifactError,
    UploadDestination,
    UploadInitiationError,
    UploadProtocolError,
    UploadRetriesExhaustedError,
    UploadTransfer,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def transfer():
    artifact = MediaArtifact(data=b"x" * 1000, mime_type="audio/webm")
    return UploadTransfer(source=artifact, destination=UploadDestination("f", "n.webm"))


class TestUploadTransfer:
    def test_initial_state(self, transfer):
        assert transfer.state == TransferState.PENDING
        assert transfer.total_bytes == 1000
        assert transfer.confirmed_bytes == 0
        assert transfer.progress == 0
        assert not transfer.is_complete

    def test_confirm_moves_forward(self, transfer):
        transfer.confirm(400)
        transfer.confirm(400)
        transfer.confirm(900)

        assert transfer.confirmed_bytes == 900
        assert transfer.progress == 90

    def test_confirm_rewinds_but_keeps_peak_progress(self, transfer):
        transfer.confirm(500)
        transfer.confirm(200)

        assert transfer.confirmed_bytes == 200
        assert transfer.peak_confirmed_bytes == 500
        assert transfer.progress == 50

    @pytest.mark.parametrize("offset", [-1, 1001])
    def test_confirm_rejects_offset_out_of_range(self, transfer, offset):
        with pytest.raises(UploadProtocolError):
            transfer.confirm(offset)

    def test_complete_sets_id_once(self, transfer):
        transfer.complete("id-1")
        transfer.complete("id-1")

        assert transfer.remote_id == "id-1"
        assert transfer.confirmed_bytes == 1000
        assert transfer.state == TransferState.COMPLETE

        with pytest.raises(UploadProtocolError):
            transfer.complete("id-2")


class TestErrorStatuses:
    def test_invalid_artifact(self):
        assert InvalidArtifactError("empty").status == UploadStatus.INVALID_FILE

    @pytest.mark.parametrize("http_status", [401, 403])
    def test_initiation_auth(self, http_status):
        error = UploadInitiationError("denied", http_status=http_status)
        assert error.status == UploadStatus.AUTH_ERROR

    def test_initiation_without_status(self):
        assert UploadInitiationError("timeout").status == UploadStatus.INITIATION_FAILED

    def test_chunk_rejected(self):
        assert ChunkRejectedError("bad", 503).status == UploadStatus.NETWORK_ERROR
        assert ChunkRejectedError("bad", 403).status == UploadStatus.AUTH_ERROR

    def test_retries_exhausted(self):
        error = UploadRetriesExhaustedError(
            "gave up", attempts=5, last_error=ChunkRejectedError("bad", 500),
        )
        assert error.status == UploadStatus.RETRIES_EXHAUSTED
        assert error.attempts == 5
