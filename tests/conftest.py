"""
Shared Test Configuration and Fixtures

Fixtures used by more than one package's tests.
"""

import pytest

# =============================================================================
# TIME FIXTURES
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    """
    Provide a manually advanced clock.

    Usage:
        def test_elapsed(fake_clock):
            session = RecordingSession(device, mode, clock=fake_clock)
            fake_clock.advance(45)
    """
    return FakeClock()


class SleepRecorder:
    """Async sleep replacement that records requested delays"""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleep_recorder():
    """
    Provide an instant sleep that records every delay.

    Usage:
        uploader = ResumableUploader(client=client, sleep=sleep_recorder)
        assert sleep_recorder.delays == [1.0, 2.0]
    """
    return SleepRecorder()


# =============================================================================
# CALLBACK TRACKING FIXTURES
# =============================================================================


@pytest.fixture
def callback_tracker():
    """
    Provide helper for tracking callback calls.

    Usage:
        def test_callback(recording_session, callback_tracker):
            recording_session.on_error = callback_tracker.track
            # ... trigger error ...
            assert callback_tracker.was_called()
    """

    class CallbackTracker:
        def __init__(self):
            self.calls = []

        def track(self, *args, **kwargs):
            """Record a callback invocation"""
            self.calls.append({"args": args, "kwargs": kwargs})

        def was_called(self) -> bool:
            """Check if callback was called"""
            return len(self.calls) > 0

        def get_call_count(self) -> int:
            """Get number of times callback was called"""
            return len(self.calls)

        def get_last_call(self):
            """Get arguments from last call"""
            return self.calls[-1] if self.calls else None

        def get_all_args(self):
            """Get first positional argument of every call"""
            return [call["args"][0] for call in self.calls if call["args"]]

        def reset(self):
            """Clear call history"""
            self.calls.clear()

    return CallbackTracker()


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """
    Configure pytest with custom markers.
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "unit_integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
    config.addinivalue_line("markers", "requires_ffmpeg: Tests requiring FFmpeg")
    config.addinivalue_line("markers", "requires_network: Tests requiring network access")
