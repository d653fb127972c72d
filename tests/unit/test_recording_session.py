"""Tests for RecordingController (Idle -> Recording -> Idle with artifact)."""

import asyncio

import pytest

from soulingo.core.exceptions import FinalizeError, MicrophoneUnavailableError
from soulingo.sessions.recording import RecordingController, RecordingSession
from soulingo.sessions.timer import RecordingTimer


@pytest.fixture
def controller(fake_device, settings):
    return RecordingController(fake_device, settings=settings)


# ---------------------------------------------------------------------------
# Toggle state machine
# ---------------------------------------------------------------------------


class TestToggle:
    async def test_start_sets_recording_state(self, controller, fake_device):
        assert await controller.toggle() is True

        state = controller.state
        assert state.is_recording is True
        assert state.elapsed_seconds == 0
        assert state.audio_file == fake_device.path
        assert state.last_error is None
        await controller.close()

    async def test_stop_keeps_artifact(self, controller, fake_device):
        await controller.toggle()
        assert await controller.toggle() is True

        state = controller.state
        assert state.is_recording is False
        assert state.audio_file == fake_device.path
        assert fake_device.stop_calls == 1

    async def test_alternates_over_many_toggles(self, controller):
        observed = []
        for _ in range(5):
            await controller.toggle()
            observed.append(controller.is_recording)
        assert observed == [True, False, True, False, True]
        await controller.close()

    async def test_start_failure_stays_idle(self, controller, fake_device):
        fake_device.start_error = MicrophoneUnavailableError("mic denied")

        assert await controller.toggle() is False

        state = controller.state
        assert state.is_recording is False
        assert state.audio_file is None
        assert state.last_error == "Failed to start recording: mic denied"

    async def test_stop_failure_fails_open(self, controller, fake_device):
        await controller.toggle()
        fake_device.stop_error = FinalizeError("disk full")

        assert await controller.toggle() is False

        state = controller.state
        assert state.is_recording is False
        assert state.audio_file is None
        assert state.last_error == "Failed to stop recording: disk full"

    async def test_next_start_clears_previous_error(self, controller, fake_device):
        fake_device.start_error = MicrophoneUnavailableError()
        await controller.toggle()
        fake_device.start_error = None

        await controller.toggle()

        assert controller.state.last_error is None
        await controller.close()


# ---------------------------------------------------------------------------
# Elapsed time
# ---------------------------------------------------------------------------


class TestElapsed:
    async def test_elapsed_advances_only_while_recording(self, controller, settings):
        await controller.toggle()
        samples = []
        for _ in range(4):
            await asyncio.sleep(settings.timer_interval)
            samples.append(controller.state.elapsed_seconds)
        await controller.toggle()

        assert samples == sorted(samples)
        assert samples[-1] >= 2

        frozen = controller.state.elapsed_seconds
        await asyncio.sleep(settings.timer_interval * 3)
        assert controller.state.elapsed_seconds == frozen

    async def test_restart_resets_elapsed(self, controller, settings):
        await controller.toggle()
        await asyncio.sleep(settings.timer_interval * 2.5)
        await controller.toggle()

        await controller.toggle()
        assert controller.state.elapsed_seconds == 0
        await controller.close()


# ---------------------------------------------------------------------------
# Gating
# ---------------------------------------------------------------------------


class TestCanProceed:
    @pytest.mark.parametrize("elapsed", [0, 1, 2])
    def test_short_recording_blocks_even_with_image(self, controller, elapsed):
        controller.select_image("file:///photos/me.jpg")
        controller._session.elapsed_seconds = elapsed
        assert controller.can_proceed() is False

    def test_missing_image_blocks(self, controller):
        controller._session.elapsed_seconds = 10
        assert controller.can_proceed() is False

    def test_both_preconditions_allow(self, controller):
        controller._session.elapsed_seconds = 3
        controller.select_image("file:///photos/me.jpg")
        assert controller.can_proceed() is True

    def test_clearing_image_blocks_again(self, controller):
        controller._session.elapsed_seconds = 3
        controller.select_image("photo.jpg")
        controller.select_image(None)
        assert controller.can_proceed() is False


# ---------------------------------------------------------------------------
# Reset / teardown / snapshots
# ---------------------------------------------------------------------------


class TestLifecycle:
    async def test_reset_keeps_image_and_releases_device(self, controller, fake_device):
        controller.select_image("photo.jpg")
        await controller.toggle()

        controller.reset()

        state = controller.state
        assert state.is_recording is False
        assert state.elapsed_seconds == 0
        assert state.audio_file is None
        assert state.selected_image == "photo.jpg"
        assert fake_device.release_calls == 1
        assert fake_device.is_capturing is False

    async def test_close_releases_in_progress_capture(self, controller, fake_device, settings):
        await controller.toggle()
        await controller.close()

        assert fake_device.is_capturing is False
        assert fake_device.release_calls == 1
        assert controller.state.is_recording is False

        before = controller.state.elapsed_seconds
        await asyncio.sleep(settings.timer_interval * 2)
        assert controller.state.elapsed_seconds == before

    async def test_toggle_after_close_is_ignored(self, controller, fake_device):
        await controller.close()
        assert await controller.toggle() is False
        assert fake_device.start_calls == 0

    async def test_async_context_manager_closes(self, fake_device, settings):
        async with RecordingController(fake_device, settings=settings) as ctl:
            await ctl.toggle()
        assert ctl.closed is True
        assert fake_device.is_capturing is False

    async def test_result_reports_milliseconds(self, controller):
        controller.select_image("photo.jpg")
        await controller.toggle()
        controller._session.elapsed_seconds = 4
        await controller.toggle()

        result = controller.result()
        assert result.duration_ms == 4000
        assert result.selected_image == "photo.jpg"
        assert result.audio_file is not None

    async def test_on_change_receives_independent_snapshots(self, fake_device, settings):
        seen: list[RecordingSession] = []
        controller = RecordingController(fake_device, settings=settings, on_change=seen.append)

        await controller.toggle()
        await controller.toggle()

        assert seen[0].is_recording is True
        assert seen[-1].is_recording is False
        seen[-1].elapsed_seconds = 99
        assert controller.state.elapsed_seconds != 99


# ---------------------------------------------------------------------------
# Teardown while a start is in flight
# ---------------------------------------------------------------------------


class TestTeardownDuringStart:
    """close()/reset() racing a device start that has not returned yet."""

    @pytest.fixture
    def timer(self, settings):
        return RecordingTimer(settings.timer_interval)

    @pytest.fixture
    def gated(self, fake_device, settings, timer):
        fake_device.start_gate = asyncio.Event()
        return RecordingController(fake_device, timer=timer, settings=settings)

    async def test_close_releases_late_start(self, gated, fake_device, timer, settings):
        pending = asyncio.create_task(gated.toggle())
        await asyncio.sleep(0)
        assert fake_device.start_calls == 1

        await gated.close()
        fake_device.start_gate.set()

        assert await pending is False
        await asyncio.sleep(settings.timer_interval * 3)

        state = gated.state
        assert state.is_recording is False
        assert state.elapsed_seconds == 0
        assert state.audio_file is None
        assert fake_device.is_capturing is False
        assert timer.is_running is False

    async def test_reset_releases_late_start(self, gated, fake_device, timer, settings):
        pending = asyncio.create_task(gated.toggle())
        await asyncio.sleep(0)

        gated.reset()
        fake_device.start_gate.set()

        assert await pending is False
        await asyncio.sleep(settings.timer_interval * 2)

        assert gated.state.is_recording is False
        assert fake_device.is_capturing is False
        assert timer.is_running is False

        fake_device.start_gate = None
        assert await gated.toggle() is True
        assert gated.state.is_recording is True
        await gated.close()
