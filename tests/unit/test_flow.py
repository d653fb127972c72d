"""Tests for AppFlow screen navigation."""

import pytest

from soulingo.content import get_module
from soulingo.sessions.auth import AuthController
from soulingo.sessions.flow import AppFlow, Screen
from soulingo.sessions.recording import RecordingResult

LOGIN = ("POST", "/api/v1/auth/login")
RECORDING = ("PUT", "/api/v1/users/recording")


@pytest.fixture
def flow():
    return AppFlow()


@pytest.fixture
async def auth(remote_client, backend, settings):
    backend.routes[LOGIN] = (200, {
        "success": True,
        "token": "tok-1",
        "user": {"id": 7, "email": "user@test.com"},
    })
    controller = AuthController(remote_client, settings=settings)
    controller.update_email("user@test.com")
    controller.update_password("abcdef")
    await controller.submit()
    return controller


@pytest.fixture
def take(sample_wav_path, sample_image_path):
    return RecordingResult(
        audio_file=sample_wav_path,
        selected_image=str(sample_image_path),
        duration_ms=4000,
    )


def test_starts_on_onboarding(flow):
    assert flow.current_screen is Screen.onboarding


def test_auth_success_ignored_before_onboarding(flow):
    flow.auth_succeeded(has_recording=True)
    assert flow.state.authenticated is False


def test_returning_user_skips_voice_recording(flow):
    flow.finish_onboarding()
    assert flow.current_screen is Screen.auth

    flow.auth_succeeded(has_recording=True)

    assert flow.current_screen is Screen.profile


async def test_full_path_for_new_user(flow, auth, backend, take):
    backend.routes[RECORDING] = (200, {"success": True})
    flow.finish_onboarding()
    flow.auth_succeeded(has_recording=False)
    assert flow.current_screen is Screen.voice_recording

    assert await flow.recording_completed(take, auth) is True
    assert flow.current_screen is Screen.profile

    flow.start_learning()
    assert flow.current_screen is Screen.module_list

    module = get_module("a1")
    assert flow.select_module(module) is True
    assert flow.current_screen is Screen.lesson_list

    flow.select_lesson(module.lessons[0])
    assert flow.current_screen is Screen.lesson

    flow.close_lesson()
    assert flow.current_screen is Screen.lesson_list
    flow.back_from_module()
    assert flow.current_screen is Screen.module_list


async def test_upload_failure_still_advances(flow, auth, backend, take):
    backend.routes[RECORDING] = (500, {"detail": "storage offline"})
    flow.finish_onboarding()
    flow.auth_succeeded(has_recording=False)

    assert await flow.recording_completed(take, auth) is False

    assert flow.current_screen is Screen.profile
    assert flow.state.recording == take


async def test_recording_completed_ignored_elsewhere(flow, auth, backend, take):
    assert await flow.recording_completed(take, auth) is False
    assert backend.requests[-1].url.path == LOGIN[1]


def test_locked_module_cannot_be_opened(flow):
    flow.finish_onboarding()
    flow.auth_succeeded(has_recording=True)
    flow.start_learning()

    assert flow.select_module(get_module("b1")) is False
    assert flow.current_screen is Screen.module_list


def test_profile_overlay_from_modules(flow):
    flow.finish_onboarding()
    flow.auth_succeeded(has_recording=True)
    flow.start_learning()

    flow.open_profile()
    assert flow.current_screen is Screen.profile
    flow.close_profile()
    assert flow.current_screen is Screen.module_list
