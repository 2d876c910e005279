from __future__ import annotations

from types import SimpleNamespace

import pytest

from config import get_settings_module
from src.classroom_attendance.classroom_attendance.common.validators import require_bounded_int, require_id
from src.classroom_attendance.classroom_attendance.core.enums import ErrorKind
from src.classroom_attendance.classroom_attendance.core.exceptions import AttendanceError
from src.classroom_attendance.classroom_attendance.main import load_duration_policy


@pytest.mark.parametrize(
    "app_env, module",
    [
        (None, "config.development"),
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("testing", "config.testing"),
        ("staging", "config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, app_env, module):
    if app_env is None:
        monkeypatch.delenv("APP_ENV", raising=False)
    else:
        monkeypatch.setenv("APP_ENV", app_env)

    assert get_settings_module() == module


def test_duration_policy_defaults_when_settings_are_silent():
    policy = load_duration_policy(SimpleNamespace())

    assert (policy.default_minutes, policy.min_minutes, policy.max_minutes) == (10, 1, 1440)


def test_duration_policy_reads_settings():
    settings = SimpleNamespace(ATTENDANCE_DEFAULT_DURATION="20", ATTENDANCE_MIN_DURATION=5, ATTENDANCE_MAX_DURATION=60)

    policy = load_duration_policy(settings)

    assert (policy.default_minutes, policy.min_minutes, policy.max_minutes) == (20, 5, 60)
    assert policy.resolve(None) == 20
    with pytest.raises(AttendanceError):
        policy.resolve(61)


@pytest.mark.parametrize(
    "settings",
    [
        SimpleNamespace(ATTENDANCE_DEFAULT_DURATION=0),
        SimpleNamespace(ATTENDANCE_DEFAULT_DURATION="abc"),
        SimpleNamespace(ATTENDANCE_DEFAULT_DURATION=90, ATTENDANCE_MAX_DURATION=60),
        SimpleNamespace(ATTENDANCE_MIN_DURATION=0),
        SimpleNamespace(ATTENDANCE_MIN_DURATION=30, ATTENDANCE_MAX_DURATION=20),
    ],
)
def test_invalid_duration_settings_fail_fast(settings):
    with pytest.raises(ValueError):
        load_duration_policy(settings)


@pytest.mark.parametrize("value, expected", [(7, 7), ("7", 7), (" 1440 ", 1440)])
def test_require_bounded_int_accepts_ints_and_digit_strings(value, expected):
    assert require_bounded_int(value, "duration_minutes", min_value=1, max_value=1440) == expected


@pytest.mark.parametrize("value", [True, 1.5, "1.5", "", "٣", [], None, 0, 1441, "-3", "--5", "-", "+5", "5-"])
def test_require_bounded_int_rejects(value):
    with pytest.raises(AttendanceError) as exc:
        require_bounded_int(value, "duration_minutes", min_value=1, max_value=1440)

    assert exc.value.kind == ErrorKind.VALIDATION
    assert exc.value.context["field"] == "duration_minutes"


@pytest.mark.parametrize("value", [None, "", "x", 0, -1, True, 70.9, 70.0, "70.9", "--70", "7O"])
def test_require_id_rejects(value):
    with pytest.raises(AttendanceError) as exc:
        require_id(value, "session_id")

    assert exc.value.kind == ErrorKind.VALIDATION


def test_require_id_parses_strings():
    assert require_id("70", "session_id") == 70
    assert require_id(" 70 ", "session_id") == 70
    assert require_id(70, "session_id") == 70
