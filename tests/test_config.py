import pytest

from focus_engine.config import EngineSettings, load_settings


def test_defaults_when_file_missing(tmp_path):
    settings = load_settings(tmp_path / "absent.toml")
    assert settings.work_duration == 25
    assert settings.break_duration == 5
    assert settings.notifications_enabled is True
    assert settings.scoring.completed_penalty == -15


def test_load_toml_sections(tmp_path):
    path = tmp_path / "focus.toml"
    path.write_text(
        "[timer]\nwork_duration = 50\nbreak_duration = 10\n"
        "[notifications]\nenabled = \"off\"\nlead_minutes = 15\n"
        "[scoring]\npreset = \"dashboard\"\n",
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings.work_duration == 50
    assert settings.break_duration == 10
    assert settings.notifications_enabled is False
    assert settings.notification_lead_minutes == 15
    assert settings.scoring.completed_penalty == -30


def test_malformed_toml_falls_back(tmp_path):
    path = tmp_path / "focus.toml"
    path.write_text("[timer\nwork_duration = ", encoding="utf-8")
    assert load_settings(path).work_duration == 25


def test_durations_are_clamped_and_update_in_place():
    settings = EngineSettings(work_duration=0, break_duration=500)
    assert settings.work_duration == 1
    assert settings.break_duration == 60
    same = settings
    settings.update(work_duration="45", notifications_enabled="no")
    assert same.work_duration == 45
    assert same.notifications_enabled is False
    with pytest.raises(AttributeError):
        settings.update(colour="blue")


def test_explicit_penalty_overrides_preset(tmp_path):
    path = tmp_path / "focus.toml"
    path.write_text("[scoring]\npreset = \"dashboard\"\ncompleted_penalty = -5\n", encoding="utf-8")
    assert load_settings(path).scoring.completed_penalty == -5
