"""Tests for layered configuration resolution."""

import logging
from pathlib import Path

import pytest

from tala.application.config import AppConfig, StudySettings, resolve_config


def test_defaults(mock_home, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = resolve_config()

    assert config.daily_new_limit == 20
    assert config.daily_review_limit == 200
    assert config.allow_review_ahead is False
    assert config.lessons_dir == tmp_path / "lessons"
    assert config.state_file == mock_home / ".config/tala/card_states.json"
    assert config.completion_file == mock_home / ".config/tala/completed_lessons.json"


def test_env_overrides_defaults(mock_home, monkeypatch):
    monkeypatch.setenv("TALA_DAILY_NEW_LIMIT", "5")
    monkeypatch.setenv("TALA_ALLOW_REVIEW_AHEAD", "true")

    config = resolve_config()

    assert config.daily_new_limit == 5
    assert config.allow_review_ahead is True


def test_cli_overrides_env(mock_home, monkeypatch):
    monkeypatch.setenv("TALA_DAILY_NEW_LIMIT", "5")
    config = resolve_config({"daily_new_limit": 7, "daily_review_limit": None})

    assert config.daily_new_limit == 7
    assert config.daily_review_limit == 200


def test_toml_file(mock_home, monkeypatch):
    cfg = mock_home / ".config/tala/config.toml"
    cfg.parent.mkdir(parents=True)
    cfg.write_text("daily_review_limit = 50\nallow_review_ahead = true\n")

    config = resolve_config()
    assert config.daily_review_limit == 50
    assert config.allow_review_ahead is True

    monkeypatch.setenv("TALA_DAILY_REVIEW_LIMIT", "60")
    assert resolve_config().daily_review_limit == 60


def test_negative_limits_clamped(mock_home):
    config = AppConfig(daily_new_limit=-1, daily_review_limit=-20)
    assert config.daily_new_limit == 0
    assert config.daily_review_limit == 0


def test_paths_resolved(mock_home, tmp_path):
    config = resolve_config({"lessons_dir": str(tmp_path / "x" / ".." / "lessons")})
    assert config.lessons_dir == (tmp_path / "lessons").resolve()
    assert isinstance(config.state_file, Path)


def test_study_settings(mock_home):
    settings = AppConfig(daily_new_limit=3, allow_review_ahead=True).study_settings()
    assert settings == StudySettings(daily_new_limit=3, daily_review_limit=200, allow_review_ahead=True)


def test_study_settings_clamp():
    assert StudySettings(daily_review_limit=-4).daily_review_limit == 0


@pytest.mark.parametrize(
    "verbose,level",
    [
        (-1, logging.WARNING),
        (0, logging.WARNING),
        (1, logging.INFO),
        (2, logging.DEBUG),
        (5, logging.DEBUG),
    ],
)
def test_log_level_from_verbose(mock_home, verbose, level):
    assert AppConfig(verbose=verbose).log_level == level


def test_verbose_from_env(mock_home, monkeypatch):
    assert resolve_config().log_level == logging.INFO

    monkeypatch.setenv("TALA_VERBOSE", "0")
    assert resolve_config().log_level == logging.WARNING
