"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from recipebox.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.fts_candidate_limit == 100
    assert settings.history_default_limit == 8


def test_env_override(monkeypatch):
    monkeypatch.setenv("RECIPEBOX_FTS_CANDIDATE_LIMIT", "25")
    monkeypatch.setenv("RECIPEBOX_LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.fts_candidate_limit == 25
    assert settings.log_level == "DEBUG"


def test_rejects_non_positive_limit():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, search_max_limit=0)


def test_rejects_blank_database_url():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, database_url="  ")
