"""Tests for front-matter settings."""

import logging

from tasklane.model.path import APPEND, PREPEND
from tasklane.settings import Settings, collapse_from_meta


def test_defaults():
    settings = Settings.from_meta(None)
    assert settings.insertion_method == APPEND
    assert settings.done_char == "x"
    assert settings.append_done_date is False
    assert settings.date_format == "%Y-%m-%d"


def test_from_meta():
    settings = Settings.from_meta(
        {
            "new-card-insertion-method": "prepend",
            "task-status-done": "X",
            "append-done-date": True,
            "date-format": "%d.%m.%Y",
        }
    )
    assert settings.insertion_method == PREPEND
    assert settings.done_char == "X"
    assert settings.append_done_date is True
    assert settings.date_format == "%d.%m.%Y"


def test_invalid_values_fall_back(caplog):
    with caplog.at_level(logging.WARNING, logger="tasklane.settings"):
        settings = Settings.from_meta({"new-card-insertion-method": "sideways", "task-status-done": "xx"})
    assert settings == Settings()
    assert "new-card-insertion-method" in caplog.text


def test_to_meta_only_non_defaults():
    assert Settings().to_meta() == {}
    assert Settings(insertion_method=PREPEND).to_meta() == {"new-card-insertion-method": "prepend"}


def test_get_by_key():
    settings = Settings(insertion_method=PREPEND)
    assert settings.get("new-card-insertion-method") == PREPEND
    assert settings.get("unknown", 7) == 7


def test_collapse_from_meta():
    assert collapse_from_meta({"list-collapse": [True, 0, 1]}) == (True, False, True)
    assert collapse_from_meta({"list-collapse": "yes"}) == ()
    assert collapse_from_meta({}) == ()
