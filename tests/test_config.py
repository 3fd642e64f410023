import logging

import pytest

from doc_context.config import DEFAULT_MODEL, ConfigurationError, Settings
from doc_context.logging_setup import _normalise_level, configure_logging


def test_settings_require_api_key():
    with pytest.raises(ConfigurationError):
        Settings.from_env({})
    with pytest.raises(ConfigurationError):
        Settings.from_env({"GEMINI_API_KEY": "   "})


def test_settings_default_and_override_model():
    assert Settings.from_env({"GEMINI_API_KEY": "key"}).model == DEFAULT_MODEL

    settings = Settings.from_env({"GEMINI_API_KEY": " key ", "GEMINI_MODEL": "gemini-2.5-pro"})

    assert settings.api_key == "key"
    assert settings.model == "gemini-2.5-pro"


def test_normalise_level_accepts_names_numbers_and_garbage():
    assert _normalise_level("debug") == logging.DEBUG
    assert _normalise_level("30") == logging.WARNING
    assert _normalise_level(logging.ERROR) == logging.ERROR
    assert _normalise_level("chatty") == logging.INFO
    assert _normalise_level(None) == logging.INFO


def test_configure_logging_writes_fresh_file(tmp_path):
    original_handlers = logging.root.handlers[:]
    original_level = logging.root.level
    try:
        log_path = configure_logging("INFO", log_dir=tmp_path)
        logging.getLogger("doc_context.test").info("hello log")
        for handler in logging.root.handlers:
            handler.flush()

        assert log_path.parent == tmp_path
        assert "hello log" in log_path.read_text(encoding="utf-8")
    finally:
        for handler in logging.root.handlers[:]:
            logging.root.removeHandler(handler)
            handler.close()
        for handler in original_handlers:
            logging.root.addHandler(handler)
        logging.root.setLevel(original_level)
