"""
Tests for environment-driven settings.
"""
import logging

import pytest

from forkchain.config import ENV_LOG_FILE, ENV_LOG_LEVEL, get_log_file, get_log_level


class TestLogLevel:
    def test_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
        assert get_log_level() == logging.INFO
        assert get_log_level(default=logging.ERROR) == logging.ERROR

    @pytest.mark.parametrize("value, expected", [
        ("DEBUG", logging.DEBUG),
        ("warning", logging.WARNING),
        ("  error ", logging.ERROR),
    ])
    def test_named_levels(self, monkeypatch, value, expected):
        monkeypatch.setenv(ENV_LOG_LEVEL, value)
        assert get_log_level() == expected

    def test_unknown_name_falls_back(self, monkeypatch, capsys):
        monkeypatch.setenv(ENV_LOG_LEVEL, "chatty")
        assert get_log_level(default=logging.WARNING) == logging.WARNING
        assert "Unknown log level 'CHATTY'" in capsys.readouterr().out


class TestLogFile:
    def test_empty_means_no_file(self, monkeypatch):
        monkeypatch.setenv(ENV_LOG_FILE, "")
        assert get_log_file() is None

    def test_path_is_passed_through(self, monkeypatch, tmp_path):
        path = str(tmp_path / "forkchain.log")
        monkeypatch.setenv(ENV_LOG_FILE, path)
        assert get_log_file() == path
