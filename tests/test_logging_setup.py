import logging

from kakeibo.logging_setup import get_logger, parse_level


def test_parse_level_names_and_numbers():
    assert parse_level("debug") == logging.DEBUG
    assert parse_level(" WARNING ") == logging.WARNING
    assert parse_level("15") == 15
    assert parse_level(logging.ERROR) == logging.ERROR
    assert parse_level("loud") == logging.INFO


def test_parse_level_from_env(monkeypatch):
    monkeypatch.setenv("KAKEIBO_LOG_LEVEL", "error")
    assert parse_level(None) == logging.ERROR
    monkeypatch.delenv("KAKEIBO_LOG_LEVEL")
    assert parse_level(None) == logging.INFO


def test_get_logger_is_under_package():
    assert get_logger("kakeibo.aggregate").name == "kakeibo.aggregate"
