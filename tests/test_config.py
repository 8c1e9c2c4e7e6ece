import pytest
from pydantic import ValidationError

from kakeibo.config import Settings, load_settings


def test_defaults():
    s = Settings()
    assert s.api_base_url is None
    assert not s.uses_backend
    assert s.seed_path == "data/seed.json"
    assert s.request_timeout == 20.0
    assert s.trend_months == 6


def test_blank_url_means_local_store():
    assert Settings(api_base_url="  ").api_base_url is None


def test_trailing_slash_stripped():
    s = Settings(api_base_url="https://example.test/")
    assert s.api_base_url == "https://example.test"
    assert s.uses_backend


def test_invalid_values():
    with pytest.raises(ValidationError):
        Settings(trend_months=5)
    with pytest.raises(ValidationError):
        Settings(request_timeout=0)


def test_load_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("KAKEIBO_API_BASE_URL", "https://api.example.test")
    monkeypatch.setenv("KAKEIBO_REQUEST_TIMEOUT", "5")
    monkeypatch.setenv("KAKEIBO_TREND_MONTHS", "12")
    monkeypatch.delenv("KAKEIBO_API_TOKEN", raising=False)
    s = load_settings(str(tmp_path / "missing.env"))
    assert s.api_base_url == "https://api.example.test"
    assert s.request_timeout == 5.0
    assert s.trend_months == 12
    assert s.api_token is None


def test_load_settings_reads_dotenv(monkeypatch, tmp_path):
    monkeypatch.delenv("KAKEIBO_SEED_PATH", raising=False)
    env = tmp_path / ".env"
    env.write_text("KAKEIBO_SEED_PATH=other/seed.json\n", encoding="utf-8")
    s = load_settings(str(env))
    assert s.seed_path == "other/seed.json"
    monkeypatch.delenv("KAKEIBO_SEED_PATH", raising=False)
