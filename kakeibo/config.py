from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from kakeibo.months import MONTH_RANGES


class Settings(BaseModel):
    api_base_url: Optional[str] = None  # None -> local seed-backed store
    api_token: Optional[str] = None
    seed_path: str = "data/seed.json"
    request_timeout: float = Field(default=20.0, gt=0)
    log_level: str = "INFO"
    trend_months: int = 6

    @field_validator("api_base_url", "api_token", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else value

    @field_validator("trend_months")
    @classmethod
    def _known_range(cls, value: int) -> int:
        if value not in MONTH_RANGES:
            raise ValueError(f"trend_months must be one of {MONTH_RANGES}")
        return value

    @property
    def uses_backend(self) -> bool:
        return self.api_base_url is not None


_ENV_FIELDS = {
    "api_base_url": "KAKEIBO_API_BASE_URL",
    "api_token": "KAKEIBO_API_TOKEN",
    "seed_path": "KAKEIBO_SEED_PATH",
    "request_timeout": "KAKEIBO_REQUEST_TIMEOUT",
    "log_level": "KAKEIBO_LOG_LEVEL",
    "trend_months": "KAKEIBO_TREND_MONTHS",
}


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """Build Settings from the environment, reading a .env file first if present."""
    load_dotenv(dotenv_path)
    data = {name: os.environ[var] for name, var in _ENV_FIELDS.items() if var in os.environ}
    return Settings(**data)
