"""
Runtime configuration.

All settings come from environment variables so the same code runs locally,
in tests and on a server without editing files:

    COURSETABLE_APP_BASE_URL   college app gateway (default https://app.fjcpc.edu.cn)
    COURSETABLE_HTTP_TIMEOUT   per-request timeout in seconds (default 30)
    COURSETABLE_LOG_DIR        directory for daily log files (default <package>/logs)
    COURSETABLE_CACHE_TTL      schedule cache lifetime in seconds (default 86400)
    COURSETABLE_TEST_UCODE     optional ucode used for manual checks
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://app.fjcpc.edu.cn"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_CACHE_TTL = 24 * 60 * 60


def _default_log_dir() -> Path:
    base_dir = Path(__file__).resolve().parent
    return base_dir / "logs"


class AppConfig(BaseSettings):
    """
    Application settings, read once per run.

    Malformed values raise pydantic.ValidationError (a ValueError).
    """

    model_config = SettingsConfigDict(
        env_prefix="COURSETABLE_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        str_strip_whitespace=True,
    )

    app_base_url: str = Field(
        default=DEFAULT_BASE_URL,
        min_length=8,
        description="Base URL of the college app gateway.",
    )
    http_timeout: float = Field(
        default=DEFAULT_HTTP_TIMEOUT,
        gt=0,
        description="Timeout per request (seconds).",
    )
    log_dir: Path = Field(
        default_factory=_default_log_dir,
        description="Directory for the daily log files.",
    )
    cache_ttl: float = Field(
        default=DEFAULT_CACHE_TTL,
        gt=0,
        description="Lifetime of a cached schedule (seconds).",
    )
    test_ucode: Optional[str] = Field(
        default=None,
        description="ucode used for manual checks against the live gateway.",
    )

    @field_validator("app_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("test_ucode")
    @classmethod
    def _empty_ucode_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None
