# settings.py
"""Centralized configuration using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from errors import ConfigurationMissing

load_dotenv()


class SlackSettings(BaseSettings):
    bot_token: str = Field(alias="SLACK_BOT_TOKEN")
    app_token: Optional[str] = Field(alias="SLACK_APP_TOKEN", default=None)
    signing_secret: Optional[str] = Field(alias="SLACK_SIGNING_SECRET", default=None)
    port: int = Field(alias="PORT", default=3000)


class OpenAISettings(BaseSettings):
    api_key: str = Field(alias="OPENAI_API_KEY")
    base_url: str = Field(alias="OPENAI_BASE_URL", default="https://api.openai.com/v1")
    model: str = Field(alias="OPENAI_MODEL", default="gpt-4o-mini")
    timeout_seconds: int = Field(alias="OPENAI_TIMEOUT", default=30)


class LinearSettings(BaseSettings):
    api_key: Optional[str] = Field(alias="LINEAR_API_KEY", default=None)
    team_id: Optional[str] = Field(alias="LINEAR_TEAM_ID", default=None)
    api_url: str = Field(alias="LINEAR_API_URL", default="https://api.linear.app/graphql")
    timeout_seconds: int = Field(alias="LINEAR_TIMEOUT", default=30)


class EventSettings(BaseSettings):
    dedup_ttl_seconds: int = Field(alias="HARPER_EVENT_TTL_SECONDS", default=300)
    dedup_sweep_seconds: int = Field(alias="HARPER_EVENT_SWEEP_SECONDS", default=60)


class LoggingSettings(BaseSettings):
    level: str = Field(alias="HARPER_LOG_LEVEL", default="INFO")
    json_enabled: bool = Field(alias="HARPER_LOG_JSON", default=False)


class BrandingSettings(BaseSettings):
    logo_url: Optional[str] = Field(alias="HARPER_LOGO_URL", default=None)


class HarperSettings(BaseSettings):
    slack: SlackSettings
    openai: OpenAISettings
    linear: LinearSettings
    events: EventSettings
    logging: LoggingSettings
    branding: BrandingSettings

    @property
    def linear_configured(self) -> bool:
        return bool(self.linear.api_key and self.linear.team_id)

    @classmethod
    def load(cls) -> HarperSettings:
        try:
            return cls(
                slack=SlackSettings(),  # type: ignore[call-arg]
                openai=OpenAISettings(),  # type: ignore[call-arg]
                linear=LinearSettings(),  # type: ignore[call-arg]
                events=EventSettings(),  # type: ignore[call-arg]
                logging=LoggingSettings(),  # type: ignore[call-arg]
                branding=BrandingSettings(),  # type: ignore[call-arg]
            )
        except ValidationError as exc:  # surfaced on startup
            missing = [error["loc"][0] for error in exc.errors() if error.get("type") == "missing"]
            if not missing:
                raise
            msg = "Missing required configuration values: " + ", ".join(
                sorted({str(loc) for loc in missing})
            )
            raise ConfigurationMissing(msg) from exc


@lru_cache(maxsize=1)
def get_settings() -> HarperSettings:
    return HarperSettings.load()
