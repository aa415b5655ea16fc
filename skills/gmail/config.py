"""Skill settings loaded from environment variables (prefix GMAIL_SKILL_)."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CredentialStorage = Literal["keyring", "database"]


class GmailSettings(BaseSettings):
  model_config = SettingsConfigDict(
    env_prefix="GMAIL_SKILL_",
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    case_sensitive=False,
  )

  # Storage
  data_dir: Path = Field(default_factory=lambda: Path.home() / ".gmail-skill")
  credential_storage: CredentialStorage = "keyring"
  keyring_service: str = "gmail-skill/oauth"

  # OAuth
  client_secrets_path: Path | None = None
  oauth_port: int = 0
  refresh_margin_seconds: int = 300

  # Logging
  log_level: str = "INFO"

  @property
  def db_path(self) -> Path:
    return self.data_dir / "accounts.db"

  @property
  def resolved_client_secrets_path(self) -> Path:
    """OAuth client secrets file, defaulting to one inside the data dir."""
    return self.client_secrets_path or self.data_dir / "client_secret.json"


@lru_cache
def get_settings() -> GmailSettings:
  return GmailSettings()
