"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables (12-factor app, Lambda environment)
  - Fall back to .env file
  - Validate types and constraints at startup

The only knob that changes what the caller sees is NAME_OPTIONS, the
comma-separated name-display tokens passed to the decoder. Everything
else tunes timeouts, the decoder backend and the caching policy.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"

DEFAULT_NAME_OPTIONS: tuple[str, ...] = ("space_eq", "sname", "utf8")


def parse_name_options(value: str) -> tuple[str, ...]:
    """
    Split a comma-separated option string into ordered tokens.

    Blank tokens are dropped and duplicates keep their first position.
    An empty string yields an empty tuple, meaning "decoder default".
    """
    tokens: list[str] = []
    for raw in value.split(","):
        token = raw.strip()
        if token and token not in tokens:
            tokens.append(token)
    return tuple(tokens)


class AppSettings(BaseSettings):
    """
    Root application settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    name_options: str = Field(
        default=",".join(DEFAULT_NAME_OPTIONS),
        description="Comma-separated name display options; empty means decoder default",
    )
    fetch_timeout_seconds: float = Field(default=10.0, gt=0)
    decode_timeout_seconds: float = Field(default=30.0, gt=0)
    decoder: Literal["openssl", "cryptography"] = Field(default="openssl")
    openssl_binary: str = Field(default="openssl")
    immutable_cache: bool = Field(
        default=False,
        description="Add Cache-Control: public, immutable, s-maxage=604800 to successful responses",
    )

    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)

    @field_validator("name_options")
    @classmethod
    def validate_name_options(cls, value: str) -> str:
        """Accept option names, optionally negated with a leading '-', and nothing else."""
        for token in parse_name_options(value):
            if not token.removeprefix("-").replace("_", "").isalnum():
                raise ValueError(f"Invalid name option token: {token!r}")
        return value

    def get_name_options(self) -> tuple[str, ...]:
        return parse_name_options(self.name_options)
