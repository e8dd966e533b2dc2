import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for one report run."""

    # Paths. Empty values fall back to per-OS defaults.
    DOWNLOAD_FOLDER: str = ""
    REPORT_FOLDER: str = ""
    ROSTER_PATH: str = "GroupsBase.csv"

    # Report
    LANGUAGE: Literal["en", "ru"] = "en"
    REPORT_FORMAT: Literal["csv", "xlsx"] = "csv"
    GROUP_PREFIXES: list[str] = ["мп", "мт", "мк", "мн"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["plain", "json"] = "plain"

    model_config = SettingsConfigDict(
        env_prefix="ATTENDANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("GROUP_PREFIXES")
    @classmethod
    def lowercase_prefixes(cls, v: list[str]) -> list[str]:
        return [p.strip().lower() for p in v if p.strip()]

    def download_folder(self) -> Path:
        return _resolve_folder(self.DOWNLOAD_FOLDER, "Downloads")

    def report_folder(self) -> Path:
        return _resolve_folder(self.REPORT_FOLDER, "Desktop")


def _resolve_folder(value: str, home_subdir: str) -> Path:
    if value:
        return Path(value).expanduser()
    if sys.platform.startswith("win") or sys.platform == "darwin":
        return Path.home() / home_subdir
    return Path(".")


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
