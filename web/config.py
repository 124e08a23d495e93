"""Configuration for the channel analytics web app."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()



def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class AppConfig:
    app_env: str
    secret_key: str
    database_url: str
    youtube_api_key: str

    openai_api_key: str
    openai_model: str
    github_token: str

    max_videos: int
    refresh_interval_hours: int
    output_folder: str
    cleanup_batch_size: int

    log_level: str
    auto_create_schema: bool

    @staticmethod
    def from_env() -> "AppConfig":
        root = Path.cwd()
        default_db_path = root / ".tmp" / "channel_analytics.db"
        default_db_path.parent.mkdir(parents=True, exist_ok=True)
        default_db = f"sqlite:///{default_db_path}"

        return AppConfig(
            app_env=os.getenv("APP_ENV", "development"),
            secret_key=os.getenv("SECRET_KEY", "dev-change-me"),
            database_url=os.getenv("DATABASE_URL", default_db),
            youtube_api_key=os.getenv("YOUTUBE_API_KEY", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            github_token=os.getenv("GITHUB_TOKEN", ""),
            max_videos=_env_int("MAX_VIDEOS", 200),
            refresh_interval_hours=_env_int("REFRESH_INTERVAL_HOURS", 24),
            output_folder=os.getenv("OUTPUT_FOLDER", ".tmp/channel_analytics"),
            cleanup_batch_size=_env_int("CLEANUP_BATCH_SIZE", 500),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            auto_create_schema=_env_bool("AUTO_CREATE_SCHEMA", True),
        )

    def to_flask_config(self) -> dict:
        return {
            "APP_ENV": self.app_env,
            "SECRET_KEY": self.secret_key,
            "DATABASE_URL": self.database_url,
            "YOUTUBE_API_KEY": self.youtube_api_key,
            "OPENAI_API_KEY": self.openai_api_key,
            "OPENAI_MODEL": self.openai_model,
            "GITHUB_TOKEN": self.github_token,
            "MAX_VIDEOS": self.max_videos,
            "REFRESH_INTERVAL_HOURS": self.refresh_interval_hours,
            "OUTPUT_FOLDER": self.output_folder,
            "CLEANUP_BATCH_SIZE": self.cleanup_batch_size,
            "LOG_LEVEL": self.log_level,
            "AUTO_CREATE_SCHEMA": self.auto_create_schema,
        }
