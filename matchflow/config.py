"""Runtime settings loaded from the environment (and an optional .env file)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    db_path: str = "matchflow.db"
    busy_timeout: float = 5.0
    log_level: str = "INFO"
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    def validate(self) -> None:
        if not self.db_path.strip():
            raise ValueError("db_path must be non-empty")
        if self.busy_timeout <= 0:
            raise ValueError("busy_timeout must be > 0")
        if not 0 < self.api_port < 65536:
            raise ValueError("api_port must be in 1..65535")
        if logging.getLevelName(self.log_level.upper()) == f"Level {self.log_level.upper()}":
            raise ValueError(f"unknown log level: {self.log_level}")


def load_settings(env_file: str | None = None) -> Settings:
    load_dotenv(env_file)
    settings = Settings(
        db_path=os.getenv("MATCHFLOW_DB_PATH", Settings.db_path),
        busy_timeout=float(os.getenv("MATCHFLOW_BUSY_TIMEOUT", Settings.busy_timeout)),
        log_level=os.getenv("MATCHFLOW_LOG_LEVEL", Settings.log_level),
        api_host=os.getenv("MATCHFLOW_API_HOST", Settings.api_host),
        api_port=int(os.getenv("MATCHFLOW_API_PORT", Settings.api_port)),
    )
    settings.validate()
    return settings


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
