"""Runtime configuration resolved from CLI flags and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from backend.journal.store import default_database_url


DATABASE_URL_ENV = "MINDVISION_DATABASE_URL"


@dataclass(frozen=True)
class AppConfig:
    database_url: str
    catalog_path: Path | None = None
    web_host: str = "127.0.0.1"
    web_port: int = 8090
    log_level: str = "INFO"
    tick_interval_sec: float = 1.0


def resolve_database_url(cli_value: str | None) -> str:
    if cli_value:
        return cli_value
    return os.environ.get(DATABASE_URL_ENV) or default_database_url()
