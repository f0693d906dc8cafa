"""
Runtime configuration.

Values come from the environment; a `.env` file in the project root is loaded
first so local overrides need no manual `export`.

    from blockcpp.config import get_settings
    settings = get_settings()
    settings.get_url("/compile")      # → "//app.production.com/api/2.0/compile"
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class Settings:
    app_name: str = "Prod App"
    api_url: str = "//app.production.com/api"
    api_version: str = "2.0"
    api_prefix: str = "/api"
    out_dir: str = "compiled"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3001

    @property
    def base_url(self) -> str:
        return f"{self.api_url}/{self.api_version}"

    def get_url(self, url: str) -> str:
        return self.base_url + url

    @property
    def log_level_value(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            app_name=env.get("BLOCKCPP_APP_NAME", defaults.app_name),
            api_url=env.get("BLOCKCPP_API_URL", defaults.api_url).rstrip("/"),
            api_version=env.get("BLOCKCPP_API_VERSION", defaults.api_version),
            api_prefix=env.get("BLOCKCPP_API_PREFIX", defaults.api_prefix),
            out_dir=env.get("BLOCKCPP_OUT_DIR", defaults.out_dir),
            log_level=env.get("BLOCKCPP_LOG_LEVEL", defaults.log_level),
            host=env.get("BLOCKCPP_HOST", defaults.host),
            port=int(env.get("BLOCKCPP_PORT", defaults.port)),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv(PROJECT_ROOT / ".env")
    return Settings.from_env()
