"""
Steam Trust Check - Configuration

All settings load from environment variables with safe defaults for development.
In production, set CHECK_ENV=production to enforce required values.
"""
import os
from typing import List
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    def __init__(self):
        self.ENVIRONMENT = os.getenv("CHECK_ENV", "development")

        # === Steam Web API ===
        self.STEAM_API_KEY = os.getenv("STEAM_API_KEY", "")
        if not self.STEAM_API_KEY and self.ENVIRONMENT == "production":
            raise RuntimeError("STEAM_API_KEY must be set in production. Add it to .env")
        self.STEAM_API_BASE = os.getenv("STEAM_API_BASE", "https://api.steampowered.com")

        # === Upstream calls ===
        self.UPSTREAM_TIMEOUT_SECONDS = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))
        self.UPSTREAM_MAX_CONCURRENCY = int(os.getenv("UPSTREAM_MAX_CONCURRENCY", "5"))

        # === Result cache ===
        self.CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "300"))      # 5 min
        self.CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "500"))

        # === Application ===
        self.CHECK_HOST = os.getenv("CHECK_HOST", "0.0.0.0")
        self.CHECK_PORT = int(os.getenv("CHECK_PORT", "8000"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "info").lower()
        self.CORS_ORIGINS: List[str] = [
            o.strip()
            for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
            if o.strip()
        ]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def steam_enabled(self) -> bool:
        return bool(self.STEAM_API_KEY)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
