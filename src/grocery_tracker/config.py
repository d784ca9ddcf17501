"""Application configuration read from the environment (and a local .env)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DB_PATH = "grocery.db"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"
REQUIRED_VARIABLES = ("SUPABASE_URL", "SUPABASE_KEY")


@dataclass(slots=True)
class Settings:
    supabase_url: str
    supabase_key: str
    db_path: str = DEFAULT_DB_PATH
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


def _split_origins(raw: str) -> List[str]:
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process.

    Raises RuntimeError naming every missing Supabase variable. The local
    store alone needs none of them, so only remote access calls this.
    """
    missing = [name for name in REQUIRED_VARIABLES if not os.environ.get(name)]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    return Settings(
        supabase_url=os.environ["SUPABASE_URL"],
        supabase_key=os.environ["SUPABASE_KEY"],
        db_path=os.environ.get("GROCERY_DB_PATH", DEFAULT_DB_PATH),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        cors_origins=_split_origins(os.environ.get("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS)),
    )
