"""Configuration for the courtmatch reconciliation toolkit."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


class ConfigError(RuntimeError):
    """Raised when required configuration is missing."""


@dataclass
class MatchConfig:
    prefix_min_length: int = 6
    # Scraper fallbacks (word overlap share)
    similarity_same_city: float = 0.5
    similarity_same_zip: float = 0.3
    # rapidfuzz WRatio scale (0-100) for unmatched-key hints
    suggest_min_score: float = 85.0


@dataclass
class BatchConfig:
    dry_run: bool = False
    overwrite: bool = False
    write_delay_ms: int = 50
    exclusive_targets: bool = True


@dataclass
class StoreConfig:
    url: str = ""
    service_key: str = ""
    table: str = "facilities"
    page_size: int = 1000  # Supabase default row limit

    @classmethod
    def from_env(cls, env_file: str | None = ".env.local") -> StoreConfig:
        """Build a StoreConfig from the environment.

        Loads ``env_file`` first when it exists; variables already set in the
        process environment win.
        """
        if env_file and Path(env_file).exists():
            load_dotenv(dotenv_path=env_file, override=False)

        url = os.environ.get("SUPABASE_URL") or os.environ.get("NEXT_PUBLIC_SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
        if not url or not key:
            raise ConfigError(
                "Missing SUPABASE_URL (or NEXT_PUBLIC_SUPABASE_URL) or "
                "SUPABASE_SERVICE_ROLE_KEY"
            )
        return cls(url=url, service_key=key)


def data_dir() -> Path:
    return Path(os.environ.get("COURTMATCH_CONFIG_DATA") or "config_data")


@dataclass
class AppConfig:
    store: StoreConfig = field(default_factory=StoreConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    match: MatchConfig = field(default_factory=MatchConfig)
