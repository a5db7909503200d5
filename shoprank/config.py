"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    catalog_path: str = _get_env("CATALOG_PATH", "data/products.json")
    load_on_startup: bool = _get_env("LOAD_ON_STARTUP", "true").lower() in {"1", "true", "yes"}
    default_page_size: int = int(_get_env("DEFAULT_PAGE_SIZE", "20"))
    max_page_size: int = int(_get_env("MAX_PAGE_SIZE", "100"))
    # 0 keeps candidate scoring on the calling thread.
    scoring_workers: int = int(_get_env("SCORING_WORKERS", "0"))
    log_level: str = _get_env("LOG_LEVEL", "INFO")


settings = Settings()
