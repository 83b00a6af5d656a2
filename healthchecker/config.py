from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Execution
    max_workers: int = 4
    check_timeout_seconds: float = 10.0  # per check, from the moment a worker picks it up

    # Result cache
    cache_ttl_seconds: int = 900  # 0 disables caching for stats polling
    cache_backend: str = "memory"  # "memory" | "sqlite"
    cache_db_path: str = "data/healthchecker-cache.db"

    # Extensions
    checks_file: str = "checks.yaml"  # core plugin probes + disabled checks
    translations_file: str = ""  # optional YAML of extra label strings
    warn_on_slug_collision: bool = True
    example_extension: bool = False  # register the demo third-party extension

    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"


settings = Settings()
