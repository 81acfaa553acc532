"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./transfer_engine.db"
    log_level: str = "INFO"
    wise_api_url: str = "https://api.sandbox.transferwise.tech"
    wise_timeout_seconds: float = 30.0
    cache_backend: str = "memory"  # "memory" or "database"
    cache_ttl_seconds: int = 24 * 60 * 60  # a whole day
    mock_latency_ms: int = 0  # Simulated network latency for the mock network

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
