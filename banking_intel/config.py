"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "banking-intel-gateway"
    log_level: str = "INFO"

    # Account/transaction snapshot source
    bank_api_base: str = "http://localhost:8001"
    http_timeout_seconds: float = 5.0

    # Text-generation oracle (OpenAI-compatible chat completions endpoint)
    oracle_base_url: str = "http://localhost:11434/v1"
    oracle_api_key: str = ""
    oracle_model: str = "llama3.2"
    oracle_timeout_seconds: float = 30.0
    oracle_max_tokens: int = 800

    # Reports
    default_timeframe: str = "30d"
    report_cache_ttl_seconds: float = 300.0
    report_cache_max_size: int = 100
    bulk_max_concurrency: int = 5


settings = Settings()
