"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "dealdesk"
    log_level: str = "INFO"

    # Fallback dealer policy, used when a request carries no policy block
    default_max_pti: float = 0.25  # ratio
    default_max_ltv: float = 1.75  # ratio
    default_min_down_payment: float = 500.0
    default_max_term_weeks: int = 104
    default_apr: float = 24.99  # annual percent

    # Affordability search guard
    affordability_max_candidates: int = 10_000


settings = Settings()
