from pydantic_settings import BaseSettings
from functools import lru_cache
import os


class Settings(BaseSettings):
    app_name: str = "Catalog Sync API"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = "INFO"

    # Database - supports both SQLite (local) and PostgreSQL (production)
    database_url: str = "sqlite+aiosqlite:///./catalog_sync.db"

    # Redis - shared cache and distributed sync lock
    redis_url: str = "redis://localhost:6379/0"

    # Internal endpoints - MUST be set via environment variables in production
    internal_api_token: str = ""

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:5173,http://localhost:5174"

    # MEC dataset source
    mec_origin_url: str = "https://dadosabertos.mec.gov.br"
    mec_csv_url: str = (
        "https://dadosabertos.mec.gov.br/images/conteudo/Ind-ensino-superior/2022//"
        "PDA_Dados_Cursos_Graduacao_Brasil.csv"
    )
    mec_cache_path: str = "./data/mec-courses.csv"
    mec_cache_max_age_days: int = 6

    # Headless browser used to get past the portal's bot challenge
    browser_headless: bool = True
    browser_navigation_timeout_ms: int = 180_000  # 3 minutes, the CSV is ~tens of MB
    browser_challenge_timeout_ms: int = 45_000

    # Stack Overflow tag catalog
    stackoverflow_api_url: str = "https://api.stackexchange.com/2.3/tags"
    stackoverflow_max_pages: int = 10

    # Sync tuning
    sync_batch_size: int = 500
    sync_lock_ttl_seconds: int = 60 * 60  # max expected run duration
    sync_metadata_ttl_seconds: int = 60 * 60 * 24 * 30

    class Config:
        env_file = ".env"
        extra = "ignore"
        # Make field names case-insensitive for environment variables
        case_sensitive = False

    def get_cors_origins(self) -> list:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
