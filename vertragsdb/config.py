from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    APP_NAME: str = "VertragsDB"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PORT: int = 8091
    API_PREFIX: str = "/api/v1"

    DATABASE_URL: str = "sqlite+aiosqlite:///./contracts.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_RECYCLE: int = 300

    # Signing secret is supplied at startup; previous secrets stay valid for
    # verification only, so keys can be rotated without logging everyone out.
    JWT_SECRET_KEY: str = ""
    JWT_PREVIOUS_SECRET_KEYS: str = ""
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 24 * 60

    STORAGE_BACKEND: str = "local"  # local | r2
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_MB: int = 10
    R2_ACCOUNT_ID: str = ""
    R2_ACCESS_KEY_ID: str = ""
    R2_SECRET_ACCESS_KEY: str = ""
    R2_BUCKET_NAME: str = "vertragsdb-documents"
    R2_ENDPOINT_URL: Optional[str] = None

    EXPIRING_LOOKAHEAD_DAYS: int = 90
    CONTRACT_NUMBER_PREFIX: str = "V"
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin"
    DEFAULT_CATEGORIES: str = "IT,Gebäude,Versicherungen"

    CORS_ORIGINS: str = "http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def previous_jwt_secrets(self) -> list[str]:
        return [k.strip() for k in self.JWT_PREVIOUS_SECRET_KEYS.split(",") if k.strip()]

    @property
    def default_categories_list(self) -> list[str]:
        return [c.strip() for c in self.DEFAULT_CATEGORIES.split(",") if c.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
