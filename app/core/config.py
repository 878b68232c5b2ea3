# app/core/config.py
from functools import lru_cache
from typing import List

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./app.db"

    # no default: every deployment must provide its own signing secret
    JWT_SECRET: str
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 7 * 24 * 60
    EMAIL_TOKEN_EXPIRE_HOURS: int = 24

    FRONTEND_URL: str = "http://localhost:5174"
    BACKEND_URL: str = "http://localhost:8000"

    # SMTP는 비어 있으면 LogNotifier 사용
    EMAIL_HOST: str = ""
    EMAIL_PORT: int = 587
    EMAIL_USER: str = ""
    EMAIL_PASS: str = ""
    EMAIL_FROM: str = ""

    STORAGE_BACKEND: str = "local"
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_BYTES: int = 12 * 1024 * 1024

    AZURE_STORAGE_CONNECTION_STRING: str = ""
    AZURE_CONTAINER_NAME: str = ""

    CORS_ORIGINS: str = ""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def smtp_configured(self) -> bool:
        return bool(self.EMAIL_HOST and self.EMAIL_USER and self.EMAIL_PASS)

    @model_validator(mode="after")
    def _check_explicit(self) -> "Settings":
        if self.STORAGE_BACKEND not in ("local", "azure"):
            raise ValueError("STORAGE_BACKEND must be 'local' or 'azure'")
        if self.STORAGE_BACKEND == "azure" and not (
            self.AZURE_STORAGE_CONNECTION_STRING and self.AZURE_CONTAINER_NAME
        ):
            raise ValueError("azure storage needs AZURE_STORAGE_CONNECTION_STRING and AZURE_CONTAINER_NAME")

        if self.ENVIRONMENT == "production":
            missing = [k for k in ("FRONTEND_URL", "BACKEND_URL") if k not in self.model_fields_set]
            if missing:
                raise ValueError(f"must be set explicitly in production: {', '.join(missing)}")
            if not self.smtp_configured:
                raise ValueError("SMTP settings (EMAIL_HOST, EMAIL_USER, EMAIL_PASS) are required in production")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
