# catalog_api/core/config.py
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "catalog_engagement"
    env: str = Field(default="local")
    host: str = "0.0.0.0"
    port: int = 8080

    # mongo: основной бэкенд; memory: in-process для тестов и локального запуска
    storage_backend: Literal["mongo", "memory"] = Field(
        default="mongo", alias="STORAGE_BACKEND")
    mongo_dsn: str = Field(
        default="mongodb://mongo:27017/catalog?replicaSet=rs0",
        alias="MONGO_DSN"
    )
    mongo_db: str = "catalog"

    cache_backend: Literal["redis", "memory", "none"] = Field(
        default="redis", alias="CACHE_BACKEND")
    redis_url: str = Field(default="redis://redis:6379/0", alias="REDIS_URL")
    cache_ttl_seconds: int = Field(default=300, alias="CACHE_TTL_SECONDS")
    cache_compress: bool = True

    sentry_dsn: str = Field(default="", alias="SENTRY_DSN")

    model_config = SettingsConfigDict(
        env_file="infra/.env", extra="ignore", populate_by_name=True)


settings = Settings()
