from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "service"
    DATABASE_URL: str | None = None
    CENTER_DEFAULT_RADIUS_KM: float = 50.0
    CENTER_DEFAULT_LIST_LIMIT: int = 100
    CENTER_DEFAULT_NEAREST_LIMIT: int = 5
    CENTER_STORE_TIMEOUT_SECONDS: float = 5.0


def load_settings(service_name: str) -> ServiceSettings:
    return ServiceSettings(SERVICE_NAME=service_name)
