from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "service"
    CARE_API_BASE_URL: str = "http://localhost:5000/api/v1"
    CARE_API_TOKEN: str | None = None
    CARE_API_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)
    CARE_API_MAX_RETRIES: int = Field(default=3, ge=1)
    CARE_API_RETRY_BASE_DELAY_SECONDS: float = Field(default=0.1, ge=0)
    GEOCODING_API_KEY: str | None = None
    GEOCODING_BASE_URL: str = "https://maps.googleapis.com/maps/api/geocode/json"
    GEOCODING_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)
    GEOCODING_MAX_CONCURRENCY: int = Field(default=5, ge=1)
    MAP_DEFAULT_ZOOM: int = Field(default=12, ge=0, le=22)
    SYMPTOM_LOCATE_DEBOUNCE_SECONDS: float = Field(default=0.4, ge=0)
    CATALOG_PAGE_SIZE: int = Field(default=20, ge=1, le=100)
    CATALOG_FACET_SAMPLE_SIZE: int = Field(default=200, ge=1)
    DISPLAY_TIMEZONE: str = "UTC"

    @property
    def geocoding_enabled(self) -> bool:
        return bool(self.GEOCODING_API_KEY and self.GEOCODING_API_KEY.strip())


def load_settings(service_name: str) -> ServiceSettings:
    return ServiceSettings(SERVICE_NAME=service_name)
