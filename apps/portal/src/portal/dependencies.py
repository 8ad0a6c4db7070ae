from __future__ import annotations

from care_engine.symptoms import SymptomClassifier
from devkit.config import load_settings

from portal.clients.care_api_client import CareApiClient
from portal.clients.geocoding_client import GeocodingClient
from portal.observability import CompositePortalMetrics, InMemoryPortalMetrics, PrometheusPortalMetrics
from portal.services.booking_service import BookingSessionFactory
from portal.services.catalog_service import CatalogService
from portal.services.dashboard_service import DashboardService
from portal.services.provider_directory import ProviderDirectoryService
from portal.services.provider_locator import ProviderLocator

settings = load_settings("care-portal")

memory_metrics = InMemoryPortalMetrics()
prometheus_metrics = PrometheusPortalMetrics()
portal_metrics = CompositePortalMetrics([memory_metrics, prometheus_metrics])

_care_api_client = CareApiClient(
    base_url=settings.CARE_API_BASE_URL,
    timeout_seconds=settings.CARE_API_TIMEOUT_SECONDS,
    token=settings.CARE_API_TOKEN,
    max_retries=settings.CARE_API_MAX_RETRIES,
    retry_base_delay_seconds=settings.CARE_API_RETRY_BASE_DELAY_SECONDS,
)
if settings.geocoding_enabled:
    _geocoder: GeocodingClient | None = GeocodingClient(
        api_key=settings.GEOCODING_API_KEY or "",
        base_url=settings.GEOCODING_BASE_URL,
        timeout_seconds=settings.GEOCODING_TIMEOUT_SECONDS,
    )
else:
    _geocoder = None

_provider_locator = ProviderLocator(
    _geocoder,
    max_concurrency=settings.GEOCODING_MAX_CONCURRENCY,
    metrics=portal_metrics,
)
_symptom_classifier = SymptomClassifier()
_provider_directory = ProviderDirectoryService(
    _care_api_client,
    _symptom_classifier,
    _provider_locator,
    default_zoom=settings.MAP_DEFAULT_ZOOM,
)
_booking_sessions = BookingSessionFactory(
    _provider_directory,
    _symptom_classifier,
    _provider_locator,
    _care_api_client,
    debounce_seconds=settings.SYMPTOM_LOCATE_DEBOUNCE_SECONDS,
    default_zoom=settings.MAP_DEFAULT_ZOOM,
)
_catalog_service = CatalogService(_care_api_client, facet_sample_size=settings.CATALOG_FACET_SAMPLE_SIZE)
_dashboard_service = DashboardService(_care_api_client, display_timezone=settings.DISPLAY_TIMEZONE)


def get_care_api_client() -> CareApiClient:
    return _care_api_client


def get_provider_directory() -> ProviderDirectoryService:
    return _provider_directory


def get_catalog_service() -> CatalogService:
    return _catalog_service


def get_catalog_page_size() -> int:
    return settings.CATALOG_PAGE_SIZE


def get_booking_sessions() -> BookingSessionFactory:
    return _booking_sessions


def get_dashboard_service() -> DashboardService:
    return _dashboard_service
