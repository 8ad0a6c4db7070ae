from __future__ import annotations

from collections.abc import Callable

import httpx
from pydantic import ValidationError

from portal.errors import ApiError, EnvelopeDecodeError
from portal.schemas.geocoding import GeocodeResponse

DEFAULT_GEOCODING_URL = "https://maps.googleapis.com/maps/api/geocode/json"


class GeocodingClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_GEOCODING_URL,
        timeout_seconds: float = 5.0,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self._api_key = api_key
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds
        self._client_factory = client_factory

    async def geocode(self, address: str) -> GeocodeResponse:
        try:
            factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout_seconds))
            async with factory() as client:
                response = await client.get(self._base_url, params={"address": address, "key": self._api_key})
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ApiError("GEOCODER_TIMEOUT", "Geocoder timeout", 504) from exc
        except httpx.HTTPStatusError as exc:
            raise ApiError("GEOCODER_HTTP_ERROR", "Geocoder returned error", 502) from exc
        except httpx.HTTPError as exc:
            raise ApiError("GEOCODER_FAILURE", "Geocoder request failed", 502) from exc

        try:
            return GeocodeResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise EnvelopeDecodeError("geocoder returned an unexpected payload") from exc
