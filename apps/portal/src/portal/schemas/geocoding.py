from __future__ import annotations

from care_engine.models import GeoPoint
from pydantic import BaseModel, ConfigDict, Field

GEOCODE_OK = "OK"


class GeocodeLocation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class GeocodeGeometry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    location: GeocodeLocation


class GeocodeResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    geometry: GeocodeGeometry
    formatted_address: str = ""


class GeocodeResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str
    results: list[GeocodeResult] = Field(default_factory=list)

    def first_point(self) -> GeoPoint | None:
        if self.status != GEOCODE_OK or not self.results:
            return None
        location = self.results[0].geometry.location
        return GeoPoint(lat=location.lat, lng=location.lng)
