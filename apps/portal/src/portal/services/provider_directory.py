from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from care_engine.models import Provider
from care_engine.symptoms import SymptomClassifier

from portal.errors import ApiError
from portal.services.map_session import DEFAULT_ZOOM, MapSession, MapView, Marker
from portal.services.provider_locator import ProviderLocator

logger = logging.getLogger(__name__)


class ProviderSource(Protocol):
    async def list_doctors(self) -> list[Provider]: ...


@dataclass(frozen=True)
class ProviderMatch:
    providers: list[Provider]
    markers: list[Marker]
    view: MapView | None


class ProviderDirectoryService:
    def __init__(
        self,
        source: ProviderSource,
        classifier: SymptomClassifier,
        locator: ProviderLocator,
        default_zoom: int = DEFAULT_ZOOM,
    ) -> None:
        self._source = source
        self._classifier = classifier
        self._locator = locator
        self._default_zoom = default_zoom

    async def load_providers(self) -> list[Provider]:
        try:
            return await self._source.list_doctors()
        except ApiError as exc:
            logger.warning("provider_directory_load_failed", extra={"code": exc.code, "message": exc.message})
            return []

    async def match(self, symptoms: str) -> ProviderMatch:
        providers = await self.load_providers()
        matched = self._classifier.classify(symptoms, providers)
        session = MapSession(default_zoom=self._default_zoom)
        await self._locator.locate(session, matched)
        logger.info(
            "provider_directory_matched",
            extra={"provider_count": len(providers), "matched_count": len(matched), "marker_count": len(session.markers)},
        )
        return ProviderMatch(providers=matched, markers=session.markers, view=session.view)
