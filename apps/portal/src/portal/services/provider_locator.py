from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from care_engine.models import Provider
from devkit.observability import get_tracer

from portal.errors import ApiError
from portal.observability import LocatorMetricCollector
from portal.schemas.geocoding import GeocodeResponse
from portal.services.map_session import CancellationToken, MapSession

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    async def geocode(self, address: str) -> GeocodeResponse: ...


class ProviderLocator:
    def __init__(
        self,
        geocoder: Geocoder | None,
        max_concurrency: int = 5,
        metrics: LocatorMetricCollector | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._geocoder = geocoder
        self._max_concurrency = max_concurrency
        self._semaphore: asyncio.Semaphore | None = None
        self._semaphore_loop: asyncio.AbstractEventLoop | None = None
        self._metrics = metrics
        self._tracer = get_tracer("care-portal")
        self._disabled_logged = False

    @property
    def enabled(self) -> bool:
        return self._geocoder is not None

    async def locate(self, session: MapSession, providers: Sequence[Provider]) -> MapSession:
        if self._geocoder is None:
            if not self._disabled_logged:
                logger.info("provider_locator_disabled", extra={"reason": "geocoder_not_configured"})
                self._disabled_logged = True
            return session

        semaphore = self._semaphore_for_running_loop()
        generation, token = session.begin_pass()
        with self._tracer.start_as_current_span("provider_locator.pass") as span:
            span.set_attribute("locator.generation", generation)
            span.set_attribute("locator.provider_count", len(providers))
            targets: list[tuple[Provider, str]] = []
            for provider in providers:
                address = provider.address.single_line()
                if not address:
                    self._observe("skipped")
                    continue
                targets.append((provider, address))
            await asyncio.gather(
                *(
                    self._locate_one(semaphore, session, generation, token, provider, address)
                    for provider, address in targets
                )
            )
            current = session.is_current(generation, token)
            marker_count = len(session.markers) if current else 0
            span.set_attribute("locator.marker_count", marker_count)
            span.set_attribute("locator.superseded", not current)

        if current and self._metrics:
            self._metrics.observe_pass(marker_count)
        logger.info(
            "provider_locator_pass_completed",
            extra={
                "generation": generation,
                "provider_count": len(providers),
                "marker_count": marker_count,
                "superseded": not current,
            },
        )
        return session

    def _semaphore_for_running_loop(self) -> asyncio.Semaphore:
        # Semaphores bind to the loop they first wait on.
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self._max_concurrency)
            self._semaphore_loop = loop
        return self._semaphore

    async def _locate_one(
        self,
        semaphore: asyncio.Semaphore,
        session: MapSession,
        generation: int,
        token: CancellationToken,
        provider: Provider,
        address: str,
    ) -> None:
        assert self._geocoder is not None
        async with semaphore:
            if not session.is_current(generation, token):
                self._observe("stale")
                return
            try:
                response = await self._geocoder.geocode(address)
            except ApiError as exc:
                logger.warning(
                    "geocode_failed",
                    extra={"provider_id": provider.id, "code": exc.code, "generation": generation},
                )
                self._observe("failed")
                return

        point = response.first_point()
        if point is None:
            logger.info(
                "geocode_no_result",
                extra={"provider_id": provider.id, "status": response.status, "generation": generation},
            )
            self._observe("no_result")
            return
        if session.place_marker(generation, token, provider, point) is None:
            self._observe("stale")
            return
        self._observe("resolved")

    def _observe(self, outcome: str) -> None:
        if self._metrics:
            self._metrics.observe_geocode(outcome)
