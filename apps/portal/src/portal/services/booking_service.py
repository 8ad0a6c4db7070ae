from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from care_engine.models import Provider
from care_engine.symptoms import SymptomClassifier

from portal.errors import UserInputError
from portal.services.map_session import DEFAULT_ZOOM, MapSession, Marker
from portal.services.provider_locator import ProviderLocator

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.4


class AppointmentGateway(Protocol):
    async def create_appointment(self, doctor_id: str, date: str, time: str) -> dict[str, Any]: ...


class ProviderLoader(Protocol):
    async def load_providers(self) -> list[Provider]: ...


@dataclass
class BookingForm:
    doctor_id: str = ""
    date: str = ""
    time: str = ""

    def missing_fields(self) -> list[str]:
        return [name for name in ("doctor_id", "date", "time") if not getattr(self, name).strip()]


async def submit_appointment(gateway: AppointmentGateway, form: BookingForm) -> dict[str, Any]:
    missing = form.missing_fields()
    if missing:
        raise UserInputError(f"missing required fields: {', '.join(missing)}")
    created = await gateway.create_appointment(
        doctor_id=form.doctor_id.strip(),
        date=form.date.strip(),
        time=form.time.strip(),
    )
    logger.info("appointment_booked", extra={"doctor_id": form.doctor_id, "date": form.date})
    return created


class BookingSession:
    """Interactive booking flow for one user.

    ``search`` classifies immediately and re-plots the matched providers after
    a debounce delay; a newer search cancels the locate still waiting to run.
    Selecting a marker on the session map fills the form's doctor.
    """

    def __init__(
        self,
        providers: Sequence[Provider],
        classifier: SymptomClassifier,
        locator: ProviderLocator,
        gateway: AppointmentGateway,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        default_zoom: int = DEFAULT_ZOOM,
        on_marker_ready: Callable[[Marker], None] | None = None,
    ) -> None:
        self._providers = list(providers)
        self._classifier = classifier
        self._locator = locator
        self._gateway = gateway
        self._debounce_seconds = debounce_seconds
        self._pending: asyncio.Task[None] | None = None
        self.form = BookingForm()
        self.matched: list[Provider] = []
        self.map = MapSession(
            default_zoom=default_zoom,
            on_marker_ready=on_marker_ready,
            on_select=self._fill_doctor,
        )

    @property
    def debounce_seconds(self) -> float:
        return self._debounce_seconds

    def search(self, text: str) -> list[Provider]:
        self.matched = self._classifier.classify(text, self._providers)
        self._schedule_locate(self.matched)
        return self.matched

    async def settle(self) -> None:
        pending = self._pending
        if pending is None:
            return
        await asyncio.wait({pending})
        if not pending.cancelled():
            pending.result()

    def select_marker(self, marker_id: str) -> str | None:
        return self.map.select(marker_id)

    async def submit(self) -> dict[str, Any]:
        created = await submit_appointment(self._gateway, self.form)
        self.form = BookingForm()
        return created

    def close(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self.map.close()

    def _fill_doctor(self, provider_id: str) -> None:
        self.form.doctor_id = provider_id

    def _schedule_locate(self, providers: list[Provider]) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
            logger.debug("booking_locate_debounced")
        self._pending = asyncio.get_running_loop().create_task(self._locate_after_delay(providers))

    async def _locate_after_delay(self, providers: list[Provider]) -> None:
        await asyncio.sleep(self._debounce_seconds)
        await self._locator.locate(self.map, providers)


class BookingSessionFactory:
    def __init__(
        self,
        loader: ProviderLoader,
        classifier: SymptomClassifier,
        locator: ProviderLocator,
        gateway: AppointmentGateway,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        default_zoom: int = DEFAULT_ZOOM,
    ) -> None:
        self._loader = loader
        self._classifier = classifier
        self._locator = locator
        self._gateway = gateway
        self._debounce_seconds = debounce_seconds
        self._default_zoom = default_zoom

    async def open(self, on_marker_ready: Callable[[Marker], None] | None = None) -> BookingSession:
        providers = await self._loader.load_providers()
        logger.info("booking_session_opened", extra={"provider_count": len(providers)})
        return BookingSession(
            providers,
            self._classifier,
            self._locator,
            self._gateway,
            debounce_seconds=self._debounce_seconds,
            default_zoom=self._default_zoom,
            on_marker_ready=on_marker_ready,
        )
