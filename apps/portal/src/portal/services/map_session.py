from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from care_engine.models import GeoPoint, Provider

DEFAULT_ZOOM = 12


@dataclass(frozen=True)
class Marker:
    marker_id: str
    provider_id: str
    title: str
    position: GeoPoint


@dataclass(frozen=True)
class MapView:
    center: GeoPoint
    zoom: int


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class MapSession:
    """Caller-owned map state: the live markers, the view and the pass generation.

    Each locate pass calls ``begin_pass``, which cancels the previous pass and
    clears its markers. Results are only applied while their generation is
    still the current one, so a superseded pass can never repopulate the map.
    """

    def __init__(
        self,
        default_zoom: int = DEFAULT_ZOOM,
        on_marker_ready: Callable[[Marker], None] | None = None,
        on_select: Callable[[str], None] | None = None,
    ) -> None:
        self._default_zoom = default_zoom
        self._on_marker_ready = on_marker_ready
        self._on_select = on_select
        self._generation = 0
        self._token = CancellationToken()
        self._markers: dict[str, Marker] = {}
        self._view: MapView | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def markers(self) -> list[Marker]:
        return list(self._markers.values())

    @property
    def view(self) -> MapView | None:
        return self._view

    def positions(self) -> dict[str, GeoPoint]:
        return {marker.provider_id: marker.position for marker in self._markers.values()}

    def begin_pass(self) -> tuple[int, CancellationToken]:
        self._token.cancel()
        self._generation += 1
        self._token = CancellationToken()
        self._markers.clear()
        return self._generation, self._token

    def is_current(self, generation: int, token: CancellationToken) -> bool:
        return generation == self._generation and not token.cancelled

    def place_marker(
        self,
        generation: int,
        token: CancellationToken,
        provider: Provider,
        position: GeoPoint,
    ) -> Marker | None:
        if not self.is_current(generation, token):
            return None
        marker = Marker(
            marker_id=f"{generation}:{provider.id}",
            provider_id=provider.id,
            title=provider.name,
            position=position,
        )
        self._markers[marker.marker_id] = marker
        if self._view is None:
            self._view = MapView(center=position, zoom=self._default_zoom)
        if self._on_marker_ready:
            self._on_marker_ready(marker)
        return marker

    def provider_for_marker(self, marker_id: str) -> str | None:
        marker = self._markers.get(marker_id)
        return marker.provider_id if marker else None

    def select(self, marker_id: str) -> str | None:
        provider_id = self.provider_for_marker(marker_id)
        if provider_id is not None and self._on_select:
            self._on_select(provider_id)
        return provider_id

    def close(self) -> None:
        self._token.cancel()
        self._markers.clear()
