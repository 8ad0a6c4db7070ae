from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
from care_engine.models import Product, Provider
from pydantic import ValidationError

from portal.errors import ApiError, EnvelopeDecodeError
from portal.retry import with_exponential_backoff
from portal.schemas.envelope import (
    ErrorEnvelope,
    ListEnvelope,
    ObjectEnvelope,
    Pagination,
    ProductPayload,
    ProviderPayload,
    StatsPayload,
    decode,
    decode_items,
)

logger = logging.getLogger(__name__)

ADMIN_RESOURCES = frozenset({"appointments", "doctors", "patients", "prescriptions", "medical-records"})


@dataclass(frozen=True)
class Page:
    items: list[Any]
    pagination: Pagination


def _upstream_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    try:
        return ErrorEnvelope.model_validate(body).message
    except ValidationError:
        return None


def _map_status(response: httpx.Response) -> ApiError:
    status = response.status_code
    message = _upstream_message(response)
    if status == 429 or status >= 500:
        return ApiError("UPSTREAM_UNAVAILABLE", message or "Upstream unavailable", 503)
    return ApiError("UPSTREAM_HTTP_ERROR", message or "Upstream returned error", 502)


class CareApiClient:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        token: str | None = None,
        max_retries: int = 3,
        retry_base_delay_seconds: float = 0.1,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._token = token
        self._max_retries = max_retries
        self._retry_base_delay_seconds = retry_base_delay_seconds
        self._client_factory = client_factory

    async def list_doctors(self) -> list[Provider]:
        envelope = decode(ListEnvelope, await self._get("/doctors"), "doctors")
        return [item.to_provider() for item in decode_items(ProviderPayload, envelope.data, "doctor")]

    async def list_products(self, page: int, limit: int, category: str | None = None) -> Page:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if category:
            params["category"] = category
        envelope = decode(ListEnvelope, await self._get("/products", params=params), "products")
        products = [item.to_product() for item in decode_items(ProductPayload, envelope.data, "product")]
        return Page(items=products, pagination=envelope.pagination or Pagination(page=page, pages=1))

    async def personalized_recommendations(self) -> list[Product]:
        payload = await self._get("/products/recommend/personalized")
        return self._decode_products(payload, "personalized recommendations")

    async def disease_recommendations(self, disease: str) -> list[Product]:
        payload = await self._send("POST", "/products/recommend/disease", json={"disease": disease})
        return self._decode_products(payload, "disease recommendations")

    async def create_appointment(self, doctor_id: str, date: str, time: str) -> dict[str, Any]:
        payload = await self._send(
            "POST",
            "/appointments",
            json={"doctorId": doctor_id, "date": date, "time": time},
        )
        return self._decode_object(payload, "appointment")

    async def list_admin(self, resource: str, page: int, limit: int) -> Page:
        if resource not in ADMIN_RESOURCES:
            supported = ", ".join(sorted(ADMIN_RESOURCES))
            raise ValueError(f"unsupported admin resource '{resource}', supported: {supported}")
        payload = await self._get(f"/admin/{resource}", params={"page": page, "limit": limit})
        envelope = decode(ListEnvelope, payload, f"admin {resource}")
        return Page(items=envelope.data, pagination=envelope.pagination or Pagination(page=page, pages=1))

    async def admin_stats(self) -> StatsPayload:
        envelope = decode(ObjectEnvelope, await self._get("/admin/stats"), "admin stats")
        return decode(StatsPayload, envelope.data, "admin stats")

    async def pending_verifications(self) -> list[dict[str, Any]]:
        payload = await self._get("/admin/verifications/pending")
        return decode(ListEnvelope, payload, "pending verifications").data

    async def verification_detail(self, doctor_id: str) -> dict[str, Any]:
        payload = await self._get(f"/admin/verifications/{doctor_id}")
        return self._decode_object(payload, "verification")

    async def approve_verification(self, doctor_id: str, notes: str) -> dict[str, Any]:
        payload = await self._send("POST", f"/admin/verifications/{doctor_id}/approve", json={"notes": notes})
        return self._decode_object(payload, "verification approval")

    async def reject_verification(self, doctor_id: str, reason: str, notes: str) -> dict[str, Any]:
        payload = await self._send(
            "POST",
            f"/admin/verifications/{doctor_id}/reject",
            json={"reason": reason, "notes": notes},
        )
        return self._decode_object(payload, "verification rejection")

    async def toggle_user_status(self, user_id: str) -> dict[str, Any]:
        payload = await self._send("PATCH", f"/admin/users/{user_id}/toggle-status")
        return self._decode_object(payload, "user status")

    async def delete_user(self, user_id: str) -> None:
        await self._send("DELETE", f"/admin/users/{user_id}")

    def _decode_products(self, payload: Any, context: str) -> list[Product]:
        envelope = decode(ListEnvelope, payload, context)
        return [item.to_product() for item in decode_items(ProductPayload, envelope.data, "product")]

    def _decode_object(self, payload: Any, context: str) -> dict[str, Any]:
        if payload is None:
            return {}
        if isinstance(payload, dict) and payload.get("data") is None:
            return {}
        return decode(ObjectEnvelope, payload, context).data

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await with_exponential_backoff(
            lambda: self._send("GET", path, params=params),
            retries=self._max_retries,
            base_delay_seconds=self._retry_base_delay_seconds,
            on_retry=lambda attempt, delay: logger.warning(
                "care_api_retry",
                extra={"path": path, "attempt": attempt, "delay_seconds": delay},
            ),
        )

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else None
        try:
            factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout_seconds))
            async with factory() as client:
                response = await client.request(
                    method,
                    f"{self._base_url}{path}",
                    params=params,
                    json=json,
                    headers=headers,
                )
        except httpx.TimeoutException as exc:
            raise ApiError("UPSTREAM_TIMEOUT", "Upstream timeout", 504) from exc
        except httpx.HTTPError as exc:
            raise ApiError("UPSTREAM_FAILURE", "Upstream request failed", 502) from exc

        if response.is_error:
            error = _map_status(response)
            logger.warning(
                "care_api_error",
                extra={"method": method, "path": path, "status_code": response.status_code, "code": error.code},
            )
            raise error
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise EnvelopeDecodeError(f"{method} {path} returned non-json body") from exc
