from __future__ import annotations

import json

import httpx
import pytest

from portal.clients.care_api_client import CareApiClient
from portal.errors import ApiError, EnvelopeDecodeError


def build_client(handler, max_retries: int = 3) -> CareApiClient:
    transport = httpx.MockTransport(handler)
    return CareApiClient(
        base_url="https://care.example.com/api/v1/",
        timeout_seconds=5.0,
        token="secret",
        max_retries=max_retries,
        retry_base_delay_seconds=0.0,
        client_factory=lambda: httpx.AsyncClient(transport=transport, timeout=5.0),
    )


@pytest.mark.asyncio
async def test_list_doctors_decodes_envelope_into_providers() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/doctors"
        assert request.headers["Authorization"] == "Bearer secret"
        return httpx.Response(
            status_code=200,
            json={
                "data": [
                    {
                        "_id": "d-1",
                        "firstName": "Ana",
                        "lastName": "Ruiz",
                        "specialization": "Cardiologist",
                        "experienceYears": "7",
                        "address": {"street": "1 Main St", "city": "Springfield", "state": None, "country": "US"},
                    },
                    {"_id": 42, "fullName": "Bo Chen", "specialization": None},
                ]
            },
        )

    providers = await build_client(handler).list_doctors()

    assert [provider.id for provider in providers] == ["d-1", "42"]
    assert providers[0].name == "Ana Ruiz"
    assert providers[0].experience_years == 7
    assert providers[0].address.single_line() == "1 Main St, Springfield, US"
    assert providers[1].specialization == ""
    assert providers[1].experience_years == 0


@pytest.mark.asyncio
async def test_list_products_forwards_paging_and_reads_pagination() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["page"] == "2"
        assert request.url.params["limit"] == "20"
        assert request.url.params["category"] == "vitamins"
        return httpx.Response(
            status_code=200,
            json={
                "data": [{"_id": "p-1", "name": "Vitamin C", "price": "12.5", "brand": "Acme", "soldCount": 3}],
                "pagination": {"page": 2, "pages": 5, "total": 90},
            },
        )

    page = await build_client(handler).list_products(page=2, limit=20, category="vitamins")

    assert page.pagination.page == 2
    assert page.pagination.pages == 5
    assert page.items[0].price == 12.5
    assert page.items[0].sold_count == 3


@pytest.mark.asyncio
async def test_get_retries_unavailable_upstream_then_succeeds() -> None:
    calls = {"count": 0}

    def handler(_: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] < 3:
            return httpx.Response(status_code=503, json={"message": "down"})
        return httpx.Response(status_code=200, json={"data": []})

    providers = await build_client(handler).list_doctors()

    assert providers == []
    assert calls["count"] == 3


@pytest.mark.asyncio
async def test_get_gives_up_after_max_retries() -> None:
    calls = {"count": 0}

    def handler(_: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(status_code=503, json={"message": "down"})

    with pytest.raises(ApiError) as exc_info:
        await build_client(handler, max_retries=2).list_doctors()

    assert exc_info.value.code == "UPSTREAM_UNAVAILABLE"
    assert exc_info.value.status_code == 503
    assert calls["count"] == 2


@pytest.mark.asyncio
async def test_client_error_keeps_upstream_message_and_is_not_retried() -> None:
    calls = {"count": 0}

    def handler(_: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(status_code=400, json={"message": "Slot already booked"})

    with pytest.raises(ApiError) as exc_info:
        await build_client(handler).create_appointment("d-1", "2026-04-01", "10:00")

    assert exc_info.value.code == "UPSTREAM_HTTP_ERROR"
    assert exc_info.value.message == "Slot already booked"
    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_create_appointment_posts_camel_case_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert json.loads(request.content) == {"doctorId": "d-1", "date": "2026-04-01", "time": "10:00"}
        return httpx.Response(status_code=201, json={"data": {"_id": "a-1", "status": "scheduled"}})

    created = await build_client(handler).create_appointment("d-1", "2026-04-01", "10:00")

    assert created == {"_id": "a-1", "status": "scheduled"}


@pytest.mark.asyncio
async def test_timeout_maps_to_upstream_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ApiError) as exc_info:
        await build_client(handler, max_retries=1).list_doctors()

    assert exc_info.value.code == "UPSTREAM_TIMEOUT"
    assert exc_info.value.status_code == 504


@pytest.mark.asyncio
async def test_connect_error_maps_to_upstream_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ApiError) as exc_info:
        await build_client(handler).list_doctors()

    assert exc_info.value.code == "UPSTREAM_FAILURE"


@pytest.mark.asyncio
async def test_unexpected_envelope_raises_decode_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"data": {"not": "a list"}})

    with pytest.raises(EnvelopeDecodeError) as exc_info:
        await build_client(handler).list_doctors()

    assert exc_info.value.code == "UPSTREAM_DECODE_ERROR"
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_admin_stats_reads_totals_and_analytics() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=200,
            json={
                "data": {
                    "totalUsers": 10,
                    "totalDoctors": 3,
                    "analytics": {
                        "appointmentsTrend": [{"_id": {"date": "2026-03-30", "status": "completed"}, "count": 2}],
                        "dailyRegistrations": [{"_id": {"date": "2026-03-30", "role": "patient"}, "count": 4}],
                    },
                }
            },
        )

    stats = await build_client(handler).admin_stats()

    assert stats.total_users == 10
    assert stats.total_doctors == 3
    assert stats.analytics.appointments_trend[0].count == 2
    assert stats.analytics.daily_registrations[0].to_registration_count().role == "patient"


@pytest.mark.asyncio
async def test_list_admin_rejects_unknown_resource() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(ValueError):
        await build_client(handler).list_admin("payments", page=1, limit=10)


@pytest.mark.asyncio
async def test_delete_user_accepts_empty_response() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        assert request.url.path == "/api/v1/admin/users/u-1"
        return httpx.Response(status_code=204)

    assert await build_client(handler).delete_user("u-1") is None
