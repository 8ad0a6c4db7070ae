from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from portal.clients.care_api_client import Page
from portal.errors import ApiError, UserInputError
from portal.schemas.envelope import Pagination, StatsPayload
from portal.services.dashboard_service import DashboardService

TODAY = date(2026, 3, 30)

DOCTOR_ROWS = [
    {"_id": "d-1", "firstName": "Ana", "lastName": "Ruiz", "email": "ana@example.com", "specialization": "Cardiology"},
    {"_id": "d-2", "firstName": "Bo", "lastName": "Chen", "email": "bo@example.com", "specialization": "Dermatology"},
]


class FakeAdminGateway:
    def __init__(self, error: ApiError | None = None) -> None:
        self.rejections: list[tuple[str, str, str]] = []
        self.deleted: list[str] = []
        self._error = error

    async def admin_stats(self) -> StatsPayload:
        if self._error:
            raise self._error
        return StatsPayload.model_validate(
            {
                "totalUsers": 12,
                "totalAppointments": 4,
                "analytics": {
                    "appointmentsTrend": [
                        {"_id": {"date": "2026-03-30", "status": "completed"}, "count": 3},
                        {"_id": {"date": "2026-03-01", "status": "cancelled"}, "count": 1},
                        {"_id": {"date": "2026-02-01", "status": "completed"}, "count": 9},
                    ],
                    "dailyRegistrations": [
                        {"_id": {"date": "2026-03-30", "role": "patient"}, "count": 2},
                        {"_id": {"date": "2026-03-29", "role": "doctor"}, "count": 1},
                    ],
                },
            }
        )

    async def list_admin(self, resource: str, page: int, limit: int) -> Page:
        if self._error:
            raise self._error
        rows: list[dict[str, Any]] = DOCTOR_ROWS
        if resource == "appointments":
            rows = [
                {"appointmentDate": "2026-03-30T09:00:00Z", "status": "completed"},
                {"appointmentDate": "2026-03-28", "status": "cancelled"},
                {"appointmentDate": "2025-12-01", "status": "scheduled"},
                {"appointmentDate": "not a date", "status": "pending"},
            ]
        return Page(items=rows, pagination=Pagination(page=page, pages=2, limit=limit, total=len(rows)))

    async def pending_verifications(self) -> list[dict[str, Any]]:
        if self._error:
            raise self._error
        return [{"_id": "d-9"}]

    async def verification_detail(self, doctor_id: str) -> dict[str, Any]:
        return {"_id": doctor_id}

    async def approve_verification(self, doctor_id: str, notes: str) -> dict[str, Any]:
        return {"_id": doctor_id, "status": "approved", "notes": notes}

    async def reject_verification(self, doctor_id: str, reason: str, notes: str) -> dict[str, Any]:
        self.rejections.append((doctor_id, reason, notes))
        return {"_id": doctor_id, "status": "rejected"}

    async def toggle_user_status(self, user_id: str) -> dict[str, Any]:
        return {"_id": user_id, "isActive": False}

    async def delete_user(self, user_id: str) -> None:
        self.deleted.append(user_id)


@pytest.mark.asyncio
async def test_summary_builds_trend_and_registrations() -> None:
    summary = await DashboardService(FakeAdminGateway()).summary(today=TODAY)

    assert summary.totals["total_users"] == 12
    assert len(summary.appointment_trend) == 10
    assert summary.appointment_trend[0].label == "Mar 1"
    assert summary.appointment_trend[0].cancelled == 1
    assert sum(point.completed for point in summary.appointment_trend) == 0
    assert len(summary.registrations) == 7
    assert summary.registrations[-1].patients == 2
    assert summary.registrations[-2].doctors == 1


@pytest.mark.asyncio
async def test_summary_degrades_when_stats_unavailable() -> None:
    gateway = FakeAdminGateway(error=ApiError("UPSTREAM_UNAVAILABLE", "Upstream unavailable", 503))

    summary = await DashboardService(gateway).summary(today=TODAY)

    assert summary.totals["total_users"] == 0
    assert all(point.scheduled == point.completed == point.cancelled == 0 for point in summary.appointment_trend)
    assert len(summary.registrations) == 7


@pytest.mark.asyncio
async def test_appointment_overview_counts_window_and_statuses() -> None:
    overview = await DashboardService(FakeAdminGateway()).appointment_overview(today=TODAY)

    assert len(overview.trend) == 10
    assert overview.trend[9].cancelled == 1
    assert overview.distribution == {"scheduled": 2, "completed": 1, "cancelled": 1}


@pytest.mark.asyncio
async def test_list_resource_filters_with_query() -> None:
    listing = await DashboardService(FakeAdminGateway()).list_resource("doctors", query="DERMA")

    assert [row["_id"] for row in listing.items] == ["d-2"]
    assert listing.pagination.pages == 2


@pytest.mark.asyncio
async def test_list_resource_degrades_to_empty_page() -> None:
    gateway = FakeAdminGateway(error=ApiError("UPSTREAM_TIMEOUT", "Upstream timeout", 504))

    listing = await DashboardService(gateway).list_resource("patients", page=3, limit=10)

    assert listing.items == []
    assert listing.pagination.page == 3


@pytest.mark.asyncio
async def test_reject_requires_reason() -> None:
    gateway = FakeAdminGateway()

    with pytest.raises(UserInputError):
        await DashboardService(gateway).reject_verification("d-1", "  ")

    assert gateway.rejections == []


@pytest.mark.asyncio
async def test_reject_and_delete_reach_gateway() -> None:
    gateway = FakeAdminGateway()
    service = DashboardService(gateway)

    await service.reject_verification("d-1", " expired license ", "")
    await service.delete_user("u-1")

    assert gateway.rejections == [("d-1", "expired license", "")]
    assert gateway.deleted == ["u-1"]
