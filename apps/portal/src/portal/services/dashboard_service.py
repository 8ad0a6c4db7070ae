from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Protocol

from care_engine.models import RegistrationPoint, TrendPoint
from care_engine.search import ADMIN_SEARCH_FIELDS, filter_records
from care_engine.trend import aggregate_status_counts, aggregate_trend, registration_trend, status_distribution
from devkit.timezone import today_in

from portal.clients.care_api_client import Page
from portal.errors import ApiError, UserInputError
from portal.schemas.envelope import AppointmentPayload, Pagination, StatsPayload, decode_items

logger = logging.getLogger(__name__)


class AdminGateway(Protocol):
    async def admin_stats(self) -> StatsPayload: ...

    async def list_admin(self, resource: str, page: int, limit: int) -> Page: ...

    async def pending_verifications(self) -> list[dict[str, Any]]: ...

    async def verification_detail(self, doctor_id: str) -> dict[str, Any]: ...

    async def approve_verification(self, doctor_id: str, notes: str) -> dict[str, Any]: ...

    async def reject_verification(self, doctor_id: str, reason: str, notes: str) -> dict[str, Any]: ...

    async def toggle_user_status(self, user_id: str) -> dict[str, Any]: ...

    async def delete_user(self, user_id: str) -> None: ...


@dataclass(frozen=True)
class DashboardSummary:
    totals: dict[str, Any]
    appointment_trend: list[TrendPoint]
    registrations: list[RegistrationPoint]


@dataclass(frozen=True)
class AppointmentOverview:
    trend: list[TrendPoint]
    distribution: dict[str, int] = field(default_factory=dict)


class DashboardService:
    def __init__(self, gateway: AdminGateway, display_timezone: str = "UTC") -> None:
        self._gateway = gateway
        self._display_timezone = display_timezone

    def today(self) -> date:
        return today_in(self._display_timezone)

    async def summary(self, today: date | None = None) -> DashboardSummary:
        today = today or self.today()
        try:
            stats = await self._gateway.admin_stats()
        except ApiError as exc:
            logger.warning("dashboard_stats_failed", extra={"code": exc.code})
            stats = StatsPayload()
        analytics = stats.analytics
        return DashboardSummary(
            totals=stats.model_dump(exclude={"analytics"}),
            appointment_trend=aggregate_status_counts(
                [row.to_status_count() for row in analytics.appointments_trend],
                today,
            ),
            registrations=registration_trend(
                [row.to_registration_count() for row in analytics.daily_registrations],
                today,
            ),
        )

    async def appointment_overview(self, limit: int = 100, today: date | None = None) -> AppointmentOverview:
        page = await self.list_resource("appointments", page=1, limit=limit)
        try:
            records = [item.to_record() for item in decode_items(AppointmentPayload, page.items, "appointment")]
        except ApiError as exc:
            logger.warning("dashboard_appointments_decode_failed", extra={"code": exc.code})
            records = []
        return AppointmentOverview(
            trend=aggregate_trend(records, today or self.today()),
            distribution=status_distribution(records),
        )

    async def list_resource(self, resource: str, page: int = 1, limit: int = 10, query: str = "") -> Page:
        try:
            listing = await self._gateway.list_admin(resource, page=page, limit=limit)
        except ApiError as exc:
            logger.warning("dashboard_listing_failed", extra={"resource": resource, "code": exc.code})
            return Page(items=[], pagination=Pagination(page=page, pages=1, limit=limit, total=0))
        fields = ADMIN_SEARCH_FIELDS.get(resource)
        if not query.strip() or not fields:
            return listing
        return Page(items=filter_records(listing.items, query, fields), pagination=listing.pagination)

    async def pending_verifications(self) -> list[dict[str, Any]]:
        try:
            return await self._gateway.pending_verifications()
        except ApiError as exc:
            logger.warning("dashboard_pending_verifications_failed", extra={"code": exc.code})
            return []

    async def verification_detail(self, doctor_id: str) -> dict[str, Any]:
        return await self._gateway.verification_detail(doctor_id)

    async def approve_verification(self, doctor_id: str, notes: str = "") -> dict[str, Any]:
        result = await self._gateway.approve_verification(doctor_id, notes.strip())
        logger.info("verification_approved", extra={"doctor_id": doctor_id})
        return result

    async def reject_verification(self, doctor_id: str, reason: str, notes: str = "") -> dict[str, Any]:
        if not reason.strip():
            raise UserInputError("rejection reason is required")
        result = await self._gateway.reject_verification(doctor_id, reason.strip(), notes.strip())
        logger.info("verification_rejected", extra={"doctor_id": doctor_id})
        return result

    async def toggle_user_status(self, user_id: str) -> dict[str, Any]:
        result = await self._gateway.toggle_user_status(user_id)
        logger.info("user_status_toggled", extra={"user_id": user_id})
        return result

    async def delete_user(self, user_id: str) -> None:
        await self._gateway.delete_user(user_id)
        logger.info("user_deleted", extra={"user_id": user_id})
