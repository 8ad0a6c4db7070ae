from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

UTC_ZONE = ZoneInfo("UTC")


def resolve_zone(name: str | None) -> ZoneInfo:
    if not name:
        return UTC_ZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return UTC_ZONE


def now_in(zone_name: str | None) -> datetime:
    return datetime.now(resolve_zone(zone_name))


def today_in(zone_name: str | None) -> date:
    return now_in(zone_name).date()
