from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: Any) -> AppointmentStatus:
        # Anything other than completed/cancelled counts as scheduled.
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        if normalized == cls.COMPLETED.value:
            return cls.COMPLETED
        if normalized == cls.CANCELLED.value:
            return cls.CANCELLED
        return cls.SCHEDULED


class SortKey(str, Enum):
    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    POPULARITY = "popularity"

    @classmethod
    def parse(cls, value: Any) -> SortKey:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.RELEVANCE


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


@dataclass(frozen=True)
class Address:
    street: str = ""
    city: str = ""
    state: str = ""
    country: str = ""

    def single_line(self) -> str:
        parts = (self.street, self.city, self.state, self.country)
        return ", ".join(part.strip() for part in parts if part and part.strip())


@dataclass(frozen=True)
class Provider:
    id: str
    name: str
    specialization: str = ""
    address: Address = field(default_factory=Address)
    experience_years: int = 0
    fee: float = 0.0


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    category: str | None = None
    brand: str | None = None
    price: float | None = None
    stock: int = 0
    sold_count: int = 0
    images: tuple[str, ...] = ()


@dataclass(frozen=True)
class TimestampedRecord:
    timestamp: date | datetime | str | None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED


@dataclass(frozen=True)
class StatusCount:
    date: date | datetime | str | None
    status: AppointmentStatus
    count: int


@dataclass(frozen=True)
class RegistrationCount:
    date: date | datetime | str | None
    role: str
    count: int


@dataclass(frozen=True)
class PriceRange:
    minimum: float = 0.0
    maximum: float | None = None

    def __post_init__(self) -> None:
        if self.upper_bound is not None and self.minimum > self.upper_bound:
            raise ValueError("price range minimum must be <= maximum")

    @property
    def upper_bound(self) -> float | None:
        # An unset or zero maximum leaves the range open-ended.
        return self.maximum or None

    def contains(self, price: float) -> bool:
        if price < self.minimum:
            return False
        upper = self.upper_bound
        return upper is None or price <= upper


@dataclass(frozen=True)
class FacetState:
    price_range: PriceRange = field(default_factory=PriceRange)
    selected_brands: frozenset[str] = frozenset()
    sort_key: SortKey = SortKey.RELEVANCE
    page: int = 1
    page_size: int = 20

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")


@dataclass(frozen=True)
class FacetOptions:
    categories: tuple[str, ...]
    brands: tuple[str, ...]
    price_range: PriceRange


@dataclass(frozen=True)
class TrendPoint:
    label: str
    scheduled: int = 0
    completed: int = 0
    cancelled: int = 0


@dataclass(frozen=True)
class RegistrationPoint:
    label: str
    patients: int = 0
    doctors: int = 0
