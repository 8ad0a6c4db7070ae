from __future__ import annotations

from typing import Any, TypeVar

from care_engine.catalog import coerce_number
from care_engine.models import (
    Address,
    AppointmentStatus,
    Product,
    Provider,
    RegistrationCount,
    StatusCount,
    TimestampedRecord,
)
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from portal.errors import EnvelopeDecodeError

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def _blank_if_none(value: Any) -> Any:
    return "" if value is None else value


def _id_as_text(value: Any) -> Any:
    # Mongo ids may arrive as numbers or {"$oid": ...} objects.
    if isinstance(value, dict) and "$oid" in value:
        value = value["$oid"]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _non_negative_int(value: Any) -> int:
    return max(0, int(coerce_number(value)))


class Pagination(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page: int = 1
    pages: int = 1
    limit: int | None = None
    total: int | None = None

    @field_validator("page", "pages", mode="before")
    @classmethod
    def _at_least_one(cls, value: Any) -> int:
        return max(1, int(coerce_number(value, default=1)))


class ListEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: list[dict[str, Any]]
    pagination: Pagination | None = None


class ObjectEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: dict[str, Any]


class ErrorEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str | None = None


class AddressPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    street: str = ""
    city: str = ""
    state: str = ""
    country: str = ""

    @field_validator("street", "city", "state", "country", mode="before")
    @classmethod
    def _blank_parts(cls, value: Any) -> Any:
        return _blank_if_none(value)


class ProviderPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    full_name: str | None = Field(default=None, validation_alias=AliasChoices("fullName", "name"))
    first_name: str = Field(default="", validation_alias=AliasChoices("firstName", "first_name"))
    last_name: str = Field(default="", validation_alias=AliasChoices("lastName", "last_name"))
    specialization: str = ""
    address: AddressPayload | None = None
    experience_years: int = Field(
        default=0,
        validation_alias=AliasChoices("experienceYears", "yearOfExperience", "experience"),
    )
    fee: float = Field(default=0.0, validation_alias=AliasChoices("fee", "consultationFee"))

    @field_validator("id", mode="before")
    @classmethod
    def _id_text(cls, value: Any) -> Any:
        return _id_as_text(value)

    @field_validator("first_name", "last_name", "specialization", mode="before")
    @classmethod
    def _blank_text(cls, value: Any) -> Any:
        return _blank_if_none(value)

    @field_validator("experience_years", mode="before")
    @classmethod
    def _experience(cls, value: Any) -> int:
        return _non_negative_int(value)

    @field_validator("fee", mode="before")
    @classmethod
    def _fee(cls, value: Any) -> float:
        return max(0.0, coerce_number(value))

    def to_provider(self) -> Provider:
        name = self.full_name or " ".join(part for part in (self.first_name, self.last_name) if part)
        address = self.address or AddressPayload()
        return Provider(
            id=self.id,
            name=name,
            specialization=self.specialization,
            address=Address(
                street=address.street,
                city=address.city,
                state=address.state,
                country=address.country,
            ),
            experience_years=self.experience_years,
            fee=self.fee,
        )


class ProductPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    category: str | None = None
    brand: str | None = None
    price: float | None = None
    stock: int = 0
    sold_count: int = Field(default=0, validation_alias=AliasChoices("soldCount", "sold_count"))
    images: list[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id_text(cls, value: Any) -> Any:
        return _id_as_text(value)

    @field_validator("name", mode="before")
    @classmethod
    def _name_text(cls, value: Any) -> Any:
        return _blank_if_none(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> float | None:
        if value is None:
            return None
        number = coerce_number(value, default=-1.0)
        return number if number >= 0 else None

    @field_validator("stock", "sold_count", mode="before")
    @classmethod
    def _counts(cls, value: Any) -> int:
        return _non_negative_int(value)

    @field_validator("category", "brand", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("images", mode="before")
    @classmethod
    def _image_urls(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        urls: list[str] = []
        for item in value:
            url = item.get("url") if isinstance(item, dict) else item
            if isinstance(url, str) and url:
                urls.append(url)
        return urls

    def to_product(self) -> Product:
        return Product(
            id=self.id,
            name=self.name,
            category=self.category,
            brand=self.brand,
            price=self.price,
            stock=self.stock,
            sold_count=self.sold_count,
            images=tuple(self.images),
        )


class AppointmentPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    timestamp: str | None = Field(
        default=None,
        validation_alias=AliasChoices("appointmentDate", "dateTime", "date", "createdAt"),
    )
    status: AppointmentStatus = AppointmentStatus.SCHEDULED

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> AppointmentStatus:
        return AppointmentStatus.parse(value)

    def to_record(self) -> TimestampedRecord:
        return TimestampedRecord(timestamp=self.timestamp, status=self.status)


class _GroupKey(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: str | None = None
    status: str | None = None
    role: str | None = None


class GroupedCountPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: _GroupKey = Field(validation_alias=AliasChoices("_id", "key"))
    count: int = 0

    @field_validator("count", mode="before")
    @classmethod
    def _count(cls, value: Any) -> int:
        return _non_negative_int(value)

    def to_status_count(self) -> StatusCount:
        return StatusCount(date=self.key.date, status=AppointmentStatus.parse(self.key.status), count=self.count)

    def to_registration_count(self) -> RegistrationCount:
        return RegistrationCount(date=self.key.date, role=self.key.role or "", count=self.count)


class StatsAnalyticsPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    daily_registrations: list[GroupedCountPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("dailyRegistrations", "daily_registrations"),
    )
    appointments_trend: list[GroupedCountPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("appointmentsTrend", "appointments_trend"),
    )


class StatsPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    total_users: int = Field(default=0, validation_alias=AliasChoices("totalUsers", "total_users"))
    total_patients: int = Field(default=0, validation_alias=AliasChoices("totalPatients", "total_patients"))
    total_doctors: int = Field(default=0, validation_alias=AliasChoices("totalDoctors", "total_doctors"))
    total_appointments: int = Field(
        default=0,
        validation_alias=AliasChoices("totalAppointments", "total_appointments"),
    )
    today_appointments: int = Field(
        default=0,
        validation_alias=AliasChoices("todayAppointments", "today_appointments"),
    )
    pending_verifications: int = Field(
        default=0,
        validation_alias=AliasChoices("pendingVerifications", "pending_verifications"),
    )
    analytics: StatsAnalyticsPayload = Field(default_factory=StatsAnalyticsPayload)

    @field_validator(
        "total_users",
        "total_patients",
        "total_doctors",
        "total_appointments",
        "today_appointments",
        "pending_verifications",
        mode="before",
    )
    @classmethod
    def _totals(cls, value: Any) -> int:
        return _non_negative_int(value)


def decode(model: type[PayloadT], payload: Any, context: str) -> PayloadT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise EnvelopeDecodeError(f"invalid {context} payload: {exc.error_count()} error(s)") from exc


def decode_items(model: type[PayloadT], items: list[dict[str, Any]], context: str) -> list[PayloadT]:
    return [decode(model, item, context) for item in items]
