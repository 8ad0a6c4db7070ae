from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

ADMIN_SEARCH_FIELDS: dict[str, tuple[str, ...]] = {
    "doctors": ("firstName", "lastName", "email", "specialization"),
    "patients": ("firstName", "lastName", "email", "bloodGroup"),
    "appointments": (
        "patientId.firstName",
        "patientId.lastName",
        "doctorId.firstName",
        "doctorId.lastName",
        "status",
    ),
}


def resolve_path(record: Mapping[str, Any], path: str) -> Any:
    value: Any = record
    for key in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def search_text(record: Mapping[str, Any], fields: Sequence[str]) -> str:
    values = (resolve_path(record, field) for field in fields)
    return " ".join("" if value is None else str(value) for value in values).lower()


def filter_records(
    records: Iterable[Mapping[str, Any]],
    query: str,
    fields: Sequence[str],
) -> list[Mapping[str, Any]]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(records)
    return [record for record in records if needle in search_text(record, fields)]
