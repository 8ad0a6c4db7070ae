from __future__ import annotations

from portal.schemas.envelope import Pagination


def success_response(data: object, meta: dict[str, object] | None = None) -> dict[str, object]:
    return {"success": True, "data": data, "meta": meta or {}}


def error_response(code: str, message: str) -> dict[str, object]:
    return {"success": False, "error": {"code": code, "message": message}}


def page_meta(pagination: Pagination, count: int) -> dict[str, object]:
    return {"page": pagination.page, "pages": pagination.pages, "count": count}
