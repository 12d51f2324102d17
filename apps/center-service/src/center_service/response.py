from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel


def success_response(data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"success": True, "data": data, "meta": meta or {}}


def list_response(items: Sequence[BaseModel], **meta: Any) -> dict[str, Any]:
    return success_response([item.model_dump() for item in items], meta={"count": len(items), **meta})


def error_response(code: str, message: str) -> dict[str, Any]:
    return {"success": False, "error": {"code": code, "message": message}}
