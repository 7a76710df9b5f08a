"""Response envelope shared by every API route.

Success: ``{"success": true, ...fields}``. Failure: ``{"success": false, "error": message}``.
"""

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    return value


def ok(**fields: Any) -> dict:
    """Success envelope; pydantic models are dumped with camelCase keys."""
    return {"success": True, **{key: _to_json(value) for key, value in fields.items()}}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})
