"""JSON envelopes shared by every endpoint.

Success: ``{"status": "success", "results"?: n, "data": {<key>: ...}}``.
Failure envelopes are built by ``natours.core.error_handlers``.
"""

from typing import Any, Sequence

from fastapi import status
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel


def serialize(schema: type[BaseModel], record: Any) -> dict[str, Any]:
    """Render an ORM record through a response schema as JSON-ready camelCase data."""
    return schema.model_validate(record).model_dump(mode="json", by_alias=True)


def success(key: str, payload: Any, status_code: int = status.HTTP_200_OK, **extra: Any) -> JSONResponse:
    """Wrap a single object (or any JSON value) under ``data.<key>``."""
    return JSONResponse(
        status_code=status_code,
        content={"status": "success", **extra, "data": {key: payload}},
    )


def success_list(key: str, items: Sequence[Any]) -> JSONResponse:
    """Wrap a list under ``data.<key>`` with ``results`` equal to its length."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": "success", "results": len(items), "data": {key: list(items)}},
    )


def no_content() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)
