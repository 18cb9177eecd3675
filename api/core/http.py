"""
HTTP helpers: map store results to responses and render errors as
`{"error": "..."}`.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .results import StoreErrorKind, StoreResult

T = TypeVar("T")

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    StoreErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Not found"),
    StoreErrorKind.UNAVAILABLE: (status.HTTP_503_SERVICE_UNAVAILABLE, "Database unavailable"),
    StoreErrorKind.CONSTRAINT_VIOLATION: (status.HTTP_409_CONFLICT, "Conflicts with existing data"),
    StoreErrorKind.QUERY_FAILED: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
}


def raise_for_store_error(
    result: StoreResult[T],
    *,
    not_found: str | None = None,
    conflict: str | None = None,
) -> T:
    """
    Return the result value, or raise the HTTPException matching its error.
    """
    if result.ok:
        return result.value  # type: ignore[return-value]

    code, detail = _STATUS_BY_KIND[result.error]  # type: ignore[index]
    if result.error is StoreErrorKind.NOT_FOUND and not_found:
        detail = not_found
    if result.error is StoreErrorKind.CONSTRAINT_VIOLATION and conflict:
        detail = conflict
    raise HTTPException(status_code=code, detail=detail)


def bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def json_body(request: Request, *, invalid: str) -> Any:
    """
    Decode the raw request body as JSON, answering 400 with `invalid` when it
    is not.
    """
    raw = await request.body()
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise bad_request(invalid) from exc


def require_fields(payload: Any, *fields: str) -> dict[str, Any]:
    if not isinstance(payload, dict) or any(field not in payload for field in fields):
        raise bad_request("Missing required fields")
    return payload


def error_response(status_code: int, detail: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": detail})


async def _http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(exc.status_code, exc.detail)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_error method=%s path=%s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
