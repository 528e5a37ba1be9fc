"""
Response helper utilities for FastAPI routes

- StandardApiResponse / ApiErrorResponse envelope shared by every route
- Domain exceptions are mapped to RFC 9457 style error bodies here
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from src.resources.errors import EntryNotFoundError, EntryValidationError, StorageIOError

logger = logging.getLogger(__name__)

# ==================== Pydantic Models ====================


class ApiResponseMeta(BaseModel):
    timestamp: str
    version: str
    requestId: str
    correlationId: Optional[str] = None


T = TypeVar("T")


class StandardApiResponse(BaseModel, Generic[T]):
    success: Literal[True]
    data: T
    message: Optional[str] = None
    meta: ApiResponseMeta


class ApiErrorItem(BaseModel):
    detail: str
    pointer: Optional[str] = None
    parameter: Optional[str] = None
    header: Optional[str] = None
    code: Optional[str] = None


class ApiErrorResponse(BaseModel):
    # RFC 9457 Problem Details (+ project-specific fields)
    type: str
    title: str
    status: int
    detail: Optional[str] = None
    instance: Optional[str] = None
    success: Literal[False]
    correlationId: Optional[str] = None
    timestamp: str
    errors: Optional[List[ApiErrorItem]] = None


# ==================== Common Error Types (Project-wide) ====================


class ERROR_TYPES(StrEnum):
    INVALID_BODY = "invalid_body"
    INVALID_QUERY = "invalid_query"

    FILE_NOT_FOUND = "file_not_found"
    NOTE_NOT_FOUND = "note_not_found"
    BLOB_NOT_FOUND = "blob_not_found"

    UPLOAD_FAILED = "upload_failed"
    STORAGE_IO_FAILED = "storage_io_failed"

# ==================== Builders ====================


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_meta(request: Request, *, version: str = "1.0") -> ApiResponseMeta:
    """Build ApiResponseMeta from request headers.

    - request.state.request_id (middleware) → X-Request-ID → requestId (fallback: uuid4)
    - Correlation-Id → correlationId
    """
    request_id = (
        getattr(request.state, "request_id", None)
        or request.headers.get("X-Request-ID")
        or str(uuid4())
    )
    correlation_id = request.headers.get("Correlation-Id")
    return ApiResponseMeta(
        timestamp=_now_iso(),
        version=version,
        requestId=request_id,
        correlationId=correlation_id,
    )


def ok_response(
    request: Request,
    *,
    data: T,
    message: Optional[str] = None,
    status_code: int = 200,
    version: str = "1.0",
) -> JSONResponse:
    """Return a StandardApiResponse[T] JSON response (camelCase data)."""
    body = StandardApiResponse[T](
        success=True,
        data=data,
        message=message,
        meta=build_meta(request, version=version),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


def error_response(
    request: Request,
    *,
    status_code: int,
    title: str,
    detail: str = "",
    type_: str = "about:blank",
    instance: Optional[str] = None,
    errors: Optional[List[ApiErrorItem]] = None,
) -> JSONResponse:
    """Return a project-standard ApiErrorResponse JSON response (RFC 9457 style)."""
    body = ApiErrorResponse(
        type=type_,
        title=title,
        status=status_code,
        detail=detail or None,
        instance=instance or request.url.path,
        success=False,
        correlationId=request.headers.get("Correlation-Id"),
        timestamp=_now_iso(),
        errors=errors,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _validation_items(errors: List[Dict[str, Any]]) -> List[ApiErrorItem]:
    items = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ())]
        items.append(
            ApiErrorItem(
                detail=str(err.get("msg", "")),
                pointer="/" + "/".join(loc) if loc else None,
                code=err.get("type"),
            )
        )
    return items


# ==================== Exception Handlers ====================


async def _handle_not_found(request: Request, exc: EntryNotFoundError) -> JSONResponse:
    type_ = {
        "note": ERROR_TYPES.NOTE_NOT_FOUND,
        "blob": ERROR_TYPES.BLOB_NOT_FOUND,
    }.get(exc.kind, ERROR_TYPES.FILE_NOT_FOUND)
    return error_response(request, status_code=404, title="Not Found", detail=str(exc), type_=type_)


async def _handle_entry_validation(request: Request, exc: EntryValidationError) -> JSONResponse:
    return error_response(
        request,
        status_code=400,
        title="Bad Request",
        detail=str(exc),
        type_=ERROR_TYPES.INVALID_BODY,
        errors=[ApiErrorItem(detail=str(exc), parameter=exc.field)],
    )


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        request,
        status_code=400,
        title="Bad Request",
        detail="요청 형식이 올바르지 않습니다",
        type_=ERROR_TYPES.INVALID_BODY,
        errors=_validation_items(list(exc.errors())),
    )


async def _handle_model_validation(request: Request, exc: ValidationError) -> JSONResponse:
    return error_response(
        request,
        status_code=400,
        title="Bad Request",
        detail="입력 값 검증에 실패했습니다",
        type_=ERROR_TYPES.INVALID_BODY,
        errors=_validation_items(list(exc.errors())),
    )


async def _handle_storage_io(request: Request, exc: StorageIOError) -> JSONResponse:
    logger.error(f"[api] 저장소 I/O 실패: path={request.url.path}, target={exc.path}, error={exc}")
    return error_response(
        request,
        status_code=500,
        title="Storage Error",
        detail=str(exc),
        type_=ERROR_TYPES.STORAGE_IO_FAILED,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EntryNotFoundError, _handle_not_found)
    app.add_exception_handler(EntryValidationError, _handle_entry_validation)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(ValidationError, _handle_model_validation)
    app.add_exception_handler(StorageIOError, _handle_storage_io)
