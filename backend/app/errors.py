"""
Error envelope for every failed request.

    {"status": "fail" | "error", "message": str, "code"?: str, "errors"?: any}

``fail`` is used for 4xx responses and ``error`` for 5xx.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException, RepositoryException, UnauthorizedException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def _default_message(status_code: int) -> str:
    mapping = {
        400: "Bad Request",
        401: "Unauthorized",
        403: "Forbidden",
        404: "Not Found",
        405: "Method Not Allowed",
        409: "Conflict",
        429: "Too Many Requests",
        500: INTERNAL_ERROR_MESSAGE,
    }
    return mapping.get(status_code, "Error")


def error_envelope(
    *,
    status_code: int,
    message: Optional[str] = None,
    code: Optional[str] = None,
    errors: Optional[Any] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "status": "error" if status_code >= 500 else "fail",
        "message": message or _default_message(status_code),
    }
    if code:
        body["code"] = code
    if errors:
        body["errors"] = jsonable_encoder(errors)
    return body


def _parse_detail(detail: Any) -> tuple[Optional[str], Optional[str], Optional[Any]]:
    if isinstance(detail, dict):
        code = detail.get("code") if isinstance(detail.get("code"), str) else None
        message = detail.get("message") or detail.get("detail")
        detail_text = message if isinstance(message, str) else None
        errors = detail.get("details") or detail.get("errors")
        return detail_text, code, errors
    if isinstance(detail, str):
        return detail, None, None
    if detail is None:
        return None, None, None
    return str(detail), None, None


def _validation_errors(exc: Any) -> list[Dict[str, Any]]:
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedException) else None
        return JSONResponse(
            error_envelope(
                status_code=exc.status_code,
                message=exc.message if exc.status_code < 500 else INTERNAL_ERROR_MESSAGE,
                code=exc.code,
                errors=exc.details if exc.status_code < 500 else None,
            ),
            status_code=exc.status_code,
            headers=headers,
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        detail_text, code, errors = _parse_detail(exc.detail)
        if exc.status_code >= 500:
            logger.error(f"HTTP {exc.status_code} on {request.url.path}: {detail_text}")
            detail_text, errors = INTERNAL_ERROR_MESSAGE, None
        return JSONResponse(
            error_envelope(
                status_code=exc.status_code, message=detail_text, code=code, errors=errors
            ),
            status_code=exc.status_code,
            headers=exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        detail_text, code, errors = _parse_detail(exc.detail)
        return JSONResponse(
            error_envelope(
                status_code=exc.status_code, message=detail_text, code=code, errors=errors
            ),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            error_envelope(
                status_code=400,
                message="Validation failed",
                code="validation_error",
                errors=_validation_errors(exc),
            ),
            status_code=400,
        )

    @app.exception_handler(ValidationError)
    async def pydantic_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            error_envelope(
                status_code=400,
                message="Validation failed",
                code="validation_error",
                errors=_validation_errors(exc),
            ),
            status_code=400,
        )

    @app.exception_handler(RepositoryException)
    async def repository_exception_handler(
        request: Request, exc: RepositoryException
    ) -> JSONResponse:
        logger.error(f"Repository failure on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(error_envelope(status_code=500), status_code=500)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(error_envelope(status_code=500), status_code=500)
