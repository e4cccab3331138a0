"""HTTP middleware for the docpipe API.

Starlette runs middleware last-added-first.  ``main.py`` adds
:class:`ErrorHandlingMiddleware` before :class:`RequestLoggingMiddleware`, so
requests pass through logging first and the request log records the status
code after pipeline errors have been turned into ``{code, message}`` JSON.
Request validation failures never reach the middleware; FastAPI answers them
from the handler installed by :func:`register_exception_handlers`.
"""

from __future__ import annotations

import time
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from docpipe.api.schemas import ErrorResponse
from docpipe.utils.errors import DocPipeError
from docpipe.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

INVALID_REQUEST_CODE = "INVALID_REQUEST"
INTERNAL_ERROR_CODE = "INTERNAL_ERROR"


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Allow browser clients from *allowed_origins* (every origin when omitted)."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One ``http_request`` log line per request, tagged with a request id.

    The id is taken from an incoming ``X-Request-ID`` header or generated,
    bound into structlog's context vars for every log line emitted while the
    request runs, and echoed back on the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        start = time.perf_counter()
        status = 500

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            try:
                response = await call_next(request)
                status = response.status_code
                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            finally:
                _logger.info(
                    "http_request",
                    method=request.method,
                    path=request.url.path,
                    status=status,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _validation_message(exc)
    _logger.warning(
        "request_failed",
        code=INVALID_REQUEST_CODE,
        status=422,
        error=message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(code=INVALID_REQUEST_CODE, message=message).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Replace FastAPI's ``{"detail": [...]}`` validation body with ``{code, message}``."""
    app.add_exception_handler(RequestValidationError, _handle_validation_error)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn exceptions raised by routes into ``{code, message}`` JSON.

    :class:`DocPipeError` keeps its own status; client-side errors (4xx) log
    at warning, upstream and server failures at error.  Any other exception
    is logged with its traceback and answered with a 500 ``INTERNAL_ERROR``
    that does not leak the exception text.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except DocPipeError as exc:
            log = _logger.warning if exc.status_code < 500 else _logger.error
            log(
                "request_failed",
                code=exc.code,
                status=exc.status_code,
                error=exc.message,
                provider=exc.provider_name,
                path=request.url.path,
            )
            return JSONResponse(
                status_code=exc.status_code,
                content=ErrorResponse(**exc.to_dict()).model_dump(),
            )
        except Exception:
            _logger.exception("request_crashed", path=request.url.path)
            return JSONResponse(
                status_code=500,
                content=ErrorResponse(
                    code=INTERNAL_ERROR_CODE, message="Internal server error"
                ).model_dump(),
            )
