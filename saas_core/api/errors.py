from __future__ import annotations

import logging
from uuid import uuid4

from fastapi import FastAPI, Request
from starlette import status
from starlette.responses import JSONResponse

from saas_core.api.middleware import REQUEST_ID_HEADER
from saas_core.core.errors import AppError

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str:
    return (
        getattr(request.state, "request_id", None)
        or request.headers.get(REQUEST_ID_HEADER)
        or str(uuid4())
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    request_id = _request_id(request)
    logger.info(
        "Request failed code=%s status=%s path=%s request_id=%s",
        exc.code,
        exc.status_code,
        request.url.path,
        request_id,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {**exc.payload(), "requestId": request_id}},
        headers={REQUEST_ID_HEADER: request_id},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = _request_id(request)
    logger.exception("Unhandled error path=%s request_id=%s", request.url.path, request_id, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "requestId": request_id,
            }
        },
        headers={REQUEST_ID_HEADER: request_id},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
