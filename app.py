#!/usr/bin/env python3
"""
Anonymous message board API.

Boards hold threads, threads hold replies. Everything is anonymous: each
thread and reply carries its own delete password instead of an owner.

    uvicorn app:app
"""
import logging
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from config import (ALLOWED_ORIGINS, DB_PATH, DEFAULT_HOST, DEFAULT_PORT, LOG_FILE, LOG_LEVEL,
                    MAX_REQUEST_SIZE_MB, HTTP_REQUEST_ENTITY_TOO_LARGE, HTTP_INTERNAL_SERVER_ERROR)
from database import DatabaseManager
from endpoints import get_all_routers
from exceptions import Exceptions
from logging_config import setup_logging
from models import ErrorResponse

logger = logging.getLogger(__name__)


SECURITY_HEADERS = {
    # Only allow the board to be framed by its own pages
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "Referrer-Policy": "same-origin",
    "X-Content-Type-Options": "nosniff",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE_MB * 1024 * 1024:
            return JSONResponse(
                status_code=HTTP_REQUEST_ENTITY_TOO_LARGE,
                content=ErrorResponse(error="Request Entity Too Large", message="Request entity too large").model_dump()
            )

        response = await call_next(request)

        response.headers.update(SECURITY_HEADERS)

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    # one store connection for the lifetime of the process
    await app.state.db.connect()
    try:
        yield
    finally:
        await app.state.db.close()


def create_app(database: Optional[DatabaseManager] = None) -> FastAPI:
    setup_logging(LOG_LEVEL, LOG_FILE)

    app = FastAPI(
        title="Message Board API",
        description="Anonymous threads and replies on named boards",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.db = database if database is not None else DatabaseManager(DB_PATH)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"]
    )

    for router in get_all_routers():
        app.include_router(router)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=HTTPStatus(exc.status_code).phrase, message=str(exc.detail)).model_dump(),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        fields = sorted({str(error["loc"][-1]) for error in exc.errors() if error.get("loc")})
        logger.info("Rejected %s %s: invalid fields %s", request.method, request.url.path, fields)
        missing = Exceptions.MISSING_FIELDS
        return JSONResponse(
            status_code=missing.status_code,
            content=ErrorResponse(
                error=HTTPStatus(missing.status_code).phrase,
                message=missing.detail,
                details={"fields": fields}
            ).model_dump()
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=HTTP_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error="Internal Server Error", message="An unexpected error occurred").model_dump(),
            # unhandled errors are answered outside the middleware stack
            headers=SECURITY_HEADERS
        )

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=DEFAULT_HOST, port=DEFAULT_PORT)
