"""
FastAPI application entry point for the contacts API.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from contacts_api import __version__
from contacts_api.config import Settings, get_settings
from contacts_api.db import DbClient, UserRecord, build_db_client
from contacts_api.dependencies import get_optional_user
from contacts_api.errors import ApiError
from contacts_api.routes import router

logger = logging.getLogger(__name__)


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.as_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {"field": _field_name(tuple(error.get("loc", ()))), "message": error.get("msg", "")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid data", "errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            content = {
                "success": False,
                "message": "Route not found",
                "path": request.url.path,
            }
        else:
            content = {"success": False, "message": str(exc.detail)}
        return JSONResponse(
            status_code=exc.status_code, content=content, headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"success": False, "message": "Internal server error"}
        if app.state.settings.is_development:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)


def create_app(
    settings: Optional[Settings] = None, db: Optional[DbClient] = None
) -> FastAPI:
    settings = settings or get_settings()
    if settings.uses_default_secret:
        if settings.is_development:
            logger.info("JWT_SECRET not set; signing tokens with the development default")
        else:
            logger.warning(
                "JWT_SECRET not set in production; tokens are signed with a public default"
            )
    if db is None:
        db = build_db_client(
            settings.database_url, in_memory=settings.use_in_memory_backends
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Closing database client")
        app.state.db.close()

    app = FastAPI(title="Contacts API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/")
    def root(user: Optional[UserRecord] = Depends(get_optional_user)):
        banner = {
            "message": "Contacts API running",
            "status": "OK",
            "version": __version__,
            "endpoints": {
                "auth": f"{settings.api_prefix}/auth",
                "contacts": f"{settings.api_prefix}/contacts",
                "health": f"{settings.api_prefix}/health",
            },
        }
        if user:
            banner["user"] = user.public_profile()
        return banner

    app.include_router(router, prefix=settings.api_prefix)
    return app
