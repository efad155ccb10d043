from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from office_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from office_chat.api.middleware.metrics import RequestTimingMiddleware
from office_chat.api.v1.routers import (
    conversations,
    health,
    messages,
    users,
    ws,
)
from office_chat.application.exceptions import (
    AppError,
    ConflictError,
    ForbiddenError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    UnauthenticatedError,
)
from office_chat.config import settings
from office_chat.infrastructure.db.uow import session_uow
from office_chat.infrastructure.ws.manager import ConnectionManager
from office_chat.services.membership_router import MembershipRouter
from office_chat.services.presence import PresenceTracker

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[AppError], int] = {
    UnauthenticatedError: 401,
    ForbiddenError: 403,
    InvalidArgumentError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    InternalError: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    logger.info("Chat service starting")
    yield
    logger.info(
        "Chat service stopping with %d open connections",
        app.state.connections.connection_count,
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Office Chat Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    connections = ConnectionManager()
    app.state.connections = connections
    app.state.presence = PresenceTracker(connections)
    app.state.membership_router = MembershipRouter(connections)
    app.state.uow_factory = session_uow

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(users.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(_req: Request, exc: AppError) -> JSONResponse:
        status_code = _STATUS_BY_ERROR.get(type(exc), 500)
        if status_code == 500:
            logger.error("Internal error: %s", exc.detail)
        headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.detail},
            headers=headers,
        )

    @app.exception_handler(SQLAlchemyError)
    async def _database_error(req: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error on %s %s", req.method, req.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
