"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auditwatch_common import AuditwatchConfig

from auditwatch.config import get_config
from auditwatch.errors import (
    AuditwatchError,
    ChannelConfigError,
    NotConfiguredError,
    NotFoundError,
    SourceError,
    StoreError,
)
from auditwatch.log import configure_logging
from auditwatch.runtime import Runtime
from auditwatch_api.config import settings
from auditwatch_api.routers import channels, events, rules, setup

log = logging.getLogger(__name__)

_ERROR_STATUS: list[tuple[type[AuditwatchError], int]] = [
    (NotFoundError, 404),
    (NotConfiguredError, 409),
    (ChannelConfigError, 422),
    (SourceError, 502),
    (StoreError, 503),
]


async def _domain_error(request: Request, exc: AuditwatchError) -> JSONResponse:
    status = next((code for kind, code in _ERROR_STATUS if isinstance(exc, kind)), 500)
    if status >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def create_app(
    config: AuditwatchConfig | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    schedule: bool = True,
    poll: bool | None = None,
) -> FastAPI:
    config = config or get_config()
    poll = settings.poll_enabled if poll is None else poll

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with Runtime.open(config, schedule=schedule, http_client=http_client) as runtime:
            if poll:
                runtime.start_polling()
            app.state.runtime = runtime
            yield

    app = FastAPI(
        title="auditwatch API",
        description="Audit event alerting — rules, channels and event queries",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AuditwatchError, _domain_error)

    app.include_router(events.router, prefix="/api")
    app.include_router(rules.router, prefix="/api")
    app.include_router(channels.router, prefix="/api")
    app.include_router(setup.router, prefix="/api")

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app


def run():
    import uvicorn

    configure_logging(get_config().log_level)
    uvicorn.run(create_app(), host=settings.host, port=settings.port)
