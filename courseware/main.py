from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from courseware.api import dependencies
from courseware.api.admin import router as admin_router
from courseware.api.checkpoints import router as checkpoints_router
from courseware.api.content_admin import router as content_admin_router
from courseware.api.health import router as health_router
from courseware.api.metrics_endpoint import router as metrics_router
from courseware.core.config import SETTINGS
from courseware.core.logging import setup_logging
from courseware.db.engine import lifespan_db
from courseware.db.redis import lifespan_redis
from courseware.middleware.metrics import MetricsMiddleware
from courseware.middleware.request_context import RequestContextMiddleware
from courseware.services.errors import AuthenticationError, CoursewareError
from courseware.services.object_storage import HttpObjectStorage

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_db():
        async with lifespan_redis():
            try:
                yield
            finally:
                if isinstance(dependencies.object_storage, HttpObjectStorage):
                    await dependencies.object_storage.aclose()


app = FastAPI(
    title="courseware-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=True,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["*"],
)

# Last added runs first: RequestContext -> Metrics -> CORS -> route.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(CoursewareError)
async def _courseware_error(_request: Request, exc: CoursewareError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.public_message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def _invalid_body(_request: Request, exc: RequestValidationError) -> JSONResponse:
    # Field locations only; input values may contain ids or paths.
    logger.info(
        "Invalid request body: %s",
        [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()],
    )
    return JSONResponse(status_code=400, content={"detail": "Invalid request body"})


app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(content_admin_router)
app.include_router(checkpoints_router)
app.include_router(admin_router)

logger.info(
    "courseware-service started  env=%s log_level=%s port=%d storage=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "remote" if SETTINGS.storage_configured else "in-memory",
    "on" if SETTINGS.is_dev else "off",
)
