# app/main.py
import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.staticfiles import StaticFiles

from app.core.config import Settings, get_settings
from app.core.db import build_engine, build_session_factory, init_db
from app.core.exceptions import register_exception_handlers
from app.core.security import Clock, TokenCodec, utcnow
from app.routers.auth import router as auth_router
from app.routers.health import router as health_router
from app.routers.jobs import router as jobs_router
from app.routers.profile import router as profile_router
from app.services.email import Notifier, build_notifier
from app.services.storage import BlobStore, LocalBlobStore, build_blob_store

logger = logging.getLogger(__name__)

# 토큰이 필요한 경로 (OpenAPI 표시용)
PROTECTED_PREFIXES = ("/auth/me", "/api/jobs", "/api/profile")
PUBLIC_PATHS = ("/api/profile/ping",)


def _install_openapi(app: FastAPI) -> None:
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version="1.0.0",
            description="Job application tracker API",
            routes=app.routes,
        )
        comps = schema.setdefault("components", {})
        schemes = comps.setdefault("securitySchemes", {})
        for key in list(schemes.keys()):
            if schemes[key].get("type") == "http":
                schemes.pop(key, None)
        schemes["BearerAuth"] = {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
        for path, path_item in schema.get("paths", {}).items():
            protected = path.startswith(PROTECTED_PREFIXES) and path not in PUBLIC_PATHS
            for op in list(path_item.values()):
                if isinstance(op, dict):
                    op["security"] = [{"BearerAuth": []}] if protected else []
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi


def create_app(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
    blob_store: Optional[BlobStore] = None,
    clock: Clock = utcnow,
) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(title="Job Tracker API")

    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=bool(origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %s (%.1fms)",
            request.method, request.url.path, response.status_code, (time.perf_counter() - start) * 1000,
        )
        return response

    register_exception_handlers(app)

    engine = build_engine(settings.DATABASE_URL)
    init_db(engine)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.clock = clock
    app.state.token_codec = TokenCodec(
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALG,
        expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        clock=clock,
    )
    app.state.notifier = notifier or build_notifier(settings)
    app.state.blob_store = blob_store or build_blob_store(settings)

    for r in (health_router, auth_router, jobs_router, profile_router):
        app.include_router(r)

    store = app.state.blob_store
    if isinstance(store, LocalBlobStore):
        app.mount("/uploads", StaticFiles(directory=str(store.directory)), name="uploads")

    _install_openapi(app)

    logger.info("Job Tracker API ready (%s, storage=%s)", settings.ENVIRONMENT, type(store).__name__)
    return app


app = create_app()
