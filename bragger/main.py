from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from slowapi.middleware import SlowAPIMiddleware
from starlette.responses import Response

from bragger.api.errors import register_exception_handlers
from bragger.api.v1.router import api_router
from bragger.config import _DEFAULT_SECRET_KEYS, APP_VERSION, settings
from bragger.core.logging_config import configure_logging
from bragger.core.metrics import app_info
from bragger.core.rate_limit import limiter
from bragger.database import async_session, engine
from bragger.middleware.access_log import AccessLogMiddleware
from bragger.middleware.prometheus import PrometheusMiddleware
from bragger.models import Base

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def _run_alembic_stamp(alembic_cfg, revision):
    """Run alembic stamp in a thread-safe way."""
    from alembic import command
    command.stamp(alembic_cfg, revision)


def _run_alembic_upgrade(alembic_cfg, revision):
    """Run alembic upgrade in a thread-safe way."""
    from alembic import command
    command.upgrade(alembic_cfg, revision)


def check_secret_key() -> None:
    """Refuse to start with the shipped JWT secret outside development."""
    if settings.JWT_SECRET not in _DEFAULT_SECRET_KEYS:
        return
    if not settings.is_development:
        raise RuntimeError(
            "JWT_SECRET must be set to a strong random value in production. "
            'Generate one with: python -c "import secrets; print(secrets.token_urlsafe(64))"'
        )
    logger.warning(
        "Using default JWT_SECRET, acceptable for development only. "
        "Set a strong JWT_SECRET before deploying to production."
    )


async def prepare_database() -> None:
    from alembic.config import Config
    from sqlalchemy import inspect as sa_inspect
    from sqlalchemy import text

    alembic_cfg = Config(str(ALEMBIC_INI))

    if settings.RESET_DB:
        logger.warning("RESET_DB is set: dropping and recreating all tables")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        await asyncio.to_thread(_run_alembic_stamp, alembic_cfg, "head")
        return

    async with engine.connect() as conn:
        has_alembic = await conn.run_sync(
            lambda sync_conn: sa_inspect(sync_conn).has_table("alembic_version")
        )
        alembic_version = None
        if has_alembic:
            row = await conn.execute(text("SELECT version_num FROM alembic_version LIMIT 1"))
            first = row.first()
            alembic_version = first[0] if first else None

    if not has_alembic or alembic_version is None:
        # Fresh database: create tables from the models, then stamp
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await asyncio.to_thread(_run_alembic_stamp, alembic_cfg, "head")
    else:
        try:
            await asyncio.to_thread(_run_alembic_upgrade, alembic_cfg, "head")
        except Exception:
            logger.exception("Alembic migration failed")
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.ENVIRONMENT, settings.LOG_LEVEL)
    check_secret_key()

    await prepare_database()
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)

    if settings.SEED_DEMO:
        from bragger.services.seed import seed_defaults

        async with async_session() as db:
            await seed_defaults(db)

    logger.info(
        "Bragger %s started on port %s (%s)", APP_VERSION, settings.PORT, settings.ENVIRONMENT
    )
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.is_development else None,
    redoc_url=None,
    openapi_url="/api/openapi.json" if settings.is_development else None,
)

app_info.info({"version": APP_VERSION, "environment": settings.ENVIRONMENT})
app.state.limiter = limiter
register_exception_handlers(app)

app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)
app.add_middleware(PrometheusMiddleware)
app.add_middleware(AccessLogMiddleware)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/health")
@app.get("/api/health")
@limiter.exempt
async def health(request: Request):
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
        "version": APP_VERSION,
    }


@app.get("/metrics", include_in_schema=False)
@limiter.exempt
async def metrics(request: Request):
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
