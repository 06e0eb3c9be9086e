"""
Sales Lead Tracker Backend - FastAPI application.
Dashboard routes live under API_PREFIX; external integrations under API_PREFIX/v1.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leadtracker.api import api_keys, auth, dashboard, external, leads, users
from leadtracker.config import settings
from leadtracker.core.exceptions import register_exception_handlers
from leadtracker.database import init_db
from leadtracker.schemas.common import HealthResponse

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def _warn_about_legacy_auth() -> None:
    if settings.TRUST_IDENTITY_HEADERS:
        logger.warning("TRUST_IDENTITY_HEADERS is on: X-User-* headers are accepted without verification")
    if settings.DEV_FALLBACK_USER_ID is not None:
        logger.warning(
            f"DEV_FALLBACK_USER_ID={settings.DEV_FALLBACK_USER_ID}: "
            f"requests without credentials act as that user"
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info(f"Sales Lead Tracker {VERSION} started")
    _warn_about_legacy_auth()
    yield


app = FastAPI(
    title="Sales Lead Tracker API",
    description="Lead tracking with role-based access and an API-key integration surface",
    version=VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

for module in (auth, leads, users, api_keys, dashboard, external):
    app.include_router(module.router)


@app.get("/")
async def root():
    return {"message": "Sales Lead Tracker API is running", "docs": "/docs"}


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(version=VERSION)
