"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import files_router
from app.api.v1 import router as v1_router
from app.api.v1.auth import get_credential_verifier
from app.core.config import settings
from app.core.errors import PortalError
from app.services.identity import ensure_default_admin
from app.storage import get_stores

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if settings.SEED_DEFAULT_ADMIN:
        stores = app.dependency_overrides.get(get_stores, get_stores)()
        ensure_default_admin(
            stores.identity,
            app.dependency_overrides.get(get_credential_verifier, get_credential_verifier)(),
            username=settings.DEFAULT_ADMIN_USERNAME,
            password=settings.DEFAULT_ADMIN_PASSWORD.get_secret_value(),
            full_name=settings.DEFAULT_ADMIN_FULL_NAME,
            email=settings.DEFAULT_ADMIN_EMAIL,
        )
    logger.info(
        "Portal started",
        extra={"storage_backend": settings.STORAGE_BACKEND, "environment": settings.APP_ENV},
    )
    yield


app = FastAPI(
    title="Portal Layanan Desa API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    """Map the domain error taxonomy to HTTP status codes."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing fields are a 400 with the field-level errors attached."""
    return JSONResponse(
        status_code=400,
        content={"detail": "Data tidak valid", "errors": jsonable_encoder(exc.errors())},
    )


app.include_router(v1_router, prefix=settings.API_V1_PREFIX)
app.include_router(files_router)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Portal Layanan Desa API"}
