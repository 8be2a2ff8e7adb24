"""
Visa Fee Applications - FastAPI entry point

Run with `visa-fees` or `uvicorn visa_fees.main:app`.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import re
from typing import List

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from visa_fees.api import applications, events
from visa_fees.api.dependencies import close_container, get_container
from visa_fees.config import settings
from visa_fees.version import __version__

API_PREFIX = "/api/v1"

# Local frontend dev server
DEV_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

_API_KEY = re.compile(r"sk-ant-[A-Za-z0-9_-]+")
_PASSPORT_NUMBER = re.compile(r"\b[A-PR-WYa-pr-wy][1-9]\d\s?\d{4,6}\b")


class SensitiveDataFilter(logging.Filter):
    """Masks Anthropic API keys and passport numbers in log messages"""

    def filter(self, record):
        if isinstance(record.msg, str):
            masked = _API_KEY.sub("[REDACTED]", record.msg)
            record.msg = _PASSPORT_NUMBER.sub("[PASSPORT_REDACTED]", masked)
        return True


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    redactor = SensitiveDataFilter()
    for handler in logging.root.handlers:
        handler.addFilter(redactor)
    # The Anthropic SDK logs its requests through httpx
    logging.getLogger('httpx').addFilter(redactor)


def allowed_origins(extra: str) -> List[str]:
    """Dev origins plus the comma-separated CORS_ORIGINS value"""
    return DEV_ORIGINS + [origin.strip() for origin in extra.split(",") if origin.strip()]


configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service container on startup, close its HTTP client on shutdown"""
    logger.info(f"🚀 Visa Fee Applications {__version__} ({settings.environment})")
    logger.info(f"🤖 AI validation: {'enabled' if settings.ai_validation_enabled else 'disabled'}")
    get_container()

    yield

    logger.info("Stopping, in-memory applications will be discarded")
    await close_container()


app = FastAPI(
    title="Visa Fee Applications",
    description="Visa fee application records with AI-assisted validation, CSV export and receipts",
    version=__version__,
    lifespan=lifespan,
)

origins = allowed_origins(settings.cors_origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info(f"✅ CORS origins: {origins}")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Bad query/path parameters: log and return FastAPI's usual 422 body"""
    logger.error(f"Rejected parameters for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())}
    )


app.include_router(applications.router, prefix=API_PREFIX, tags=["applications"])
app.include_router(events.router, prefix=API_PREFIX, tags=["events"])


@app.get("/")
async def root():
    return {
        "app": "Visa Fee Applications",
        "version": __version__,
        "status": "running",
        "environment": settings.environment,
        "applications_url": f"{API_PREFIX}/applications",
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
    }


def run() -> None:
    """Console entry point: serve with uvicorn"""
    import uvicorn

    uvicorn.run("visa_fees.main:app", host=settings.host, port=settings.port)
