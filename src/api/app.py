"""FastAPI application factory"""

import logging
import time
from contextlib import asynccontextmanager
import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import SQLModel
from src.api.error import (
    ClientError,
    client_error_handler,
    request_validation_error_handler,
)
from src.api.routes import invoices, payments, price_rules
import src.domain  # noqa: F401  registers the tables on SQLModel.metadata

logger = logging.getLogger(__name__)


def configure_logging(config) -> None:
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def configure_sentry(config) -> None:
    if config.ENABLE_SENTRY and config.DSN_SENTRY:
        sentry_sdk.init(
            dsn=config.DSN_SENTRY,
            environment=config.SENTRY_ENVIRONMENT,
        )
        logger.info(f"Sentry enabled ({config.SENTRY_ENVIRONMENT})")


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = app.state.config
    if config.AUTO_CREATE_TABLES:
        from src.depends import engine

        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database tables ready")
    yield


def create_app(config) -> FastAPI:
    configure_logging(config)
    configure_sentry(config)

    app = FastAPI(
        title="Clinic Billing Service",
        description="Price rules, invoices and payments for the veterinary clinic",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config

    if config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=config.CORS_ALLOW_CREDENTIALS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"({elapsed_ms:.1f} ms)"
            )
            return response

    app.add_exception_handler(ClientError, client_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    app.include_router(price_rules.router)
    app.include_router(invoices.router)
    app.include_router(payments.router)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app
