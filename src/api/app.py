import logging
from contextlib import asynccontextmanager
from typing import Optional
import sentry_sdk
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from src.adapter.services.lemon_squeezy import LemonSqueezyPaymentProvider
from src.adapter.services.notification_service import create_notification_service
from src.api.error import ClientError, client_error_handler, validation_error_handler
from src.api.middleware import RequestLoggingMiddleware
from src.api.routes import credits, usage, payments, referrals
from src.app.services.notification_service import NotificationService
from src.app.services.payment_provider import PaymentProvider
from src.depends import build_engine, build_session_factory

logger = logging.getLogger(__name__)


def create_app(
    config,
    payment_provider: Optional[PaymentProvider] = None,
    notification_service: Optional[NotificationService] = None,
) -> FastAPI:
    """
    Build the FastAPI application

    The engine and session factory are created here, once per app, and
    disposed on shutdown. Tests pass their own provider and notifier.
    """
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if config.ENABLE_SENTRY and config.DSN_SENTRY:
        sentry_sdk.init(dsn=config.DSN_SENTRY, environment=config.SENTRY_ENVIRONMENT)
        logger.info("Sentry enabled")

    engine = build_engine(config.DB_URI)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await engine.dispose()

    app = FastAPI(title="Credit Ledger Service", lifespan=lifespan)

    app.state.config = config
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.payment_provider = payment_provider or LemonSqueezyPaymentProvider.from_config(config)
    app.state.notification_service = notification_service or create_notification_service(
        config.NOTIFICATION_WEBHOOK_URL
    )

    if config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=config.CORS_ALLOW_CREDENTIALS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(ClientError, client_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(credits.router)
    app.include_router(usage.router)
    app.include_router(payments.router)
    app.include_router(payments.webhook_router)
    app.include_router(referrals.router)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app
