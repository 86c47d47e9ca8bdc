from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from payit.core.config import Config, load_config
from payit.routes.checkout import router as checkout_router
from payit.routes.pages import router as pages_router
from payit.services.checkout_service import CheckoutDriver, CheckoutService
from payit.services.error_log import log_system_error
from payit.services.stripe_driver import StripeCheckoutDriver

logger = logging.getLogger("payit.access")


def _init_sentry(config: Config) -> None:
    if not config.sentry_dsn:
        return
    sentry_sdk.init(
        dsn=config.sentry_dsn,
        integrations=[FastApiIntegration()],
        traces_sample_rate=config.sentry_traces_sample_rate,
        send_default_pii=False,
        environment=config.app_env,
    )


def create_app(
    config: Config | None = None, *, driver: CheckoutDriver | None = None
) -> FastAPI:
    """
    Build the ASGI application.

    `config` defaults to `load_config()`, which raises `ConfigurationError` when the
    environment is incomplete. `driver` defaults to the Stripe-backed driver.
    """
    if config is None:
        config = load_config()
    if driver is None:
        driver = StripeCheckoutDriver(config.stripe_secret_key, config.product)

    _init_sentry(config)

    app = FastAPI(title="PayIt", version="0.1.0")
    app.state.config = config
    app.state.checkout_service = CheckoutService(driver)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        # Failure details are recorded once, where the error is handled.
        logger.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.get("/health")
    async def health() -> dict:
        return {"ok": True}

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        log_system_error(
            route=str(request.url.path),
            message="Unhandled server error",
            err=exc,
            meta={"method": request.method},
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(checkout_router, prefix="/api")
    app.include_router(pages_router)
    return app
