from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from payit.core.config import Config, ProductConfig
from payit.main import create_app
from payit.schemas.checkout import CheckoutSessionRequest, CheckoutSessionResult

CONFIG_ENV_KEYS = (
    "PAYIT_STRIPE_SECRET_KEY",
    "PAYIT_STRIPE_PUBLISHABLE_KEY",
    "PAYIT_PRODUCT_NAME",
    "PAYIT_PRODUCT_DESCRIPTION",
    "PAYIT_PRODUCT_PRICE_CENTS",
    "PAYIT_PRODUCT_CURRENCY",
    "PAYIT_PRODUCT_SUCCESS_URL",
    "PAYIT_PRODUCT_CANCEL_URL",
    "PAYIT_LOG_LEVEL",
    "PAYIT_PROVIDER_TIMEOUT_SECONDS",
    "APP_ENV",
    "HOST",
    "PORT",
    "SENTRY_DSN",
    "SENTRY_TRACES_SAMPLE_RATE",
)

VALID_ENV = {
    "PAYIT_STRIPE_SECRET_KEY": "sk_test_fake",
    "PAYIT_STRIPE_PUBLISHABLE_KEY": "pk_test_fake",
    "PAYIT_PRODUCT_NAME": "Field Notebook",
    "PAYIT_PRODUCT_DESCRIPTION": "A5 dotted notebook, 120 pages",
    "PAYIT_PRODUCT_PRICE_CENTS": "1999",
    "PAYIT_PRODUCT_CURRENCY": "usd",
    "PAYIT_PRODUCT_SUCCESS_URL": "http://localhost:8080/?success=1",
    "PAYIT_PRODUCT_CANCEL_URL": "http://localhost:8080/?canceled=1",
}


class FakeDriver:
    def __init__(
        self,
        result: Any = None,
        err: BaseException | None = None,
    ) -> None:
        self.result = result or CheckoutSessionResult(
            id="cs_test_1", url="https://checkout.stripe.test/c/pay/cs_test_1"
        )
        self.err = err
        self.requests: list[CheckoutSessionRequest] = []
        self.timeouts: list[float | None] = []

    async def create_session(
        self, request: CheckoutSessionRequest, *, timeout: float | None = None
    ) -> Any:
        self.requests.append(request)
        self.timeouts.append(timeout)
        if self.err is not None:
            raise self.err
        return self.result


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in CONFIG_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def valid_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    for key, value in VALID_ENV.items():
        monkeypatch.setenv(key, value)
    return dict(VALID_ENV)


@pytest.fixture
def product() -> ProductConfig:
    return ProductConfig(
        name="Field Notebook",
        description="A5 dotted notebook, 120 pages",
        price_cents=1999,
        currency="usd",
        success_url="http://localhost:8080/?success=1",
        cancel_url="http://localhost:8080/?canceled=1",
    )


@pytest.fixture
def config(product: ProductConfig) -> Config:
    return Config(
        stripe_secret_key="sk_test_fake",
        stripe_publishable_key="pk_test_fake",
        product=product,
        app_env="test",
        provider_timeout_seconds=7.5,
    )


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def app(config: Config, fake_driver: FakeDriver) -> FastAPI:
    return create_app(config, driver=fake_driver)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
