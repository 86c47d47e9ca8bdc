from __future__ import annotations

from typing import Protocol

from payit.schemas.checkout import CheckoutSessionRequest, CheckoutSessionResult

DEFAULT_QUANTITY = 1


class CheckoutDriver(Protocol):
    """A payment provider able to create hosted checkout sessions."""

    async def create_session(
        self, request: CheckoutSessionRequest, *, timeout: float | None = None
    ) -> CheckoutSessionResult: ...


def effective_quantity(quantity: int | None) -> int:
    if quantity is None or quantity <= 0:
        return DEFAULT_QUANTITY
    return quantity


class CheckoutService:
    """Provider-agnostic checkout rules sitting above a `CheckoutDriver`."""

    def __init__(self, driver: CheckoutDriver) -> None:
        self._driver = driver

    async def create_session(
        self, request: CheckoutSessionRequest, *, timeout: float | None = None
    ) -> CheckoutSessionResult:
        # Driver errors propagate untouched.
        normalized = request.model_copy(
            update={"quantity": effective_quantity(request.quantity)}
        )
        return await self._driver.create_session(normalized, timeout=timeout)
