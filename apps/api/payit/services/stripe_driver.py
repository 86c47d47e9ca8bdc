from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import stripe

from payit.core.config import ProductConfig
from payit.core.errors import ProviderError
from payit.schemas.checkout import CheckoutSessionRequest, CheckoutSessionResult
from payit.services.checkout_service import effective_quantity

logger = logging.getLogger(__name__)


class SessionCreator(Protocol):
    async def create_async(self, params: dict[str, Any]) -> Any: ...


def new_stripe_sessions(api_key: str) -> SessionCreator:
    # Single attempt per call; retry policy belongs to callers.
    client = stripe.StripeClient(api_key, max_network_retries=0)
    return client.v1.checkout.sessions


class StripeCheckoutDriver:
    """Creates Stripe Checkout sessions for the configured product."""

    def __init__(
        self,
        api_key: str,
        product: ProductConfig,
        *,
        sessions: SessionCreator | None = None,
    ) -> None:
        self._product = product
        self._sessions = sessions if sessions is not None else new_stripe_sessions(api_key)

    def build_params(self, quantity: int | None) -> dict[str, Any]:
        product = self._product
        return {
            "mode": "payment",
            "payment_method_types": ["card"],
            "success_url": product.success_url,
            "cancel_url": product.cancel_url,
            "line_items": [
                {
                    "quantity": effective_quantity(quantity),
                    "price_data": {
                        "currency": product.currency,
                        "unit_amount": product.price_cents,
                        "product_data": {
                            "name": product.name,
                            "description": product.description,
                        },
                    },
                }
            ],
        }

    async def create_session(
        self, request: CheckoutSessionRequest, *, timeout: float | None = None
    ) -> CheckoutSessionResult:
        params = self.build_params(request.quantity)

        # Cancelling the awaiting task aborts the in-flight HTTP request.
        session = await asyncio.wait_for(
            self._sessions.create_async(params), timeout=timeout
        )
        session_id = getattr(session, "id", None)
        session_url = getattr(session, "url", None)
        if session is None or not session_id or not session_url:
            raise ProviderError("stripe returned no session")

        logger.info(
            "stripe checkout session created id=%s quantity=%s",
            session_id,
            params["line_items"][0]["quantity"],
        )
        return CheckoutSessionResult(id=str(session_id), url=str(session_url))
