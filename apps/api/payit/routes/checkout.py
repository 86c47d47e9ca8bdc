from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, TypeVar

from fastapi import APIRouter, HTTPException, Request, Response, status
from pydantic import ValidationError
from starlette.requests import ClientDisconnect

from payit.core.deps import CheckoutDep, ConfigDep
from payit.core.errors import InvalidPayloadError, ResponseEncodingError
from payit.schemas.checkout import CheckoutSessionRequest, CheckoutSessionResult
from payit.services.error_log import log_system_error

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")

_DISCONNECT_POLL_SECONDS = 0.25
_STATUS_CLIENT_CLOSED_REQUEST = 499


def _is_trailing_data(err: Any) -> bool:
    if err.get("type") != "json_invalid":
        return False
    detail = f"{err.get('msg', '')} {(err.get('ctx') or {}).get('error', '')}"
    return "trailing characters" in detail


def decode_checkout_body(body: bytes) -> CheckoutSessionRequest:
    """
    Strictly decode a checkout request body.

    An empty body or a JSON `null` yields the default request. Unknown fields,
    trailing data after the first JSON value and malformed JSON are all rejected.
    """
    if not body.strip():
        return CheckoutSessionRequest()

    try:
        return CheckoutSessionRequest.model_validate_json(body)
    except ValidationError as e:
        if any(_is_trailing_data(err) for err in e.errors()):
            raise InvalidPayloadError("unexpected data in request body") from e
        raise InvalidPayloadError("invalid request payload") from e


def encode_result(result: Any) -> bytes:
    if not isinstance(result, CheckoutSessionResult):
        raise ResponseEncodingError("failed to encode response")
    try:
        return result.model_dump_json().encode("utf-8")
    except ValueError as e:
        raise ResponseEncodingError("failed to encode response") from e


async def call_until_disconnect(request: Request, call: Awaitable[T]) -> T:
    """Await `call`, cancelling it if the client goes away first."""
    task = asyncio.ensure_future(call)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=_DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                raise ClientDisconnect()
    finally:
        if not task.done():
            task.cancel()


@router.post("/checkout")
async def create_checkout_session(
    request: Request, checkout: CheckoutDep, config: ConfigDep
) -> Response:
    try:
        session_request = decode_checkout_body(await request.body())
    except InvalidPayloadError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)
        ) from e

    try:
        session = await call_until_disconnect(
            request,
            checkout.create_session(
                session_request, timeout=config.provider_timeout_seconds
            ),
        )
    except ClientDisconnect:
        logger.info("checkout aborted: client disconnected")
        return Response(status_code=_STATUS_CLIENT_CLOSED_REQUEST)
    except Exception as e:
        log_system_error(
            route="/api/checkout",
            message="Checkout session failed",
            err=e,
            meta={"error_type": type(e).__name__},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="checkout session failed",
        ) from e

    try:
        content = encode_result(session)
    except ResponseEncodingError as e:
        log_system_error(
            route="/api/checkout", message="Checkout response encoding failed", err=e
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from e

    return Response(content=content, media_type="application/json")
