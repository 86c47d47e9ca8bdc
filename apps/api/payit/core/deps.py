from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from payit.core.config import Config
from payit.services.checkout_service import CheckoutService


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout_service


ConfigDep = Annotated[Config, Depends(get_config)]
CheckoutDep = Annotated[CheckoutService, Depends(get_checkout_service)]
