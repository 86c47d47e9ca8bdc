from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, model_validator

# Same range as the provider's 64-bit quantity field.
Int64 = Annotated[StrictInt, Field(ge=-(2**63), le=2**63 - 1)]


class CheckoutSessionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    # Unset or <= 0 means "use the default"; normalized by the service layer.
    quantity: Int64 | None = None

    @model_validator(mode="before")
    @classmethod
    def null_body_is_empty(cls, data: Any) -> Any:
        return {} if data is None else data


class CheckoutSessionResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    id: str
    url: str
