from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CreateCheckoutSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Any JSON value; a non-string id is an ownership mismatch
    user_id: Any = Field(None, alias="userId")


class CheckoutSessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., serialization_alias="sessionId")


class PortalSessionResponse(BaseModel):
    url: str


class WebhookReceipt(BaseModel):
    received: bool = True


class WebhookProcessingResult(BaseModel):
    """What the webhook ingestor did with one verified event"""

    event_id: str | None = None
    event_type: str
    handled: bool
    profiles_updated: int = 0
