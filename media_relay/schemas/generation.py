from typing import Any

from pydantic import BaseModel, ConfigDict


class GenerationRequest(BaseModel):
    """
    Payload forwarded to Gemini.

    ``config`` is passed through untouched; its keys are defined by the
    provider's GenerateContentConfig.
    """

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    prompt: Any = None
    model: str | None = None
    config: dict[str, Any] | None = None
