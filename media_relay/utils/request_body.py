import json
from typing import Any, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from media_relay.utils.exceptions import BadRequest

ModelT = TypeVar("ModelT", bound=BaseModel)


async def read_json(request: Request) -> Any:
    """
    Parse the request body as JSON. An empty body reads as ``{}``.

    Handlers call this after the principal dependency has resolved, so body
    errors never mask a 401.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise BadRequest("Request body must be valid JSON", details=str(e)) from None


async def read_json_model(request: Request, model: type[ModelT]) -> ModelT:
    """Parse the body into ``model``; the body must be a JSON object."""
    data = await read_json(request)
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise BadRequest("Invalid request body", details=f"{location}: {first['msg']}") from None
