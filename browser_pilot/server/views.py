from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from browser_pilot.exceptions import MissingFieldError


class RequestBody(BaseModel):
    """Lenient request body: unknown keys are ignored and every field may be absent.

    Presence checks live in the command handlers, so a missing or malformed body
    ends up as the same "X required" error as an empty field.
    """

    model_config = ConfigDict(extra='ignore', coerce_numbers_to_str=True)


class NavigateRequest(RequestBody):
    url: Optional[str] = None


class SearchRequest(RequestBody):
    query: Optional[str] = None


class PromptRequest(RequestBody):
    prompt: Optional[str] = None


class ChatRequest(RequestBody):
    message: Optional[str] = None
    context: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    status: Optional[str] = None


T = TypeVar('T', bound=RequestBody)


def parse_body(model: Type[T], payload: Any, required: str) -> T:
    """Validate a decoded JSON payload; anything unusable is reported as a missing field."""
    if not isinstance(payload, dict):
        payload = {}
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise MissingFieldError(required) from e
