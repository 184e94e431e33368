"""Shared API request/response helpers.

Domain models live in bridge_shared.models; this module only covers HTTP
layer concerns.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

# Re-export ErrorResponse for convenience - this is the standard error format
from bridge_shared.models.errors import BridgeError, ErrorCode, ErrorResponse

__all__ = [
    "ErrorCode",
    "ErrorResponse",
    "validate_body",
]

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_body(model: type[ModelT], body: dict[str, Any]) -> ModelT:
    """Validate a parsed JSON body against a request model.

    Args:
        model: Request model class
        body: Parsed JSON object

    Returns:
        The validated model instance

    Raises:
        BridgeError: INVALID_REQUEST describing the first failing field
    """
    try:
        return model.model_validate(body)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "body"
        raise BridgeError(
            ErrorCode.INVALID_REQUEST,
            message=f"Invalid value for {location}.",
            detail=first.get("msg"),
        ) from e
