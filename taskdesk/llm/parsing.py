"""
Validation of model output.

Everything coming back from the LLM is run through parse_json_model, which
never raises: JSON and schema errors end up in ParseResult.error.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union

from pydantic import BaseModel, Field, ValidationError

T = TypeVar("T", bound=BaseModel)


@dataclass
class ParseResult(Generic[T]):
    """Outcome of validating a model payload: a value or an error string."""
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_json_model(model_cls: Type[T], raw: Union[str, Dict[str, Any], None]) -> ParseResult[T]:
    """
    Validate a JSON string (or already-decoded dict) against a pydantic model.

    Args:
        model_cls: Target pydantic model
        raw: JSON text, possibly wrapped in a markdown fence, or a dict

    Returns:
        ParseResult holding the model instance or the error description
    """
    if raw is None or raw == "":
        return ParseResult(error="empty payload")

    if isinstance(raw, str):
        try:
            data = json.loads(_strip_code_fence(raw))
        except json.JSONDecodeError as e:
            return ParseResult(error=f"invalid JSON: {e}")
    else:
        data = raw

    if not isinstance(data, dict):
        return ParseResult(error=f"expected a JSON object, got {type(data).__name__}")

    try:
        return ParseResult(value=model_cls.model_validate(data))
    except ValidationError as e:
        return ParseResult(error=str(e))


class ClassificationResult(BaseModel):
    """Intent classification returned by the model."""
    agentType: str
    confidence: float = 0.5
    reasoning: Optional[str] = None


class ModelReply(BaseModel):
    """Free-text agent reply, expected to carry this JSON shape."""
    action: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)
    response: str
    data: Optional[Any] = None
    confidence: float = 0.7
    reasoning: Optional[str] = None
