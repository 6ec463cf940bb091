from __future__ import annotations

import re

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from domain.exceptions import ExtractionParseError

_OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?```$")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (```json or bare ```) and whitespace."""
    clean = text.strip()
    if clean.startswith("```"):
        clean = _OPENING_FENCE.sub("", clean, count=1)
        clean = _CLOSING_FENCE.sub("", clean, count=1)
    return clean.strip()


def parse_structured_response[T: BaseModel](text: str | None, model: type[T]) -> T:
    """Validate a raw model response against ``model``.

    Raises:
        ExtractionParseError: If the text is empty, not JSON, or does not match the schema.

    """
    if not text or not text.strip():
        msg = "Empty response from inference service"
        raise ExtractionParseError(msg)
    try:
        return model.model_validate_json(strip_code_fences(text))
    except PydanticValidationError as e:
        msg = f"Response does not match {model.__name__}: {e.error_count()} error(s)"
        raise ExtractionParseError(msg) from e
