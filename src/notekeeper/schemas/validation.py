"""Request validation results and error messages.

Learn: Request bodies are validated by explicit parse_* functions rather
than by FastAPI's automatic body parsing. Each one returns a Validated
result holding either the typed value or a list of human-readable field
errors, e.g.

    ["title should not be empty", "property owner should not exist"]

The same message formatter is used for FastAPI's own
RequestValidationError (query params, undecodable JSON), so every 400
the API sends has the same shape.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from notekeeper.errors import ValidationFailed

T = TypeVar("T", bound=BaseModel)

# Where FastAPI reports the error source; not part of the field name
_LOCATIONS = {"body", "query", "path", "header"}

BODY_NOT_OBJECT = "request body must be a JSON object"


@dataclass
class Validated(Generic[T]):
    value: Optional[T] = None
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> T:
        """Return the value, or raise ValidationFailed with every error."""
        if self.errors:
            raise ValidationFailed(self.errors)
        return self.value


def _message(err: dict) -> str:
    loc = [p for p in err.get("loc", ()) if p not in _LOCATIONS]
    kind = err.get("type", "")
    ctx = err.get("ctx") or {}

    if kind == "json_invalid":
        return "request body is not valid JSON"
    if not loc:
        if kind in ("model_type", "model_attributes_type", "dict_type", "missing"):
            return BODY_NOT_OBJECT
        return err.get("msg", "invalid request")

    name = str(loc[0])
    if len(loc) > 1 and isinstance(loc[1], int):
        if kind == "string_type":
            return f"each value in {name} must be a string"
        return f"each value in {name}: {err.get('msg')}"

    if kind in ("missing", "string_too_short"):
        return f"{name} should not be empty"
    if kind == "string_type":
        return f"{name} must be a string"
    if kind in ("list_type", "tuple_type"):
        return f"{name} must be an array"
    if kind == "extra_forbidden":
        return f"property {name} should not exist"
    if kind in ("int_parsing", "int_type", "int_from_float"):
        return f"{name} must be an integer number"
    if kind == "greater_than_equal":
        return f"{name} must not be less than {ctx.get('ge')}"
    if kind == "less_than_equal":
        return f"{name} must not be greater than {ctx.get('le')}"
    return f"{name}: {err.get('msg')}"


def format_errors(errors: Iterable[dict]) -> list[str]:
    """Turn pydantic error dicts into messages, de-duplicated, order kept."""
    messages: list[str] = []
    for err in errors:
        msg = _message(err)
        if msg not in messages:
            messages.append(msg)
    return messages


def validate(model: type[T], payload: Any) -> Validated[T]:
    """Validate a decoded JSON body against `model`."""
    if not isinstance(payload, dict):
        return Validated(errors=[BODY_NOT_OBJECT])
    try:
        return Validated(value=model.model_validate(payload))
    except ValidationError as e:
        return Validated(errors=format_errors(e.errors()))
