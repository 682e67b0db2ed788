"""
Request payload validation.

Presence checks run first so the rejection names the missing fields, then the
payload is parsed into its pydantic schema for type checks.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from pings.responses import ValidationFailed

ModelT = TypeVar("ModelT", bound=BaseModel)


def is_blank(value: Any) -> bool:
    return value is None or value == ""


def require_fields(
    payload: Mapping[str, Any],
    fields: Sequence[str],
    *,
    prefix: str = "",
) -> None:
    """Raise ValidationFailed listing every required field that is missing."""
    missing = [f"{prefix}{name}" for name in fields if is_blank(payload.get(name))]
    if missing:
        raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")


def require_choice(value: Any, choices: Iterable[str], label: str) -> None:
    choices = list(choices)
    if value not in choices:
        raise ValidationFailed(
            f"Invalid {label}. Must be one of: {', '.join(choices)}"
        )


def parse_payload(model: Type[ModelT], payload: Mapping[str, Any]) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "body"
        raise ValidationFailed(f"Invalid field: {location}") from exc
